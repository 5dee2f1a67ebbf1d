"""
Single-Use Seals

A revealed seal names the transaction output that controls a right. Seals
defined inside a transition may omit the txid, meaning "output of the
witness transaction"; those are resolved against the witness txid. A
concealed seal is only a commitment and can not be resolved at all.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .canonicalization import canonicalize
from .errors import SealResolutionError
from .hashing import sha256_hex
from .primitives import OutPoint, Txid, check_txid


@dataclass(frozen=True)
class RevealedSeal:
    """Seal definition with its blinding factor revealed."""
    vout: int
    txid: Optional[Txid] = None
    blinding: int = 0

    def __post_init__(self):
        if self.txid is not None:
            check_txid(self.txid)
        if isinstance(self.vout, bool) or not isinstance(self.vout, int) or self.vout < 0:
            raise ValueError(f"Invalid seal vout {self.vout!r}")

    def is_witness_relative(self) -> bool:
        return self.txid is None

    def conceal(self) -> 'ConcealedSeal':
        """Blind the seal into its commitment."""
        return ConcealedSeal(commitment=sha256_hex(canonicalize(self.to_dict())))

    def to_dict(self) -> Dict[str, Any]:
        return {"txid": self.txid, "vout": self.vout, "blinding": self.blinding}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RevealedSeal':
        return cls(
            vout=data["vout"],
            txid=data.get("txid"),
            blinding=data.get("blinding", 0),
        )


@dataclass(frozen=True)
class ConcealedSeal:
    """Commitment to a seal; the outpoint is not known to the observer."""
    commitment: str

    def to_dict(self) -> Dict[str, Any]:
        return {"concealed": self.commitment}


Seal = Union[RevealedSeal, ConcealedSeal]


def resolve_seal(seal: RevealedSeal, witness: Optional[Txid] = None) -> OutPoint:
    """
    Resolve a revealed seal into an absolute transaction output.

    Args:
        seal: Revealed seal definition
        witness: Witness transaction id; required for witness-relative seals

    Raises:
        SealResolutionError: The seal is witness-relative and there is no
            witness to resolve it against (e.g. a genesis seal)
    """
    if not isinstance(seal, RevealedSeal):
        raise SealResolutionError("Concealed seal can not be resolved")
    if not seal.is_witness_relative():
        return OutPoint(txid=seal.txid, vout=seal.vout)
    if witness is None:
        raise SealResolutionError(
            f"Seal on output #{seal.vout} refers to a witness transaction, but none is known"
        )
    return OutPoint(txid=witness, vout=seal.vout)
