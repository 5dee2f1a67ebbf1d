"""
Burn & Replace Epochs

Epochs are numbered windows during which burn & replace operations are
allowed. The first epoch is opened by spending the epoch seal defined in
genesis; there is no epoch zero. An epoch may define the seal opening the
next epoch (absent on the final epoch) and the seal starting its first
burn & replace operation (absent when the epoch is locked).
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from .burn_replace import BurnReplace, successor_seal
from .errors import (
    ConfidentialState,
    EpochSealConfidential,
    InconsistentRecord,
    UnexpectedTransitionType,
)
from .operation import Transition
from .primitives import ContractId, NodeId, OutPoint, Txid
from .schema import OwnedRightType, TransitionType
from .seal import resolve_seal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Epoch:
    """
    Information about a burn & replace epoch.

    `known_operations` holds whatever operations of this epoch the caller
    has discovered so far, ordered by their number; it is never assumed to
    be complete.
    """
    node_id: NodeId
    no: int
    contract_id: ContractId
    closes: OutPoint
    epoch_seal: Optional[OutPoint]
    seal: Optional[OutPoint]
    witness: Txid
    known_operations: Tuple[BurnReplace, ...] = ()

    def __post_init__(self):
        if self.no < 1:
            raise InconsistentRecord(f"Epoch number must start from 1, got {self.no}", self.node_id)
        operations = tuple(sorted(self.known_operations, key=lambda op: op.no))
        seen = set()
        for operation in operations:
            if operation.epoch_id != self.node_id:
                raise InconsistentRecord(
                    f"Operation {operation.node_id} belongs to epoch {operation.epoch_id}",
                    self.node_id,
                )
            if operation.contract_id != self.contract_id:
                raise InconsistentRecord(
                    f"Operation {operation.node_id} belongs to contract {operation.contract_id}",
                    self.node_id,
                )
            if operation.no in seen:
                raise InconsistentRecord(
                    f"Epoch {self.node_id} has two operations numbered {operation.no}",
                    self.node_id,
                )
            seen.add(operation.no)
        object.__setattr__(self, "known_operations", operations)

    def __hash__(self) -> int:
        return hash(self.node_id)

    def __str__(self) -> str:
        return f"{self.no}:{self.node_id}"

    @property
    def is_final(self) -> bool:
        """No other epoch can be opened after this one."""
        return self.epoch_seal is None

    @property
    def is_unlocked(self) -> bool:
        """Burn & replace operations are allowed within this epoch."""
        return self.seal is not None

    def with_operations(self, operations: Iterable[BurnReplace]) -> 'Epoch':
        """Return a copy of the epoch carrying a new list of known operations."""
        return replace(self, known_operations=tuple(operations))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "no": self.no,
            "contract_id": self.contract_id,
            "closes": str(self.closes),
            "epoch_seal": str(self.epoch_seal) if self.epoch_seal else None,
            "seal": str(self.seal) if self.seal else None,
            "is_final": self.is_final,
            "is_unlocked": self.is_unlocked,
            "known_operations": [op.to_dict() for op in self.known_operations],
            "witness": self.witness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Epoch':
        """Restore an epoch, re-checking its derived fields."""
        epoch_seal = data.get("epoch_seal")
        seal = data.get("seal")
        epoch = cls(
            node_id=data["node_id"],
            no=data["no"],
            contract_id=data["contract_id"],
            closes=OutPoint.parse(data["closes"]),
            epoch_seal=OutPoint.parse(epoch_seal) if epoch_seal else None,
            seal=OutPoint.parse(seal) if seal else None,
            witness=data["witness"],
            known_operations=tuple(
                BurnReplace.from_dict(op) for op in data.get("known_operations", [])
            ),
        )
        if "is_final" in data and data["is_final"] != epoch.is_final:
            raise InconsistentRecord("is_final does not match epoch seal presence", epoch.node_id)
        if "is_unlocked" in data and data["is_unlocked"] != epoch.is_unlocked:
            raise InconsistentRecord("is_unlocked does not match seal presence", epoch.node_id)
        return epoch


def epoch_from_transition(
    contract_id: ContractId,
    no: int,
    closes: OutPoint,
    transition: Transition,
    witness: Txid,
    operations: Iterable[BurnReplace] = (),
) -> Epoch:
    """
    Extract an epoch from the transition opening it.

    Args:
        contract_id: Contract the transition belongs to
        no: Sequential epoch number, from 1
        closes: Epoch seal spent to open this epoch
        transition: Transition of `EPOCH` type
        witness: Witness transaction id of the transition
        operations: Already known burn & replace operations of the epoch

    Raises:
        EpochSealConfidential: the next epoch seal is concealed
        BurnSealConfidential: the first burn & replace seal is concealed
    """
    node_id = transition.node_id()
    if transition.transition_type != TransitionType.EPOCH:
        raise UnexpectedTransitionType(
            node_id, TransitionType.EPOCH.name, transition.transition_type.name
        )

    try:
        epoch_seals = transition.revealed_seals_by_type(OwnedRightType.OPEN_EPOCH)
    except ConfidentialState as err:
        raise EpochSealConfidential(node_id) from err
    epoch_seal = resolve_seal(epoch_seals[0], witness) if epoch_seals else None

    epoch = Epoch(
        node_id=node_id,
        no=no,
        contract_id=contract_id,
        closes=closes,
        epoch_seal=epoch_seal,
        seal=successor_seal(transition, node_id, witness),
        witness=witness,
        known_operations=tuple(operations),
    )
    logger.debug(
        "Extracted epoch %s (final=%s, unlocked=%s, %d known operation(s))",
        epoch, epoch.is_final, epoch.is_unlocked, len(epoch.known_operations),
    )
    return epoch
