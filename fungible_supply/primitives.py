"""
Fungible Supply Primitives

Identifier aliases, atomic value bounds and transaction output references
shared by every supply record.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, NewType

from .errors import SupplyOverflow


NodeId = NewType("NodeId", str)
ContractId = NewType("ContractId", str)
Txid = NewType("Txid", str)

# Amounts are unsigned 64-bit integers
AtomicValue = int
ATOMIC_VALUE_MAX: AtomicValue = 2 ** 64 - 1

TXID_PATTERN = re.compile(r'^[0-9a-f]{64}$')


def check_atomic_value(value: Any, name: str = "amount") -> AtomicValue:
    """Validate that a value fits the unsigned 64-bit amount range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > ATOMIC_VALUE_MAX:
        raise SupplyOverflow(f"{name} {value} is outside of the 64-bit unsigned range")
    return value


def checked_add(left: AtomicValue, right: AtomicValue, what: str = "sum") -> AtomicValue:
    """Add two amounts, failing when the result leaves the 64-bit range."""
    total = left + right
    if total > ATOMIC_VALUE_MAX:
        raise SupplyOverflow(f"{what} overflows 64-bit amount: {left} + {right}")
    return total


def saturating_add(left: AtomicValue, right: AtomicValue) -> AtomicValue:
    return min(left + right, ATOMIC_VALUE_MAX)


def check_txid(txid: Any) -> Txid:
    if not isinstance(txid, str) or not TXID_PATTERN.match(txid):
        raise ValueError(f"Invalid txid '{txid}': must be 64 lowercase hex characters")
    return Txid(txid)


@dataclass(frozen=True, order=True)
class OutPoint:
    """Reference to a transaction output: the place a single-use seal lives."""
    txid: Txid
    vout: int

    def __post_init__(self):
        check_txid(self.txid)
        if isinstance(self.vout, bool) or not isinstance(self.vout, int):
            raise TypeError("vout must be an integer")
        if self.vout < 0 or self.vout > 0xFFFFFFFF:
            raise ValueError(f"Invalid vout {self.vout}: must fit 32 bits")

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"

    def to_dict(self) -> Dict[str, Any]:
        return {"txid": self.txid, "vout": self.vout}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OutPoint':
        return cls(txid=data["txid"], vout=data["vout"])

    @classmethod
    def parse(cls, value: str) -> 'OutPoint':
        """Parse the `txid:vout` form produced by `str()`."""
        txid, sep, vout = value.rpartition(":")
        if not sep or not vout.isdigit():
            raise ValueError(f"Invalid outpoint '{value}': expected txid:vout")
        return cls(txid=Txid(txid), vout=int(vout))
