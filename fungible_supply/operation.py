"""
Contract Operations

Reference representation of the already-validated contract operations the
supply records are extracted from: a genesis and state transitions. Only
the parts the supply core reads are modelled:

- metadata fields, looked up by field type
- owned rights, looked up by right type, each either revealed or
  confidential
- the transition type tag

Node ids are content addressed: SHA-256 over the canonical JSON encoding
of the operation. A genesis node id doubles as the contract id.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import ConfidentialState
from .hashing import operation_id
from .primitives import ContractId, NodeId, check_atomic_value
from .schema import (
    FieldType,
    OwnedRightType,
    TransitionType,
    field_type,
    owned_right_type,
    transition_type,
)
from .seal import ConcealedSeal, RevealedSeal, Seal


@dataclass(frozen=True)
class ConcealedAmount:
    """Pedersen commitment to an amount; the value itself is not known."""
    commitment: str

    def to_dict(self) -> Dict[str, Any]:
        return {"concealed": self.commitment}


@dataclass(frozen=True)
class Assignment:
    """
    A single owned right assignment.

    Declarative rights (epoch, burn & replace) carry no amount; value rights
    (inflation) carry a revealed integer or a concealed commitment.
    """
    seal: Seal
    amount: Union[int, ConcealedAmount, None] = None

    def __post_init__(self):
        if isinstance(self.amount, int):
            check_atomic_value(self.amount)

    def is_revealed(self) -> bool:
        return isinstance(self.seal, RevealedSeal) and not isinstance(self.amount, ConcealedAmount)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"seal": self.seal.to_dict()}
        if isinstance(self.amount, ConcealedAmount):
            d["amount"] = self.amount.to_dict()
        elif self.amount is not None:
            d["amount"] = self.amount
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Assignment':
        seal_data = data["seal"]
        if "concealed" in seal_data:
            seal: Seal = ConcealedSeal(commitment=seal_data["concealed"])
        else:
            seal = RevealedSeal.from_dict(seal_data)

        amount = data.get("amount")
        if isinstance(amount, dict):
            amount = ConcealedAmount(commitment=amount["concealed"])
        return cls(seal=seal, amount=amount)


@dataclass(frozen=True)
class Metadata:
    """Metadata fields; each field type may carry several values."""
    fields: Mapping[FieldType, Tuple[Any, ...]] = field(default_factory=dict)

    def values(self, ftype: FieldType) -> Tuple[Any, ...]:
        return tuple(self.fields.get(ftype, ()))

    def u64(self, ftype: FieldType) -> Tuple[int, ...]:
        """Return the integer values of a field, in declaration order."""
        return tuple(v for v in self.values(ftype) if isinstance(v, int) and not isinstance(v, bool))

    def to_dict(self) -> Dict[str, Any]:
        return {ftype.name: list(values) for ftype, values in sorted(self.fields.items())}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Metadata':
        fields = {}
        for key, values in data.items():
            if not isinstance(values, (list, tuple)):
                values = [values]
            fields[field_type(key)] = tuple(values)
        return cls(fields=fields)


def _rights_to_dict(rights: Mapping[OwnedRightType, Tuple[Assignment, ...]]) -> Dict[str, Any]:
    return {rtype.name: [a.to_dict() for a in assignments] for rtype, assignments in sorted(rights.items())}


def _rights_from_dict(data: Dict[str, Any]) -> Dict[OwnedRightType, Tuple[Assignment, ...]]:
    return {
        owned_right_type(key): tuple(Assignment.from_dict(a) for a in assignments)
        for key, assignments in data.items()
    }


class Operation:
    """Common read access shared by genesis and transitions."""

    metadata: Metadata
    owned_rights: Mapping[OwnedRightType, Tuple[Assignment, ...]]

    def node_id(self) -> NodeId:
        return NodeId(operation_id(self.to_dict()))

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def owned_rights_by_type(self, rtype: OwnedRightType) -> Tuple[Assignment, ...]:
        return tuple(self.owned_rights.get(rtype, ()))

    def revealed_owned_values(self, rtype: OwnedRightType) -> List[Tuple[RevealedSeal, int]]:
        """
        Return (seal, amount) pairs of a value right, in encoding order.

        Raises:
            ConfidentialState: any assignment has a concealed seal or amount
        """
        values = []
        for assignment in self.owned_rights_by_type(rtype):
            if not assignment.is_revealed() or assignment.amount is None:
                raise ConfidentialState(
                    f"{rtype.name} assignment is not revealed", self.node_id()
                )
            values.append((assignment.seal, assignment.amount))
        return values

    def revealed_seals_by_type(self, rtype: OwnedRightType) -> List[RevealedSeal]:
        """
        Return the seals of a right, in encoding order.

        Raises:
            ConfidentialState: any assignment has a concealed seal
        """
        seals = []
        for assignment in self.owned_rights_by_type(rtype):
            if not isinstance(assignment.seal, RevealedSeal):
                raise ConfidentialState(
                    f"{rtype.name} seal is concealed", self.node_id()
                )
            seals.append(assignment.seal)
        return seals


@dataclass(frozen=True)
class Genesis(Operation):
    """Contract genesis: defines the primary issue and initial rights."""
    metadata: Metadata = field(default_factory=Metadata)
    owned_rights: Mapping[OwnedRightType, Tuple[Assignment, ...]] = field(default_factory=dict)
    chain: str = "bitcoin"

    def contract_id(self) -> ContractId:
        return ContractId(self.node_id())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain": self.chain,
            "metadata": self.metadata.to_dict(),
            "owned_rights": _rights_to_dict(self.owned_rights),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Genesis':
        return cls(
            metadata=Metadata.from_dict(data.get("metadata", {})),
            owned_rights=_rights_from_dict(data.get("owned_rights", {})),
            chain=data.get("chain", "bitcoin"),
        )


@dataclass(frozen=True)
class Transition(Operation):
    """
    State transition.

    `parents` lists node ids of the operations whose seals this transition
    closes; it makes otherwise identical transitions distinct.
    """
    transition_type: TransitionType
    metadata: Metadata = field(default_factory=Metadata)
    owned_rights: Mapping[OwnedRightType, Tuple[Assignment, ...]] = field(default_factory=dict)
    parents: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transition_type": self.transition_type.name,
            "metadata": self.metadata.to_dict(),
            "owned_rights": _rights_to_dict(self.owned_rights),
            "parents": list(self.parents),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transition':
        if "transition_type" not in data:
            raise ValueError("Missing required field: transition_type")
        return cls(
            transition_type=transition_type(data["transition_type"]),
            metadata=Metadata.from_dict(data.get("metadata", {})),
            owned_rights=_rights_from_dict(data.get("owned_rights", {})),
            parents=tuple(data.get("parents", ())),
        )
