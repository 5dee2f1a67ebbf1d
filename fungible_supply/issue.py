"""
Asset Issues

An issue is primary when produced by the contract genesis and secondary
(inflationary) when produced by a transition spending inflation rights.
Each issue also records the inflation rights it delegates further: the
seals controlling future secondary issues and the maximum amount each one
allows.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .errors import (
    ConfidentialState,
    InconsistentRecord,
    InflationAssignmentConfidential,
    UnexpectedTransitionType,
    UnsatisfiedSchemaRequirement,
)
from .operation import Genesis, Operation, Transition
from .primitives import (
    AtomicValue,
    ContractId,
    NodeId,
    OutPoint,
    Txid,
    check_atomic_value,
    checked_add,
)
from .schema import FieldType, OwnedRightType, TransitionType
from .seal import resolve_seal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InflationAllowance:
    """Maximum inflation allowed through one seal and the assignments granting it."""
    amount: AtomicValue
    indices: Tuple[int, ...]

    def __post_init__(self):
        check_atomic_value(self.amount)
        object.__setattr__(self, "indices", tuple(self.indices))


@dataclass(frozen=True)
class Issue:
    """
    Information about a particular asset issue.

    Fields are bound with client-side-validation commitments and can not be
    changed after construction. Build instances with `issue_from_genesis`
    or `issue_from_transition`.
    """
    node_id: NodeId
    contract_id: ContractId
    amount: AtomicValue
    closes: FrozenSet[OutPoint]
    inflation_assignments: Mapping[OutPoint, InflationAllowance]
    witness: Optional[Txid] = None

    def __post_init__(self):
        check_atomic_value(self.amount)
        object.__setattr__(self, "closes", frozenset(self.closes))
        object.__setattr__(
            self,
            "inflation_assignments",
            MappingProxyType(dict(sorted(self.inflation_assignments.items()))),
        )

    def __hash__(self) -> int:
        return hash(self.node_id)

    def __str__(self) -> str:
        return f"{self.node_id} -> {self.amount}"

    def is_primary(self) -> bool:
        """Issue defined as a part of genesis data."""
        return not self.closes

    def is_secondary(self) -> bool:
        """Issue created with an inflation state transition."""
        return bool(self.closes)

    def inflation_limit(self) -> AtomicValue:
        """Total inflation this issue delegates to its seals."""
        total = 0
        for allowance in self.inflation_assignments.values():
            total = checked_add(total, allowance.amount, "inflation allowance")
        return total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "contract_id": self.contract_id,
            "amount": self.amount,
            "closes": [str(o) for o in sorted(self.closes)],
            "inflation_assignments": [
                {"seal": str(seal), "amount": a.amount, "indices": list(a.indices)}
                for seal, a in self.inflation_assignments.items()
            ],
            "witness": self.witness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Issue':
        return cls(
            node_id=data["node_id"],
            contract_id=data["contract_id"],
            amount=data["amount"],
            closes=frozenset(OutPoint.parse(o) for o in data.get("closes", [])),
            inflation_assignments={
                OutPoint.parse(entry["seal"]): InflationAllowance(
                    amount=entry["amount"], indices=tuple(entry["indices"])
                )
                for entry in data.get("inflation_assignments", [])
            },
            witness=data.get("witness"),
        )


def _issued_supply(operation: Operation, node_id: NodeId) -> AtomicValue:
    values = operation.metadata.u64(FieldType.ISSUED_SUPPLY)
    if not values:
        raise UnsatisfiedSchemaRequirement(node_id, FieldType.ISSUED_SUPPLY.name)
    return check_atomic_value(values[0], "issued supply")


def _inflation_assignments(
    operation: Operation,
    node_id: NodeId,
    witness: Optional[Txid],
) -> Dict[OutPoint, InflationAllowance]:
    """
    Aggregate inflation rights by destination seal.

    Several assignments may point to the same seal; their amounts are summed
    and their indices kept in encoding order.
    """
    try:
        rights = operation.revealed_owned_values(OwnedRightType.INFLATION)
    except ConfidentialState as err:
        raise InflationAssignmentConfidential(node_id) from err

    totals: Dict[OutPoint, AtomicValue] = {}
    indices: Dict[OutPoint, list] = {}
    for index, (seal, amount) in enumerate(rights):
        outpoint = resolve_seal(seal, witness)
        totals[outpoint] = checked_add(totals.get(outpoint, 0), amount, "inflation allowance")
        indices.setdefault(outpoint, []).append(index)

    return {
        outpoint: InflationAllowance(amount=totals[outpoint], indices=tuple(indices[outpoint]))
        for outpoint in totals
    }


def issue_from_genesis(genesis: Genesis) -> Issue:
    """
    Extract the primary issue from a contract genesis.

    Genesis seals must name their transaction explicitly since there is no
    witness transaction to resolve them against.

    Raises:
        UnsatisfiedSchemaRequirement: issued supply field is absent
        InflationAssignmentConfidential: an inflation right is not revealed
        SealResolutionError: an inflation seal is witness-relative
    """
    node_id = genesis.node_id()
    issue = Issue(
        node_id=node_id,
        contract_id=genesis.contract_id(),
        amount=_issued_supply(genesis, node_id),
        closes=frozenset(),
        inflation_assignments=_inflation_assignments(genesis, node_id, None),
        witness=None,
    )
    logger.debug("Extracted primary issue %s", issue)
    return issue


def issue_from_transition(
    contract_id: ContractId,
    closes: Iterable[OutPoint],
    transition: Transition,
    witness: Txid,
) -> Issue:
    """
    Extract a secondary issue from an inflation-spending transition.

    Args:
        contract_id: Contract the transition belongs to
        closes: Seals with inflation rights spent to produce this issue
        transition: Transition of `ISSUE` type
        witness: Witness transaction id of the transition
    """
    node_id = transition.node_id()
    if transition.transition_type != TransitionType.ISSUE:
        raise UnexpectedTransitionType(
            node_id, TransitionType.ISSUE.name, transition.transition_type.name
        )
    closes = frozenset(closes)
    if not closes:
        raise InconsistentRecord(f"Secondary issue {node_id} closes no inflation seals", node_id)

    issue = Issue(
        node_id=node_id,
        contract_id=contract_id,
        amount=_issued_supply(transition, node_id),
        closes=closes,
        inflation_assignments=_inflation_assignments(transition, node_id, witness),
        witness=witness,
    )
    logger.debug("Extracted secondary issue %s closing %d seal(s)", issue, len(issue.closes))
    return issue
