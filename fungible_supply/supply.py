"""
Asset Supply

Summary of the asset supply derived from the known contract data:

- known circulating supply: known issues minus known burns plus known
  replacements
- completeness: whether all supply-changing operations are known
- issue limit: the most that could ever be issued

Snapshots are values. When the underlying history grows, fold a new one.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .burn_replace import BurnReplace
from .epoch import Epoch
from .errors import InconsistentRecord, SupplyOverflow
from .hashing import report_hash
from .issue import Issue
from .primitives import (
    ATOMIC_VALUE_MAX,
    AtomicValue,
    ContractId,
    check_atomic_value,
    checked_add,
    saturating_add,
)

logger = logging.getLogger(__name__)


class SupplyMeasure(str, Enum):
    """
    Which supply figure a caller asks for.

    KNOWN_CIRCULATING: known issues, minus known burns, plus known
        replacements
    TOTAL_CIRCULATING: precise circulating supply, or nothing when some
        supply-changing operations are unknown
    ISSUE_LIMIT: genesis issue plus all inflation allowed by genesis
    """
    KNOWN_CIRCULATING = "KNOWN_CIRCULATING"
    TOTAL_CIRCULATING = "TOTAL_CIRCULATING"
    ISSUE_LIMIT = "ISSUE_LIMIT"


class SupplyCompleteness(str, Enum):
    """
    Whether all supply-changing operations are known.

    This covers issues for all spent inflation seals and burn & replace
    operations of all opened epochs. Knowing it requires scanning the
    chain for closed seals, which happens outside of this package.

    UNASSESSED: the chain was not scanned, completeness is unknown
    INCOMPLETE: some supply-changing operations have no client-side data
    COMPLETE: all client-side data is present; known supply is exact
    """
    UNASSESSED = "UNASSESSED"
    INCOMPLETE = "INCOMPLETE"
    COMPLETE = "COMPLETE"

    @classmethod
    def from_optional(cls, value: Optional[bool]) -> 'SupplyCompleteness':
        if value is None:
            return cls.UNASSESSED
        return cls.COMPLETE if value else cls.INCOMPLETE

    @classmethod
    def coerce(cls, value: Any) -> 'SupplyCompleteness':
        """Accept a member, its name, or the optional-bool form."""
        if value is None or isinstance(value, bool):
            return cls.from_optional(value)
        return cls(value)

    def as_optional(self) -> Optional[bool]:
        if self is SupplyCompleteness.UNASSESSED:
            return None
        return self is SupplyCompleteness.COMPLETE


@dataclass(frozen=True)
class Supply:
    """Point-in-time supply snapshot."""
    known_circulating: AtomicValue
    is_known: SupplyCompleteness
    issue_limit: AtomicValue

    def __post_init__(self):
        check_atomic_value(self.known_circulating, "known circulating supply")
        check_atomic_value(self.issue_limit, "issue limit")
        object.__setattr__(self, "is_known", SupplyCompleteness.coerce(self.is_known))

    def __str__(self) -> str:
        return f"circulating {self.known_circulating}, max {self.issue_limit}"

    def total_circulating(self) -> Optional[AtomicValue]:
        """Exact circulating supply if every supply-changing operation is known."""
        if self.is_known is SupplyCompleteness.COMPLETE:
            return self.known_circulating
        return None

    def measure(self, measure: SupplyMeasure) -> Optional[AtomicValue]:
        measure = SupplyMeasure(measure)
        if measure is SupplyMeasure.KNOWN_CIRCULATING:
            return self.known_circulating
        if measure is SupplyMeasure.TOTAL_CIRCULATING:
            return self.total_circulating()
        return self.issue_limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "known_circulating": self.known_circulating,
            "is_known": self.is_known.value,
            "issue_limit": self.issue_limit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Supply':
        return cls(
            known_circulating=data["known_circulating"],
            is_known=data.get("is_known"),
            issue_limit=data["issue_limit"],
        )

    @classmethod
    def fold(
        cls,
        issues: Iterable[Issue],
        epochs: Iterable[Epoch] = (),
        operations: Iterable[BurnReplace] = (),
        is_known: SupplyCompleteness = SupplyCompleteness.UNASSESSED,
    ) -> 'Supply':
        """
        Build a snapshot from the known history of one contract.

        Burn & replace operations are taken from each epoch's known
        operations and from `operations`; an operation present in both is
        counted once.

        Raises:
            InconsistentRecord: records of several contracts, several
                primary issues or one node id with different contents
            SupplyOverflow: more is burned than issued while `is_known` is
                COMPLETE, or a sum leaves the 64-bit range
        """
        issues = _unique(issues, "issue")
        epochs = list(epochs)
        burns = _unique(
            [op for epoch in epochs for op in epoch.known_operations] + list(operations),
            "burn & replace operation",
        )
        _check_single_contract(issues, epochs, burns)

        issued = 0
        for issue in issues:
            issued = checked_add(issued, issue.amount, "issued supply")
        removed = 0
        for burn in burns:
            removed = checked_add(removed, burn.supply_change, "burned supply")
        is_known = SupplyCompleteness.coerce(is_known)
        if removed > issued:
            if is_known is SupplyCompleteness.COMPLETE:
                raise SupplyOverflow(
                    f"Known burns remove {removed} but only {issued} is known to be issued"
                )
            # Burned units may come from issues the observer has not seen yet
            logger.warning(
                "Known burns remove %d but only %d is known to be issued; "
                "known circulating supply stops at 0",
                removed, issued,
            )

        supply = cls(
            known_circulating=max(issued - removed, 0),
            is_known=is_known,
            issue_limit=issue_limit(issues),
        )
        logger.info(
            "Folded supply from %d issue(s) and %d burn operation(s): %s",
            len(issues), len(burns), supply,
        )
        return supply


def issue_limit(issues: Iterable[Issue]) -> AtomicValue:
    """
    Maximum supply that might ever be issued.

    Genesis amount plus every inflation allowance defined in genesis; rights
    re-delegated by secondary issues are carved out of those allowances and
    are not counted again. Without a known genesis there is no declared cap
    and the limit is the largest representable amount.
    """
    primaries = [issue for issue in issues if issue.is_primary()]
    if not primaries:
        return ATOMIC_VALUE_MAX
    if len(primaries) > 1:
        raise InconsistentRecord(
            f"Contract has {len(primaries)} primary issues, expected one"
        )
    genesis = primaries[0]
    limit = genesis.amount
    for allowance in genesis.inflation_assignments.values():
        limit = saturating_add(limit, allowance.amount)
    return limit


def supply_report(contract_id: ContractId, supply: Supply) -> Dict[str, Any]:
    """Render a snapshot as a hash-bound report for a reporting layer."""
    report = {
        "contract_id": contract_id,
        "known_circulating": supply.known_circulating,
        "total_circulating": supply.total_circulating(),
        "issue_limit": supply.issue_limit,
        "is_known": supply.is_known.value,
    }
    report["report_hash"] = report_hash(report)
    return report


def _unique(records: Iterable, kind: str) -> List:
    by_id: Dict[str, Any] = {}
    for record in records:
        known = by_id.get(record.node_id)
        if known is None:
            by_id[record.node_id] = record
        elif known != record:
            raise InconsistentRecord(
                f"Two different {kind} records share node id {record.node_id}", record.node_id
            )
    return list(by_id.values())


def _check_single_contract(issues: List[Issue], epochs: List[Epoch], burns: List[BurnReplace]):
    contract_ids = {r.contract_id for r in issues} | {r.contract_id for r in epochs} | {
        r.contract_id for r in burns
    }
    if len(contract_ids) > 1:
        raise InconsistentRecord(
            f"Records belong to {len(contract_ids)} contracts: {sorted(contract_ids)}"
        )
