"""
Supply History Index

Caller-side collection of the supply records of one contract. It keeps
the epoch index (epoch node id -> Epoch) that burn & replace operations
refer to through `epoch_id`, attaches operations to their epochs and folds
the whole history into `Supply` snapshots.

Records stay immutable; attaching operations produces new `Epoch` values.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from .burn_replace import BurnReplace, burn_replace_from_transition
from .epoch import Epoch, epoch_from_transition
from .errors import InconsistentRecord
from .issue import Issue, issue_from_genesis, issue_from_transition
from .operation import Genesis, Transition
from .primitives import ContractId, NodeId, OutPoint
from .supply import Supply, SupplyCompleteness

logger = logging.getLogger(__name__)


class SupplyHistory:
    """
    Known issues, epochs and burn & replace operations of a contract.

    Adding the same record twice is a no-op; adding a different record
    under an existing node id is an error.
    """

    def __init__(self, contract_id: ContractId):
        self.contract_id = contract_id
        self._issues: Dict[NodeId, Issue] = {}
        self._epochs: Dict[NodeId, Epoch] = {}
        self._operations: Dict[NodeId, BurnReplace] = {}
        self._lock = threading.RLock()

    def _check_contract(self, record):
        if record.contract_id != self.contract_id:
            raise InconsistentRecord(
                f"Record {record.node_id} belongs to contract {record.contract_id}, "
                f"not {self.contract_id}",
                record.node_id,
            )

    def _put(self, index: Dict[NodeId, Any], record) -> None:
        known = index.get(record.node_id)
        if known is not None and known != record:
            raise InconsistentRecord(
                f"Conflicting records for node id {record.node_id}", record.node_id
            )
        index[record.node_id] = record

    def add_issue(self, issue: Issue) -> None:
        with self._lock:
            self._check_contract(issue)
            if issue.is_primary():
                for known in self._issues.values():
                    if known.is_primary() and known.node_id != issue.node_id:
                        raise InconsistentRecord(
                            f"Contract already has primary issue {known.node_id}", issue.node_id
                        )
            self._put(self._issues, issue)

    def add_epoch(self, epoch: Epoch) -> None:
        """
        Index an epoch. Operations it already carries are indexed too; the
        stored epoch itself keeps no operations, they are attached on read.
        """
        with self._lock:
            self._check_contract(epoch)
            for known in self._epochs.values():
                if known.no == epoch.no and known.node_id != epoch.node_id:
                    raise InconsistentRecord(
                        f"Epoch number {epoch.no} is already taken by {known.node_id}",
                        epoch.node_id,
                    )
            self._put(self._epochs, epoch.with_operations(()))
            for operation in epoch.known_operations:
                self._add_operation(operation)

    def add_burn_replace(self, operation: BurnReplace) -> None:
        with self._lock:
            self._add_operation(operation)

    def _add_operation(self, operation: BurnReplace) -> None:
        self._check_contract(operation)
        for known in self._operations.values():
            if (
                known.epoch_id == operation.epoch_id
                and known.no == operation.no
                and known.node_id != operation.node_id
            ):
                raise InconsistentRecord(
                    f"Operation number {operation.no} of epoch {operation.epoch_id} "
                    f"is already taken by {known.node_id}",
                    operation.node_id,
                )
        self._put(self._operations, operation)

    def issues(self) -> List[Issue]:
        with self._lock:
            return sorted(self._issues.values(), key=lambda i: (i.is_secondary(), i.node_id))

    def primary_issue(self) -> Optional[Issue]:
        with self._lock:
            for issue in self._issues.values():
                if issue.is_primary():
                    return issue
            return None

    def operations_for(self, epoch_id: NodeId) -> List[BurnReplace]:
        with self._lock:
            return sorted(
                (op for op in self._operations.values() if op.epoch_id == epoch_id),
                key=lambda op: op.no,
            )

    def epoch(self, epoch_id: NodeId) -> Epoch:
        """Look up an epoch with all its known operations attached."""
        with self._lock:
            try:
                epoch = self._epochs[epoch_id]
            except KeyError:
                raise KeyError(f"Unknown epoch {epoch_id}") from None
            return epoch.with_operations(self.operations_for(epoch_id))

    def epochs(self) -> List[Epoch]:
        with self._lock:
            return [
                self.epoch(epoch.node_id)
                for epoch in sorted(self._epochs.values(), key=lambda e: e.no)
            ]

    def orphan_operations(self) -> List[BurnReplace]:
        """Burn & replace operations whose epoch is not known."""
        with self._lock:
            return sorted(
                (op for op in self._operations.values() if op.epoch_id not in self._epochs),
                key=lambda op: (op.epoch_id, op.no),
            )

    def supply(
        self,
        is_known: SupplyCompleteness = SupplyCompleteness.UNASSESSED,
    ) -> Supply:
        """Fold the current history into a supply snapshot."""
        with self._lock:
            return Supply.fold(
                self.issues(),
                self.epochs(),
                self.orphan_operations(),
                is_known=is_known,
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SupplyHistory':
        """
        Build a history from a JSON document of validated operations.

        Expected layout:
            {
              "genesis": {...},
              "issues": [{"transition": {...}, "closes": ["txid:vout"], "witness": "..."}],
              "epochs": [{"transition": {...}, "no": 1, "closes": "txid:vout", "witness": "..."}],
              "burn_replaces": [{"transition": {...}, "epoch": 1, "no": 1,
                                 "closes": "txid:vout", "witness": "..."}]
            }

        Burn & replace entries name their epoch either by node id
        (`epoch_id`) or by epoch number (`epoch`).
        """
        if "genesis" not in data:
            raise ValueError("Missing required field: genesis")
        genesis = Genesis.from_dict(data["genesis"])
        history = cls(genesis.contract_id())
        history.add_issue(issue_from_genesis(genesis))

        for entry in data.get("issues", []):
            history.add_issue(issue_from_transition(
                history.contract_id,
                [OutPoint.parse(o) for o in entry["closes"]],
                Transition.from_dict(entry["transition"]),
                entry["witness"],
            ))

        epoch_ids: Dict[int, NodeId] = {}
        for entry in data.get("epochs", []):
            epoch = epoch_from_transition(
                history.contract_id,
                entry["no"],
                OutPoint.parse(entry["closes"]),
                Transition.from_dict(entry["transition"]),
                entry["witness"],
            )
            history.add_epoch(epoch)
            epoch_ids[epoch.no] = epoch.node_id

        for entry in data.get("burn_replaces", []):
            if "epoch_id" in entry:
                epoch_id = entry["epoch_id"]
            elif entry.get("epoch") in epoch_ids:
                epoch_id = epoch_ids[entry["epoch"]]
            else:
                raise ValueError(f"Burn & replace entry names unknown epoch {entry.get('epoch')}")
            history.add_burn_replace(burn_replace_from_transition(
                history.contract_id,
                epoch_id,
                entry["no"],
                OutPoint.parse(entry["closes"]),
                Transition.from_dict(entry["transition"]),
                entry["witness"],
            ))

        logger.info(
            "Loaded history of contract %s: %d issue(s), %d epoch(s), %d burn operation(s)",
            history.contract_id,
            len(history._issues), len(history._epochs), len(history._operations),
        )
        return history
