"""
Burn & Replace Operations

Within an open epoch the holder of the burn & replace right may remove
asset units from circulation (burn) and optionally reissue part of them
(replace). Each operation may define a seal enabling the next operation
of the same epoch; an operation without it is the final one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import (
    BurnSealConfidential,
    ConfidentialState,
    InconsistentRecord,
    ReplacementExceedsBurn,
    UnexpectedTransitionType,
    UnsatisfiedSchemaRequirement,
)
from .operation import Operation, Transition
from .primitives import (
    AtomicValue,
    ContractId,
    NodeId,
    OutPoint,
    Txid,
    check_atomic_value,
)
from .schema import FieldType, OwnedRightType, TransitionType
from .seal import resolve_seal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BurnReplace:
    """
    Information about a burn or burn & replace operation.

    `epoch_id` is the node id of the transition that opened the owning
    epoch; it is a lookup key, not a reference to the `Epoch` object.
    """
    node_id: NodeId
    epoch_id: NodeId
    no: int
    contract_id: ContractId
    closes: OutPoint
    does_replacement: bool
    burned_amount: AtomicValue
    replaced_amount: AtomicValue
    seal: Optional[OutPoint]
    witness: Txid

    def __post_init__(self):
        if self.no < 1:
            raise InconsistentRecord(
                f"Burn & replace operation number must start from 1, got {self.no}", self.node_id
            )
        check_atomic_value(self.burned_amount, "burned amount")
        check_atomic_value(self.replaced_amount, "replaced amount")
        if self.replaced_amount > self.burned_amount:
            raise ReplacementExceedsBurn(self.node_id, self.burned_amount, self.replaced_amount)
        if not self.does_replacement and self.replaced_amount:
            raise InconsistentRecord(
                f"Pure burn {self.node_id} can not replace {self.replaced_amount}", self.node_id
            )

    def __hash__(self) -> int:
        return hash(self.node_id)

    def __str__(self) -> str:
        return f"{self.no}:{self.node_id}"

    @property
    def supply_change(self) -> AtomicValue:
        """
        Net amount removed from circulation.

        Equals `burned_amount` for pure burns and
        `burned_amount - replaced_amount` for burn & replace.
        """
        return self.burned_amount - self.replaced_amount

    @property
    def is_final(self) -> bool:
        """No other burn or replacement can follow within the epoch."""
        return self.seal is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "epoch_id": self.epoch_id,
            "no": self.no,
            "contract_id": self.contract_id,
            "closes": str(self.closes),
            "does_replacement": self.does_replacement,
            "burned_amount": self.burned_amount,
            "replaced_amount": self.replaced_amount,
            "supply_change": self.supply_change,
            "is_final": self.is_final,
            "seal": str(self.seal) if self.seal else None,
            "witness": self.witness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BurnReplace':
        """Restore an operation, re-checking its derived fields."""
        seal = data.get("seal")
        operation = cls(
            node_id=data["node_id"],
            epoch_id=data["epoch_id"],
            no=data["no"],
            contract_id=data["contract_id"],
            closes=OutPoint.parse(data["closes"]),
            does_replacement=data["does_replacement"],
            burned_amount=data["burned_amount"],
            replaced_amount=data.get("replaced_amount", 0),
            seal=OutPoint.parse(seal) if seal else None,
            witness=data["witness"],
        )
        if "supply_change" in data and data["supply_change"] != operation.supply_change:
            raise InconsistentRecord(
                f"Supply change {data['supply_change']} does not match burned minus replaced",
                operation.node_id,
            )
        if "is_final" in data and data["is_final"] != operation.is_final:
            raise InconsistentRecord("is_final does not match seal presence", operation.node_id)
        return operation


def successor_seal(
    operation: Operation,
    node_id: NodeId,
    witness: Txid,
) -> Optional[OutPoint]:
    """Resolve the first burn & replace right of an operation, if any."""
    try:
        seals = operation.revealed_seals_by_type(OwnedRightType.BURN_REPLACE)
    except ConfidentialState as err:
        raise BurnSealConfidential(node_id) from err
    if not seals:
        return None
    return resolve_seal(seals[0], witness)


def burn_replace_from_transition(
    contract_id: ContractId,
    epoch_id: NodeId,
    no: int,
    closes: OutPoint,
    transition: Transition,
    witness: Txid,
) -> BurnReplace:
    """
    Extract a burn or burn & replace operation from its transition.

    Args:
        contract_id: Contract the transition belongs to
        epoch_id: Node id of the transition opening the owning epoch
        no: Sequential number of the operation within its epoch, from 1
        closes: Burn & replace seal spent by this operation
        transition: Transition of `BURN` or `BURN_AND_REPLACE` type
        witness: Witness transaction id of the transition

    Raises:
        UnsatisfiedSchemaRequirement: burned supply is absent, replaced
            supply is absent on a replacement, or a pure burn replaces
        BurnSealConfidential: the successor seal is concealed
        ReplacementExceedsBurn: more is replaced than burned
    """
    node_id = transition.node_id()
    if transition.transition_type == TransitionType.BURN:
        does_replacement = False
    elif transition.transition_type == TransitionType.BURN_AND_REPLACE:
        does_replacement = True
    else:
        raise UnexpectedTransitionType(
            node_id,
            f"{TransitionType.BURN.name} or {TransitionType.BURN_AND_REPLACE.name}",
            transition.transition_type.name,
        )

    burned = transition.metadata.u64(FieldType.BURNED_SUPPLY)
    if not burned:
        raise UnsatisfiedSchemaRequirement(node_id, FieldType.BURNED_SUPPLY.name)

    replaced = transition.metadata.u64(FieldType.ISSUED_SUPPLY)
    if replaced:
        replaced_amount = replaced[0]
    elif does_replacement:
        raise UnsatisfiedSchemaRequirement(node_id, FieldType.ISSUED_SUPPLY.name)
    else:
        replaced_amount = 0
    if not does_replacement and replaced_amount:
        raise UnsatisfiedSchemaRequirement(
            node_id, FieldType.ISSUED_SUPPLY.name, "non-zero on a pure burn"
        )

    operation = BurnReplace(
        node_id=node_id,
        epoch_id=epoch_id,
        no=no,
        contract_id=contract_id,
        closes=closes,
        does_replacement=does_replacement,
        burned_amount=burned[0],
        replaced_amount=replaced_amount,
        seal=successor_seal(transition, node_id, witness),
        witness=witness,
    )
    logger.debug(
        "Extracted burn operation %s in epoch %s: burned %d, replaced %d",
        operation, epoch_id, operation.burned_amount, operation.replaced_amount,
    )
    return operation
