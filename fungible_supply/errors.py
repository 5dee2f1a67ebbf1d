"""
Fungible Supply Errors

Every extraction, fold or deserialization failure is reported through one
of these exceptions. They describe data-integrity problems with already
accepted operations and are never retried.
"""

from typing import Optional


class SupplyError(ValueError):
    """Base class for supply data errors."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message)


class UnsatisfiedSchemaRequirement(SupplyError):
    """A metadata field required by the operation type is absent or invalid."""

    def __init__(self, node_id: Optional[str], field: str, detail: str = "absent"):
        self.field = field
        super().__init__(f"Operation {node_id}: field {field} is {detail}", node_id)


class InflationAssignmentConfidential(SupplyError):
    def __init__(self, node_id: str):
        super().__init__(f"Operation {node_id} has confidential inflation assignments", node_id)


class EpochSealConfidential(SupplyError):
    def __init__(self, node_id: str):
        super().__init__(f"Operation {node_id} has a confidential epoch seal", node_id)


class BurnSealConfidential(SupplyError):
    def __init__(self, node_id: str):
        super().__init__(f"Operation {node_id} has a confidential burn & replace seal", node_id)


class SealResolutionError(SupplyError):
    """A revealed seal can not be turned into an absolute transaction output."""


class UnexpectedTransitionType(SupplyError):
    def __init__(self, node_id: str, expected: str, observed: str):
        self.expected = expected
        self.observed = observed
        super().__init__(
            f"Transition {node_id} has type {observed}, expected {expected}", node_id
        )


class ReplacementExceedsBurn(SupplyError):
    """A burn & replace operation reissues more than it burns."""

    def __init__(self, node_id: str, burned: int, replaced: int):
        self.burned = burned
        self.replaced = replaced
        super().__init__(
            f"Operation {node_id} replaces {replaced} which exceeds burned {burned}", node_id
        )


class SupplyOverflow(SupplyError):
    """An amount or a sum of amounts left the unsigned 64-bit range."""


class InconsistentRecord(SupplyError):
    """Records contradict each other or their own derived fields."""


class ConfidentialState(SupplyError):
    """Owned right data is blinded and can not be read by the observer."""
