"""
Fungible Asset Supply

Version: 0.1.0
License: MIT

Supply state of a fungible asset issued under a client-side-validated,
UTXO-anchored contract.

From already-validated contract operations the package derives:
    - issues (primary from genesis, secondary from inflation transitions)
      and the inflation rights they delegate
    - burn & replace epochs and the operations within them
    - supply snapshots: known circulating supply, a completeness flag and
      the issue limit

Knowledge may be partial. Known circulating supply is only reported as
total circulating supply when completeness has been asserted.

Usage:
    from fungible_supply import (
        Genesis,
        SupplyCompleteness,
        SupplyHistory,
        SupplyMeasure,
        issue_from_genesis,
    )

    genesis = Genesis.from_dict({...})
    history = SupplyHistory(genesis.contract_id())
    history.add_issue(issue_from_genesis(genesis))

    supply = history.supply(SupplyCompleteness.COMPLETE)
    supply.measure(SupplyMeasure.TOTAL_CIRCULATING)
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Primitives and schema tags
from .primitives import (
    ATOMIC_VALUE_MAX,
    AtomicValue,
    ContractId,
    NodeId,
    OutPoint,
    Txid,
)
from .schema import FieldType, OwnedRightType, TransitionType

# Canonicalization and hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import operation_id, report_hash, sha256_hash

# Errors
from .errors import (
    BurnSealConfidential,
    ConfidentialState,
    EpochSealConfidential,
    InconsistentRecord,
    InflationAssignmentConfidential,
    ReplacementExceedsBurn,
    SealResolutionError,
    SupplyError,
    SupplyOverflow,
    UnexpectedTransitionType,
    UnsatisfiedSchemaRequirement,
)

# Operations
from .seal import ConcealedSeal, RevealedSeal, resolve_seal
from .operation import Assignment, ConcealedAmount, Genesis, Metadata, Transition

# Supply records
from .issue import InflationAllowance, Issue, issue_from_genesis, issue_from_transition
from .burn_replace import BurnReplace, burn_replace_from_transition
from .epoch import Epoch, epoch_from_transition
from .supply import Supply, SupplyCompleteness, SupplyMeasure, issue_limit, supply_report
from .history import SupplyHistory

# Signing
from .signing import KeyPair, ReportSigner, generate_key_pair, verify_report


__all__ = [
    "__version__",

    # Primitives
    "ATOMIC_VALUE_MAX",
    "AtomicValue",
    "ContractId",
    "NodeId",
    "OutPoint",
    "Txid",
    "FieldType",
    "OwnedRightType",
    "TransitionType",

    # Canonicalization
    "canonicalize",
    "canonicalize_str",
    "operation_id",
    "report_hash",
    "sha256_hash",

    # Errors
    "BurnSealConfidential",
    "ConfidentialState",
    "EpochSealConfidential",
    "InconsistentRecord",
    "InflationAssignmentConfidential",
    "ReplacementExceedsBurn",
    "SealResolutionError",
    "SupplyError",
    "SupplyOverflow",
    "UnexpectedTransitionType",
    "UnsatisfiedSchemaRequirement",

    # Operations
    "Assignment",
    "ConcealedAmount",
    "ConcealedSeal",
    "Genesis",
    "Metadata",
    "RevealedSeal",
    "Transition",
    "resolve_seal",

    # Records
    "BurnReplace",
    "Epoch",
    "InflationAllowance",
    "Issue",
    "burn_replace_from_transition",
    "epoch_from_transition",
    "issue_from_genesis",
    "issue_from_transition",

    # Supply
    "Supply",
    "SupplyCompleteness",
    "SupplyHistory",
    "SupplyMeasure",
    "issue_limit",
    "supply_report",

    # Signing
    "KeyPair",
    "ReportSigner",
    "generate_key_pair",
    "verify_report",
]
