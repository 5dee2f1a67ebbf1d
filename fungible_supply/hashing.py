"""
Fungible Supply Hashing

All hashes use SHA-256 over canonical JSON with lowercase hexadecimal
output.
"""

import hashlib
from typing import Any, Union

from .canonicalization import canonicalize


def sha256_hex(data: Union[bytes, str]) -> str:
    """Bare lowercase hex digest, used for operation node ids."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).hexdigest().lower()


def sha256_hash(data: Union[bytes, str]) -> str:
    """
    Prefixed digest in the form "sha256:abcdef...".
    """
    return f"sha256:{sha256_hex(data)}"


def operation_id(operation: Any) -> str:
    """
    Compute the node id of an operation.

    node_id = SHA-256(CJE(operation))
    """
    return sha256_hex(canonicalize(operation))


def report_hash(report: dict) -> str:
    """
    Compute the hash binding a supply report.

    report_hash = "sha256:" + SHA-256(CJE(report without report_hash and signatures))
    """
    body = {k: v for k, v in report.items() if k not in ("report_hash", "signatures")}
    return sha256_hash(canonicalize(body))
