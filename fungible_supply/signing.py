"""
Supply Report Signing

Ed25519 (RFC 8032) attestation of supply reports, so a reporting layer can
publish snapshots that consumers verify without re-folding the history.
"""

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .canonicalization import canonicalize
from .hashing import report_hash


@dataclass
class KeyPair:
    """Ed25519 key pair used for report signing."""
    key_id: str
    signing_key: bytes
    verify_key: bytes
    created_at: datetime
    algorithm: str = "Ed25519"

    def public_entry(self) -> Dict[str, Any]:
        """Public part of the key, safe to distribute to verifiers."""
        return {
            "key_id": self.key_id,
            "algorithm": self.algorithm,
            "public_key": base64.b64encode(self.verify_key).decode('utf-8'),
        }

    def to_dict(self) -> Dict[str, Any]:
        d = self.public_entry()
        d["signing_key"] = base64.b64encode(self.signing_key).decode('utf-8')
        d["created_at"] = self.created_at.isoformat().replace("+00:00", "Z")
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeyPair':
        signing_key = base64.b64decode(data["signing_key"])
        return cls(
            key_id=data["key_id"],
            signing_key=signing_key,
            verify_key=bytes(SigningKey(signing_key).verify_key),
            created_at=datetime.fromisoformat(data["created_at"].replace("Z", "+00:00")),
            algorithm=data.get("algorithm", "Ed25519"),
        )

    @classmethod
    def load(cls, path: str) -> 'KeyPair':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))


def generate_key_pair(key_id: str) -> KeyPair:
    signing_key = SigningKey.generate()
    return KeyPair(
        key_id=key_id,
        signing_key=bytes(signing_key),
        verify_key=bytes(signing_key.verify_key),
        created_at=datetime.now(timezone.utc),
    )


class ReportSigner:
    """
    Signs supply reports.

    The signature covers the canonical encoding of the report hash, so any
    change to a reported figure invalidates it.
    """

    def __init__(self, key_pair: KeyPair):
        self.key_pair = key_pair
        self._signing_key = SigningKey(key_pair.signing_key)

    def sign(self, report: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of the report with a fresh hash and a signature appended.
        """
        signed = dict(report)
        signed["report_hash"] = report_hash(report)
        signature = self._signing_key.sign(canonicalize(signed["report_hash"])).signature
        signatures: List[Dict[str, Any]] = list(report.get("signatures", []))
        signatures.append({
            "key_id": self.key_pair.key_id,
            "algorithm": self.key_pair.algorithm,
            "public_key": base64.b64encode(self.key_pair.verify_key).decode('utf-8'),
            "sig": base64.b64encode(signature).decode('utf-8'),
        })
        signed["signatures"] = signatures
        return signed


def verify_report(report: Dict[str, Any]) -> bool:
    """
    Verify a signed report: the hash must match the reported figures and
    every signature must verify against its public key.
    """
    declared = report.get("report_hash")
    signatures = report.get("signatures") or []
    if not declared or not signatures:
        return False
    if report_hash(report) != declared:
        return False

    message = canonicalize(declared)
    for entry in signatures:
        try:
            verify_key = VerifyKey(base64.b64decode(entry["public_key"]))
            verify_key.verify(message, base64.b64decode(entry["sig"]))
        except (BadSignatureError, KeyError, ValueError):
            return False
    return True
