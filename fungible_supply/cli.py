#!/usr/bin/env python3
"""
Fungible Supply Command Line Interface

Usage:
    fungible-supply supply --file <history.json> [--measure <M>] [--completeness <C>]
    fungible-supply hash --file <file>
    fungible-supply keygen --output <file>
    fungible-supply sign --report <file> [--key <file>]
    fungible-supply verify --report <file>
"""

import argparse
import json
import logging
import sys

from . import config
from .canonicalization import canonicalize
from .errors import SupplyError
from .hashing import sha256_hash
from .history import SupplyHistory
from .logging_config import configure_logging
from .signing import KeyPair, ReportSigner, generate_key_pair, verify_report
from .supply import SupplyCompleteness, SupplyMeasure, supply_report

logger = logging.getLogger(__name__)


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def emit(data, output=None):
    if output:
        save_json(data, output)
        print(f"Saved to: {output}", file=sys.stderr)
    else:
        print(json.dumps(data, indent=2))


def cmd_supply(args) -> int:
    """Fold a contract history into a supply report."""
    document = load_json(args.file)
    history = SupplyHistory.from_dict(document)

    if args.completeness:
        completeness = SupplyCompleteness(args.completeness.upper())
    else:
        completeness = SupplyCompleteness.from_optional(document.get("is_known"))

    supply = history.supply(completeness)

    if args.measure:
        value = supply.measure(SupplyMeasure(args.measure.upper()))
        print("unknown" if value is None else value)
        return 0

    report = supply_report(history.contract_id, supply)
    orphans = history.orphan_operations()
    if orphans:
        logger.warning("%d burn operation(s) refer to unknown epochs", len(orphans))
    emit(report, args.output)
    return 0


def cmd_hash(args) -> int:
    """Compute the canonical hash of a JSON file."""
    data = load_json(args.file)
    print(sha256_hash(canonicalize(data)))
    return 0


def cmd_keygen(args) -> int:
    """Generate a report signing key."""
    key_pair = generate_key_pair(args.key_id or config.KEY_ID)
    emit(key_pair.to_dict(), args.output)
    return 0


def cmd_sign(args) -> int:
    """Sign a supply report."""
    key_pair = KeyPair.load(args.key or config.SIGNING_KEY_PATH)
    signed = ReportSigner(key_pair).sign(load_json(args.report))
    emit(signed, args.output)
    return 0


def cmd_verify(args) -> int:
    """Verify a signed supply report."""
    if verify_report(load_json(args.report)):
        print("VALID")
        return 0
    print("INVALID")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fungible-supply",
        description="Fungible asset supply tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fungible-supply supply -f history.json
  fungible-supply supply -f history.json -m ISSUE_LIMIT
  fungible-supply keygen -o key.json
  fungible-supply sign -r report.json -k key.json -o signed.json
  fungible-supply verify -r signed.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    supply_parser = subparsers.add_parser("supply", help="Compute supply from contract history")
    supply_parser.add_argument("-f", "--file", required=True, help="Contract history JSON file")
    supply_parser.add_argument(
        "-m", "--measure", choices=[m.value for m in SupplyMeasure], type=str.upper,
        help="Print a single supply figure",
    )
    supply_parser.add_argument(
        "-c", "--completeness", choices=[c.value for c in SupplyCompleteness], type=str.upper,
        help="Override the completeness assessment from the file",
    )
    supply_parser.add_argument("-o", "--output", help="Output file for the report")

    hash_parser = subparsers.add_parser("hash", help="Compute canonical hash")
    hash_parser.add_argument("-f", "--file", required=True, help="JSON file to hash")

    keygen_parser = subparsers.add_parser("keygen", help="Generate signing key pair")
    keygen_parser.add_argument("-o", "--output", help="Output file for the key")
    keygen_parser.add_argument("-k", "--key-id", help="Key identifier")

    sign_parser = subparsers.add_parser("sign", help="Sign a supply report")
    sign_parser.add_argument("-r", "--report", required=True, help="Report JSON file")
    sign_parser.add_argument("-k", "--key", help="Signing key JSON file")
    sign_parser.add_argument("-o", "--output", help="Output file for the signed report")

    verify_parser = subparsers.add_parser("verify", help="Verify a signed supply report")
    verify_parser.add_argument("-r", "--report", required=True, help="Signed report JSON file")

    return parser


COMMANDS = {
    "supply": cmd_supply,
    "hash": cmd_hash,
    "keygen": cmd_keygen,
    "sign": cmd_sign,
    "verify": cmd_verify,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 2

    configure_logging(config.effective_log_level(), config.LOG_JSON, config.LOG_FILE)
    try:
        return COMMANDS[args.command](args)
    except (SupplyError, ValueError, KeyError, OSError) as err:
        logger.error("%s failed: %s", args.command, err)
        print(f"error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
