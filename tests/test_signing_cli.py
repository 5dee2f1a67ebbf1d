"""
Report Signing and Command Line Tests
"""

import json
import logging
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO

from fungible_supply import (
    KeyPair,
    ReportSigner,
    Supply,
    SupplyCompleteness,
    generate_key_pair,
    supply_report,
    verify_report,
)
from fungible_supply.cli import main

from builders import TXID_A, TXID_B, TXID_C, absolute_seal, burn_transition, epoch_transition, genesis, witness_seal


class TestReportSigning(unittest.TestCase):

    def setUp(self):
        self.key_pair = generate_key_pair("kid:test-001")
        self.report = supply_report("c" * 64, Supply(700, SupplyCompleteness.COMPLETE, 1800))

    def test_sign_and_verify(self):
        signed = ReportSigner(self.key_pair).sign(self.report)

        self.assertTrue(verify_report(signed))
        self.assertEqual(signed["signatures"][0]["key_id"], "kid:test-001")
        self.assertEqual(signed["signatures"][0]["algorithm"], "Ed25519")

    def test_tampered_figure_fails(self):
        signed = ReportSigner(self.key_pair).sign(self.report)
        signed["known_circulating"] = 701

        self.assertFalse(verify_report(signed))

    def test_tampered_signature_fails(self):
        signed = ReportSigner(self.key_pair).sign(self.report)
        other = ReportSigner(generate_key_pair("kid:other")).sign(self.report)
        signed["signatures"][0]["sig"] = other["signatures"][0]["sig"]

        self.assertFalse(verify_report(signed))

    def test_unsigned_report_fails(self):
        self.assertFalse(verify_report(self.report))

    def test_countersignature(self):
        first = ReportSigner(self.key_pair).sign(self.report)
        second = ReportSigner(generate_key_pair("kid:auditor")).sign(first)

        self.assertEqual(len(second["signatures"]), 2)
        self.assertTrue(verify_report(second))

    def test_key_pair_round_trip(self):
        restored = KeyPair.from_dict(self.key_pair.to_dict())

        self.assertEqual(restored.signing_key, self.key_pair.signing_key)
        self.assertEqual(restored.verify_key, self.key_pair.verify_key)
        self.assertEqual(restored.key_id, self.key_pair.key_id)


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        # The CLI reconfigures the root logger
        root = logging.getLogger()
        self.addCleanup(setattr, root, "handlers", list(root.handlers))
        self.addCleanup(root.setLevel, root.level)
        g = genesis(issued=1000, inflation=[(absolute_seal(TXID_A, 0), 800)])
        self.history_path = self.path("history.json")
        self.write(self.history_path, {
            "genesis": g.to_dict(),
            "epochs": [{
                "transition": epoch_transition(burn_replace=[witness_seal(0)]).to_dict(),
                "no": 1,
                "closes": f"{TXID_B}:0",
                "witness": TXID_C,
            }],
            "burn_replaces": [{
                "transition": burn_transition(300).to_dict(),
                "epoch": 1,
                "no": 1,
                "closes": f"{TXID_C}:0",
                "witness": TXID_A,
            }],
            "is_known": False,
        })

    def path(self, name):
        return os.path.join(self.tmp.name, name)

    def write(self, path, data):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def run_cli(self, *argv):
        out = StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_supply_report(self):
        code, out = self.run_cli("supply", "-f", self.history_path)

        report = json.loads(out)
        self.assertEqual(code, 0)
        self.assertEqual(report["known_circulating"], 700)
        self.assertEqual(report["issue_limit"], 1800)
        self.assertEqual(report["is_known"], "INCOMPLETE")
        self.assertIsNone(report["total_circulating"])

    def test_single_measure(self):
        code, out = self.run_cli("supply", "-f", self.history_path, "-m", "total_circulating")
        self.assertEqual((code, out.strip()), (0, "unknown"))

        code, out = self.run_cli(
            "supply", "-f", self.history_path, "-m", "TOTAL_CIRCULATING", "-c", "COMPLETE"
        )
        self.assertEqual((code, out.strip()), (0, "700"))

    def test_keygen_sign_verify(self):
        key_path, report_path, signed_path = (
            self.path("key.json"), self.path("report.json"), self.path("signed.json")
        )

        self.assertEqual(self.run_cli("keygen", "-o", key_path, "-k", "kid:cli")[0], 0)
        self.assertEqual(self.run_cli("supply", "-f", self.history_path, "-o", report_path)[0], 0)
        self.assertEqual(
            self.run_cli("sign", "-r", report_path, "-k", key_path, "-o", signed_path)[0], 0
        )

        code, out = self.run_cli("verify", "-r", signed_path)
        self.assertEqual((code, out.strip()), (0, "VALID"))

        code, out = self.run_cli("verify", "-r", report_path)
        self.assertEqual((code, out.strip()), (1, "INVALID"))

    def test_hash(self):
        code, out = self.run_cli("hash", "-f", self.history_path)

        self.assertEqual(code, 0)
        self.assertTrue(out.strip().startswith("sha256:"))

    def test_invalid_history(self):
        bad_path = self.path("bad.json")
        self.write(bad_path, {"genesis": {"metadata": {}}})

        code, _ = self.run_cli("supply", "-f", bad_path)

        self.assertEqual(code, 1)

    def test_no_command(self):
        code, _ = self.run_cli()

        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
