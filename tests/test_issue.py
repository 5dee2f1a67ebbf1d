"""
Issue Extraction Tests

Primary issues from genesis, secondary issues from inflation transitions
and aggregation of the inflation rights they delegate.
"""

import unittest

from fungible_supply import (
    ConcealedSeal,
    InconsistentRecord,
    InflationAllowance,
    InflationAssignmentConfidential,
    Issue,
    SealResolutionError,
    TransitionType,
    UnexpectedTransitionType,
    UnsatisfiedSchemaRequirement,
    issue_from_genesis,
    issue_from_transition,
)
from fungible_supply.operation import Genesis, Metadata, Transition

from builders import (
    ConcealedAmount,
    TXID_A,
    TXID_B,
    TXID_C,
    absolute_seal,
    genesis,
    issue_transition,
    outpoint,
    witness_seal,
)


class TestPrimaryIssue(unittest.TestCase):
    """Issues extracted from genesis."""

    def test_genesis_without_inflation(self):
        g = genesis(issued=1000)

        issue = issue_from_genesis(g)

        self.assertEqual(issue.amount, 1000)
        self.assertEqual(issue.closes, frozenset())
        self.assertEqual(dict(issue.inflation_assignments), {})
        self.assertIsNone(issue.witness)
        self.assertTrue(issue.is_primary())
        self.assertFalse(issue.is_secondary())
        self.assertEqual(issue.node_id, g.node_id())
        self.assertEqual(issue.contract_id, g.contract_id())

    def test_genesis_inflation_rights(self):
        g = genesis(
            issued=1000,
            inflation=[
                (absolute_seal(TXID_A, 0), 500),
                (absolute_seal(TXID_B, 1), 300),
            ],
        )

        issue = issue_from_genesis(g)

        self.assertEqual(
            dict(issue.inflation_assignments),
            {
                outpoint(TXID_A, 0): InflationAllowance(500, (0,)),
                outpoint(TXID_B, 1): InflationAllowance(300, (1,)),
            },
        )
        self.assertEqual(issue.inflation_limit(), 800)

    def test_same_seal_amounts_are_summed(self):
        g = genesis(
            issued=1000,
            inflation=[
                (absolute_seal(TXID_A, 0), 30),
                (absolute_seal(TXID_B, 0), 5),
                (absolute_seal(TXID_A, 0, blinding=7), 70),
            ],
        )

        issue = issue_from_genesis(g)

        allowance = issue.inflation_assignments[outpoint(TXID_A, 0)]
        self.assertEqual(allowance.amount, 100)
        self.assertEqual(allowance.indices, (0, 2))
        self.assertEqual(len(issue.inflation_assignments), 2)

    def test_missing_issued_supply(self):
        g = Genesis(metadata=Metadata())

        with self.assertRaises(UnsatisfiedSchemaRequirement) as ctx:
            issue_from_genesis(g)
        self.assertEqual(ctx.exception.node_id, g.node_id())
        self.assertEqual(ctx.exception.field, "ISSUED_SUPPLY")

    def test_confidential_inflation_amount(self):
        g = genesis(inflation=[(absolute_seal(TXID_A, 0), ConcealedAmount("ab" * 32))])

        with self.assertRaises(InflationAssignmentConfidential) as ctx:
            issue_from_genesis(g)
        self.assertEqual(ctx.exception.node_id, g.node_id())

    def test_confidential_inflation_seal(self):
        g = genesis(inflation=[(ConcealedSeal("cd" * 32), 10)])

        with self.assertRaises(InflationAssignmentConfidential):
            issue_from_genesis(g)

    def test_witness_relative_seal_in_genesis(self):
        g = genesis(inflation=[(witness_seal(2), 10)])

        with self.assertRaises(SealResolutionError):
            issue_from_genesis(g)


class TestSecondaryIssue(unittest.TestCase):
    """Issues extracted from inflation transitions."""

    def setUp(self):
        self.contract_id = genesis().contract_id()
        self.closes = {outpoint(TXID_A, 0)}

    def test_transition_issue(self):
        t = issue_transition(200, inflation=[(witness_seal(1), 300)])

        issue = issue_from_transition(self.contract_id, self.closes, t, TXID_C)

        self.assertEqual(issue.amount, 200)
        self.assertEqual(issue.witness, TXID_C)
        self.assertEqual(issue.closes, frozenset(self.closes))
        self.assertTrue(issue.is_secondary())
        self.assertFalse(issue.is_primary())
        # Witness-relative seals resolve against the witness transaction
        self.assertEqual(
            dict(issue.inflation_assignments),
            {outpoint(TXID_C, 1): InflationAllowance(300, (0,))},
        )

    def test_witness_seals_aggregate(self):
        t = issue_transition(
            10,
            inflation=[
                (witness_seal(0), 30),
                (absolute_seal(TXID_C, 0), 70),
            ],
        )

        issue = issue_from_transition(self.contract_id, self.closes, t, TXID_C)

        self.assertEqual(
            issue.inflation_assignments[outpoint(TXID_C, 0)],
            InflationAllowance(100, (0, 1)),
        )

    def test_wrong_transition_type(self):
        t = Transition(transition_type=TransitionType.TRANSFER)

        with self.assertRaises(UnexpectedTransitionType):
            issue_from_transition(self.contract_id, self.closes, t, TXID_C)

    def test_secondary_issue_requires_closed_seals(self):
        with self.assertRaises(InconsistentRecord):
            issue_from_transition(self.contract_id, [], issue_transition(10), TXID_C)

    def test_missing_issued_supply(self):
        t = Transition(transition_type=TransitionType.ISSUE, parents=("x",))

        with self.assertRaises(UnsatisfiedSchemaRequirement):
            issue_from_transition(self.contract_id, self.closes, t, TXID_C)


class TestIssueRecord(unittest.TestCase):
    """Immutability, display and serialization."""

    def setUp(self):
        g = genesis(issued=1000, inflation=[(absolute_seal(TXID_A, 3), 500)])
        self.issue = issue_from_genesis(g)

    def test_primary_xor_secondary(self):
        secondary = issue_from_transition(
            self.issue.contract_id, {outpoint(TXID_A, 3)}, issue_transition(5), TXID_B
        )
        for issue in (self.issue, secondary):
            self.assertNotEqual(issue.is_primary(), issue.is_secondary())

    def test_immutable(self):
        with self.assertRaises(AttributeError):
            self.issue.amount = 5
        with self.assertRaises(TypeError):
            self.issue.inflation_assignments[outpoint(TXID_B, 0)] = InflationAllowance(1, (0,))

    def test_display(self):
        self.assertEqual(str(self.issue), f"{self.issue.node_id} -> 1000")

    def test_dict_round_trip(self):
        restored = Issue.from_dict(self.issue.to_dict())

        self.assertEqual(restored, self.issue)
        self.assertEqual(restored.to_dict(), self.issue.to_dict())


if __name__ == "__main__":
    unittest.main()
