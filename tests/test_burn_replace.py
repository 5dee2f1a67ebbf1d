"""
Burn & Replace Extraction Tests
"""

import unittest

from fungible_supply import (
    BurnReplace,
    BurnSealConfidential,
    ConcealedSeal,
    InconsistentRecord,
    ReplacementExceedsBurn,
    TransitionType,
    UnexpectedTransitionType,
    UnsatisfiedSchemaRequirement,
    burn_replace_from_transition,
)
from fungible_supply.operation import Assignment, Transition
from fungible_supply.schema import OwnedRightType

from builders import (
    TXID_A,
    TXID_B,
    TXID_D,
    burn_transition,
    genesis,
    metadata,
    outpoint,
    witness_seal,
)


class TestBurnReplaceExtraction(unittest.TestCase):

    def setUp(self):
        self.contract_id = genesis().contract_id()
        self.epoch_id = "e" * 64
        self.closes = outpoint(TXID_A, 1)

    def extract(self, transition, no=1):
        return burn_replace_from_transition(
            self.contract_id, self.epoch_id, no, self.closes, transition, TXID_D
        )

    def test_pure_burn(self):
        op = self.extract(burn_transition(500))

        self.assertFalse(op.does_replacement)
        self.assertEqual(op.burned_amount, 500)
        self.assertEqual(op.replaced_amount, 0)
        self.assertEqual(op.supply_change, 500)
        self.assertTrue(op.is_final)
        self.assertIsNone(op.seal)
        self.assertEqual(op.epoch_id, self.epoch_id)
        self.assertEqual(op.closes, self.closes)
        self.assertEqual(op.witness, TXID_D)

    def test_pure_burn_with_zero_replacement(self):
        t = Transition(
            transition_type=TransitionType.BURN,
            metadata=metadata(issued=0, burned=500),
        )

        op = self.extract(t)

        self.assertEqual(op.supply_change, 500)

    def test_burn_and_replace(self):
        op = self.extract(burn_transition(500, replaced=200, next_seal=witness_seal(2)))

        self.assertTrue(op.does_replacement)
        self.assertEqual(op.replaced_amount, 200)
        self.assertEqual(op.supply_change, 300)
        self.assertFalse(op.is_final)
        self.assertEqual(op.seal, outpoint(TXID_D, 2))

    def test_full_replacement_is_neutral(self):
        op = self.extract(burn_transition(500, replaced=500))

        self.assertEqual(op.supply_change, 0)

    def test_replacement_exceeding_burn(self):
        with self.assertRaises(ReplacementExceedsBurn) as ctx:
            self.extract(burn_transition(100, replaced=200))
        self.assertEqual(ctx.exception.burned, 100)
        self.assertEqual(ctx.exception.replaced, 200)

    def test_missing_burned_supply(self):
        t = Transition(
            transition_type=TransitionType.BURN_AND_REPLACE,
            metadata=metadata(issued=10),
        )

        with self.assertRaises(UnsatisfiedSchemaRequirement) as ctx:
            self.extract(t)
        self.assertEqual(ctx.exception.field, "BURNED_SUPPLY")

    def test_replacement_requires_issued_supply(self):
        t = Transition(
            transition_type=TransitionType.BURN_AND_REPLACE,
            metadata=metadata(burned=10),
        )

        with self.assertRaises(UnsatisfiedSchemaRequirement) as ctx:
            self.extract(t)
        self.assertEqual(ctx.exception.field, "ISSUED_SUPPLY")

    def test_pure_burn_can_not_replace(self):
        t = Transition(
            transition_type=TransitionType.BURN,
            metadata=metadata(issued=10, burned=100),
        )

        with self.assertRaises(UnsatisfiedSchemaRequirement):
            self.extract(t)

    def test_confidential_successor_seal(self):
        t = Transition(
            transition_type=TransitionType.BURN,
            metadata=metadata(burned=10),
            owned_rights={OwnedRightType.BURN_REPLACE: (Assignment(seal=ConcealedSeal("ef" * 32)),)},
        )

        with self.assertRaises(BurnSealConfidential) as ctx:
            self.extract(t)
        self.assertEqual(ctx.exception.node_id, t.node_id())

    def test_wrong_transition_type(self):
        t = Transition(transition_type=TransitionType.EPOCH)

        with self.assertRaises(UnexpectedTransitionType):
            self.extract(t)

    def test_operation_numbers_start_from_one(self):
        with self.assertRaises(InconsistentRecord):
            self.extract(burn_transition(5), no=0)


class TestBurnReplaceRecord(unittest.TestCase):

    def setUp(self):
        self.op = burn_replace_from_transition(
            genesis().contract_id(),
            "e" * 64,
            2,
            outpoint(TXID_A, 0),
            burn_transition(800, replaced=300, next_seal=witness_seal(0)),
            TXID_B,
        )

    def test_derived_fields(self):
        self.assertEqual(self.op.is_final, self.op.seal is None)
        self.assertEqual(self.op.supply_change, self.op.burned_amount - self.op.replaced_amount)
        self.assertGreaterEqual(self.op.supply_change, 0)

    def test_display(self):
        self.assertEqual(str(self.op), f"2:{self.op.node_id}")

    def test_dict_round_trip(self):
        data = self.op.to_dict()

        self.assertEqual(data["supply_change"], 500)
        self.assertEqual(BurnReplace.from_dict(data), self.op)

    def test_inconsistent_supply_change_rejected(self):
        data = self.op.to_dict()
        data["supply_change"] = 800

        with self.assertRaises(InconsistentRecord):
            BurnReplace.from_dict(data)

    def test_inconsistent_finality_rejected(self):
        data = self.op.to_dict()
        data["is_final"] = True

        with self.assertRaises(InconsistentRecord):
            BurnReplace.from_dict(data)


if __name__ == "__main__":
    unittest.main()
