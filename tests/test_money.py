import unittest

from app.schemas.common import clamp_progress
from app.schemas.financial import FinancialRecordCreate
from app.schemas.planning import GoalCreate, GoalUpdate
from app.utils.money import format_minor_units, to_minor_units


class TestMinorUnits(unittest.TestCase):
    def test_converts_major_to_minor_without_float_drift(self):
        self.assertEqual(to_minor_units(19.99), 1999)
        self.assertEqual(to_minor_units(0.01), 1)
        self.assertEqual(to_minor_units("100000"), 10_000_000)
        self.assertEqual(to_minor_units(1234.565), 123457)

    def test_rejects_non_numeric(self):
        with self.assertRaises(ValueError):
            to_minor_units("lots")
        with self.assertRaises(ValueError):
            to_minor_units(float("inf"))

    def test_formats_minor_units(self):
        self.assertEqual(format_minor_units(123456), "$1,234.56")
        self.assertEqual(format_minor_units(0), "$0.00")
        self.assertEqual(format_minor_units(None), "Not set")


class TestSchemaConversion(unittest.TestCase):
    def test_financial_record_amount_stored_in_minor_units(self):
        payload = FinancialRecordCreate(
            type="revenue", category=" Sales ", amount=1234.56, date="2026-01-15T00:00:00Z"
        )
        values = payload.to_model_values()
        self.assertEqual(values["amount"], 123456)
        self.assertEqual(values["category"], "Sales")

    def test_financial_record_amount_below_one_cent_rejected(self):
        with self.assertRaises(ValueError):
            FinancialRecordCreate(type="expense", category="rent", amount=0.001, date="2026-01-15")

    def test_goal_target_amount_and_progress(self):
        goal = GoalCreate(title="Q1 revenue", type="revenue", category="sales", target_amount=100000, progress=140)
        values = goal.to_model_values()
        self.assertEqual(values["target_amount"], 10_000_000)
        self.assertEqual(values["progress"], 100)

    def test_goal_update_clamps_instead_of_rejecting(self):
        self.assertEqual(GoalUpdate(progress=-20).to_model_values(), {"progress": 0})
        self.assertEqual(GoalUpdate(progress=250).to_model_values(), {"progress": 100})


class TestClampProgress(unittest.TestCase):
    def test_clamp(self):
        self.assertEqual(clamp_progress(-5), 0)
        self.assertEqual(clamp_progress(42.9), 42)
        self.assertEqual(clamp_progress(100), 100)
        self.assertEqual(clamp_progress(1000), 100)


if __name__ == "__main__":
    unittest.main()
