import unittest

from app.services.goal_progress import derived_progress, recompute_goal_progress
from tests.helpers import ACCOUNT_ID, OTHER_ACCOUNT_ID, DatabaseTestCase


class TestDerivedProgress(unittest.TestCase):
    def test_revenue_goal(self):
        self.assertEqual(derived_progress("revenue", 10_000_000, {"revenue": 6_000_000}), 60)
        self.assertEqual(derived_progress("revenue", 10_000_000, {"revenue": 25_000_000}), 100)
        self.assertEqual(derived_progress("revenue", 300, {"revenue": 100}), 33)

    def test_expense_goal_never_negative(self):
        self.assertEqual(derived_progress("expense", 500_000, {"expense": 550_000}), 0)
        self.assertEqual(derived_progress("expense", 500_000, {"expense": 125_000}), 75)
        self.assertEqual(derived_progress("expense", 500_000, {}), 100)

    def test_other_type_has_no_formula(self):
        self.assertIsNone(derived_progress("other", 500_000, {"revenue": 1}))


class TestRecomputeGoalProgress(DatabaseTestCase):
    async def test_revenue_target_recomputed(self):
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)
        await self.add_record("revenue", 4_000_000)
        await self.add_record("revenue", 2_000_000)
        await self.add_record("expense", 1_000_000)
        await self.add_record("revenue", 9_000_000, account_id=OTHER_ACCOUNT_ID)

        written = await recompute_goal_progress(self.store, ACCOUNT_ID)
        await self.session.commit()

        self.assertEqual(written, [goal.id])
        self.assertEqual((await self.reload("goals", goal.id)).progress, 60)

    async def test_expense_overspend_gives_zero(self):
        goal = await self.add_goal("Cap spend", type="expense", category="ops", target_amount=500_000, progress=50)
        await self.add_record("expense", 550_000, category="rent")

        await recompute_goal_progress(self.store, ACCOUNT_ID)
        await self.session.commit()

        self.assertEqual((await self.reload("goals", goal.id)).progress, 0)

    async def test_second_run_writes_nothing(self):
        await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)
        await self.add_record("revenue", 6_000_000)

        first = await recompute_goal_progress(self.store, ACCOUNT_ID)
        await self.session.commit()
        second = await recompute_goal_progress(self.store, ACCOUNT_ID)

        self.assertEqual(len(first), 1)
        self.assertEqual(second, [])

    async def test_goals_without_target_or_other_type_untouched(self):
        plain = await self.add_goal("Brand", type="revenue", category="marketing", progress=35)
        other = await self.add_goal("Hire", type="other", category="team", target_amount=100_000, progress=20)
        await self.add_record("revenue", 6_000_000)

        written = await recompute_goal_progress(self.store, ACCOUNT_ID)

        self.assertEqual(written, [])
        self.assertEqual((await self.reload("goals", plain.id)).progress, 35)
        self.assertEqual((await self.reload("goals", other.id)).progress, 20)


if __name__ == "__main__":
    unittest.main()
