"""
Goal progress recalculation from financial totals.

Goals with a target amount are measured against the account's summed revenue
(or remaining expense budget). The calculation is integer-only and writes a
goal only when its value changes, so running it twice is a no-op.
"""

import logging
from typing import Optional

from app.core.constants import FinancialRecordType, GoalType, PROGRESS_MAX, PROGRESS_MIN
from app.repositories.record_store import RecordStore

logger = logging.getLogger("goal_progress")


def derived_progress(goal_type: str, target_amount: int, totals: dict[str, int]) -> Optional[int]:
    """
    Progress percentage for a target-bearing goal, or None when the goal type
    has no formula.

    >>> derived_progress("revenue", 10_000_000, {"revenue": 6_000_000})
    60
    >>> derived_progress("expense", 500_000, {"expense": 550_000})
    0
    """
    if target_amount <= 0:
        return None
    if goal_type == GoalType.REVENUE:
        value = totals.get(FinancialRecordType.REVENUE.value, 0) * 100 // target_amount
    elif goal_type == GoalType.EXPENSE:
        value = (target_amount - totals.get(FinancialRecordType.EXPENSE.value, 0)) * 100 // target_amount
    else:
        return None
    return min(PROGRESS_MAX, max(PROGRESS_MIN, value))


async def recompute_goal_progress(store: RecordStore, account_id: str) -> list[int]:
    """
    Recalculate progress for every goal with a target amount.

    The caller owns the transaction; changes are flushed, not committed.

    Returns:
        Ids of the goals whose progress was written
    """
    goals = await store.goals.list_with_target(account_id)
    if not goals:
        return []

    totals = await store.financial_records.totals_by_type(account_id)
    written = []
    for goal in goals:
        progress = derived_progress(goal.type, goal.target_amount, totals)
        if progress is None or progress == goal.progress:
            continue
        previous = goal.progress
        await store.goals.update_progress(account_id, goal.id, progress)
        logger.info(f"[RECOMPUTE] Goal {goal.id} '{goal.title}' progress {previous}% -> {progress}%")
        written.append(goal.id)

    return written
