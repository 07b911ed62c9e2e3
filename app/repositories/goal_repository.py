"""Goal repository implementation using PostgreSQL."""
from typing import Optional
from app.models.planning import Goal
from app.repositories.base import AccountScopedRepository
from app.schemas.common import clamp_progress


class GoalRepository(AccountScopedRepository[Goal]):
    """
    Goal persistence. Progress is clamped to [0, 100] on every write that
    carries it, whatever the caller already did.
    """

    model = Goal

    async def create(self, account_id: str, values: dict) -> Goal:
        values = dict(values)
        values["progress"] = clamp_progress(values.get("progress") or 0)
        return await super().create(account_id, values)

    async def update(self, account_id: str, record_id: int, values: dict) -> Optional[Goal]:
        if values.get("progress") is not None:
            values = {**values, "progress": clamp_progress(values["progress"])}
        return await super().update(account_id, record_id, values)

    async def update_progress(self, account_id: str, goal_id: int, progress: float | int) -> Optional[Goal]:
        return await self.update(account_id, goal_id, {"progress": progress})

    async def list_with_target(self, account_id: str) -> list[Goal]:
        """Goals whose progress is derived from financial totals."""
        stmt = (
            self._scoped(account_id)
            .where(Goal.target_amount.is_not(None), Goal.target_amount > 0)
            .order_by(*self._default_order())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
