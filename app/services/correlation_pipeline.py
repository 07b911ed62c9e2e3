"""
Correlation pipeline - runs after every financial record write.

analyze -> execute task/progress proposals -> recompute target-bearing goals.
It runs detached from the request with its own session, and every failure is
logged rather than raised: a financial write never fails because of it.
"""

import asyncio
import logging
from typing import Optional, Set

from app.core.config import settings
from app.core.constants import ActionType
from app.core.database import db_manager
from app.repositories.record_store import RecordStore
from app.schemas.assistant import Action
from app.schemas.correlation import CorrelationResult
from app.services.action_executor import ActionExecutor
from app.services.correlation_analyzer import CorrelationAnalyzer
from app.services.goal_progress import recompute_goal_progress

logger = logging.getLogger("correlation_pipeline")


def proposals_to_actions(result: CorrelationResult, target_goal_ids: set[int]) -> list[Action]:
    """
    Turn analyzer proposals into executor actions.

    Progress proposals for goals that carry a target amount are dropped;
    those goals are owned by the deterministic recompute.
    """
    actions = [
        Action(
            type=ActionType.UPDATE_TASK_STATUS,
            parameters={"taskId": update.task_id, "status": update.new_status.value},
        )
        for update in result.task_updates
    ]
    for update in result.progress_updates:
        if update.goal_id in target_goal_ids:
            logger.info(
                f"[CORRELATION] Ignoring proposed progress {update.new_progress} for "
                f"target-bearing goal {update.goal_id}"
            )
            continue
        actions.append(
            Action(
                type=ActionType.UPDATE_GOAL_PROGRESS,
                parameters={"goalId": update.goal_id, "progress": update.new_progress},
            )
        )
    return actions


async def run_correlation(
    account_id: str, record_id: int, analyzer: Optional[CorrelationAnalyzer] = None
) -> None:
    """Correlate one financial record and apply the results. Never raises."""
    analyzer = analyzer or CorrelationAnalyzer()
    try:
        async with db_manager.session_scope() as session:
            store = RecordStore(session)
            record = await store.financial_records.get(account_id, record_id)
            if record is None:
                logger.warning(f"[CORRELATION] Record {record_id} not found for account {account_id}")
                return

            goals = await store.goals.list_all(account_id)
            tasks = await store.tasks.list_all(account_id)
            records = await store.financial_records.list_all(account_id)

            result = await analyzer.analyze(record, goals, tasks, records)

            target_goal_ids = {g.id for g in goals if g.target_amount and g.target_amount > 0}
            actions = proposals_to_actions(result, target_goal_ids)
            if actions:
                await ActionExecutor(store).execute(account_id, actions)

            updated = await recompute_goal_progress(store, account_id)
            if updated:
                logger.info(f"[RECOMPUTE] Updated {len(updated)} goal(s) after record {record_id}")

            for insight in result.business_insights:
                logger.info(f"[CORRELATION] Insight: {insight}")
    except Exception as e:
        logger.error(f"[CORRELATION] Pipeline failed for record {record_id}: {e}", exc_info=True)


class CorrelationDispatcher:
    """Starts correlation runs as background tasks and keeps them referenced until done."""

    def __init__(self, analyzer: Optional[CorrelationAnalyzer] = None):
        self.analyzer = analyzer
        self.background_tasks: Set[asyncio.Task] = set()

    def dispatch(self, account_id: str, record_id: int) -> Optional[asyncio.Task]:
        if not settings.CORRELATION_ENABLED:
            logger.debug(f"[CORRELATION] Disabled, not analyzing record {record_id}")
            return None

        task = asyncio.create_task(
            run_correlation(account_id, record_id, self.analyzer),
            name=f"correlation-{record_id}",
        )
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight correlation run."""
        while True:
            pending = [task for task in self.background_tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)


correlation_dispatcher = CorrelationDispatcher()


def get_correlation_dispatcher() -> CorrelationDispatcher:
    """FastAPI dependency; overridden in tests."""
    return correlation_dispatcher
