"""
Action Executor - applies assistant-requested mutations one at a time.

Each action is validated, applied and committed on its own. A failed action is
logged and reported as skipped; it never stops the actions after it.
"""

import logging
from typing import Awaitable, Callable, Tuple
from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.core.constants import ActionType, RecordErrorDetails
from app.core.exceptions import AppException, NotFoundError, ValidationError
from app.repositories.record_store import RecordStore
from app.schemas.assistant import (
    Action,
    ActionOutcome,
    UpdateGoalProgressParams,
    UpdateTaskStatusParams,
)
from app.schemas.common import clamp_progress
from app.schemas.financial import FinancialRecordCreate
from app.schemas.planning import CalendarEventCreate, GoalCreate, TaskCreate
from app.utils.money import format_minor_units

logger = logging.getLogger("action_executor")


def _validate(schema: type[BaseModel], parameters: dict) -> BaseModel:
    try:
        return schema.model_validate(parameters)
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"Invalid parameters: {e.error_count()} error(s)",
            data={"validation_errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


class ActionExecutor:
    """Best-effort application of a list of actions for one account."""

    def __init__(self, store: RecordStore):
        self.store = store
        self._handlers: dict[ActionType, Callable[[str, dict], Awaitable[Tuple[int, str]]]] = {
            ActionType.UPDATE_TASK_STATUS: self._update_task_status,
            ActionType.UPDATE_GOAL_PROGRESS: self._update_goal_progress,
            ActionType.CREATE_GOAL: self._create_goal,
            ActionType.CREATE_TASK: self._create_task,
            ActionType.CREATE_CALENDAR_EVENT: self._create_calendar_event,
            ActionType.CREATE_FINANCIAL_RECORD: self._create_financial_record,
        }

    async def execute(self, account_id: str, actions: list[Action]) -> list[ActionOutcome]:
        """
        Apply actions in order.

        Returns:
            One outcome per action. Callers are free to ignore it.
        """
        outcomes = []
        for action in actions:
            outcomes.append(await self._execute_one(account_id, action))

        applied = sum(1 for o in outcomes if o.status == "applied")
        if actions:
            logger.info(f"[ACTIONS] {applied}/{len(actions)} action(s) applied for account {account_id}")
        return outcomes

    async def apply(self, account_id: str, action: Action) -> ActionOutcome:
        """
        Apply and commit a single action, raising instead of skipping.

        Raises:
            ValidationError: Parameters do not match the action schema
            NotFoundError: Target record is missing or foreign
        """
        handler = self._handlers.get(action.type)
        if handler is None:
            raise ValidationError(message=f"Unsupported action: {action.type}")
        record_id, summary = await handler(account_id, action.parameters)
        await self.store.commit()
        logger.info(f"[ACTIONS] Applied {action.type} -> record {record_id}")
        return ActionOutcome(action=action, status="applied", record_id=record_id, summary=summary)

    async def _execute_one(self, account_id: str, action: Action) -> ActionOutcome:
        try:
            return await self.apply(account_id, action)
        except AppException as e:
            # Rejected before anything was written
            logger.warning(f"[ACTIONS] Skipped {action.type}: {e.message}")
            return ActionOutcome(action=action, status="skipped", error=e.message)
        except Exception as e:
            await self.store.rollback()
            logger.error(f"[ACTIONS] Failed {action.type}: {e}", exc_info=True)
            return ActionOutcome(action=action, status="skipped", error=str(e))

    async def _update_task_status(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        params = _validate(UpdateTaskStatusParams, parameters)
        task = await self.store.tasks.update_status(account_id, params.task_id, params.status)
        if task is None:
            raise NotFoundError(message=RecordErrorDetails.TASK_NOT_FOUND)
        return task.id, f"Updated task #{task.id} \"{task.title}\" status to {task.status}."

    async def _update_goal_progress(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        params = _validate(UpdateGoalProgressParams, parameters)
        goal = await self.store.goals.update_progress(
            account_id, params.goal_id, clamp_progress(params.progress)
        )
        if goal is None:
            raise NotFoundError(message=RecordErrorDetails.GOAL_NOT_FOUND)
        return goal.id, f"Updated goal #{goal.id} \"{goal.title}\" progress to {goal.progress}%."

    async def _create_goal(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        payload = _validate(GoalCreate, parameters)
        goal = await self.store.goals.create(account_id, payload.to_model_values())
        return goal.id, f"Created goal #{goal.id} \"{goal.title}\"."

    async def _create_task(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        payload = _validate(TaskCreate, parameters)
        task = await self.store.tasks.create(account_id, payload.to_model_values())
        return task.id, f"Created task #{task.id} \"{task.title}\"."

    async def _create_calendar_event(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        payload = _validate(CalendarEventCreate, parameters)
        event = await self.store.calendar_events.create(account_id, payload.to_model_values())
        return event.id, f"Scheduled event #{event.id} \"{event.title}\"."

    async def _create_financial_record(self, account_id: str, parameters: dict) -> Tuple[int, str]:
        payload = _validate(FinancialRecordCreate, parameters)
        record = await self.store.financial_records.create(account_id, payload.to_model_values())
        return record.id, (
            f"Recorded {record.type} #{record.id} of {format_minor_units(record.amount)} in {record.category}."
        )


def created_financial_record_ids(outcomes: list[ActionOutcome]) -> list[int]:
    """Ids of financial records the assistant created, for correlation dispatch."""
    return [
        o.record_id
        for o in outcomes
        if o.status == "applied"
        and o.action.type == ActionType.CREATE_FINANCIAL_RECORD
        and o.record_id is not None
    ]



def confirmation_from_outcomes(outcomes: list[ActionOutcome]) -> str:
    """
    Reply text for a turn where the model asked for actions without writing any text.

    Applied actions are described from the values actually stored; skipped ones
    are reported as not applied.
    """
    lines = [o.summary for o in outcomes if o.status == "applied" and o.summary]
    lines.extend(
        f"Could not apply {o.action.type}: {o.error or 'unknown error'}."
        for o in outcomes
        if o.status == "skipped"
    )
    return "\n".join(lines)
