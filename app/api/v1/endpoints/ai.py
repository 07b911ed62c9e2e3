"""Direct AI action and correlation REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.assistant import Action, UpdateGoalProgressParams, UpdateTaskStatusParams
from app.schemas.planning import GoalResponse, TaskResponse
from app.core.constants import ActionType, RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore
from app.services.action_executor import ActionExecutor
from app.services.correlation_analyzer import CorrelationAnalyzer

router = APIRouter()


def get_correlation_analyzer() -> CorrelationAnalyzer:
    """FastAPI dependency; overridden in tests."""
    return CorrelationAnalyzer()


@router.post("/update-task-status", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_task_status(
    payload: UpdateTaskStatusParams,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """Apply an ``update_task_status`` action outside of a chat turn."""
    outcome = await ActionExecutor(store).apply(
        account_id,
        Action(type=ActionType.UPDATE_TASK_STATUS, parameters=payload.model_dump(mode="json", by_alias=True)),
    )
    task = await store.tasks.get(account_id, outcome.record_id)
    return ApiResponse(
        success=True,
        message="Task status updated successfully",
        data=TaskResponse.model_validate(task).model_dump(mode="json"),
    )


@router.post("/update-goal-progress", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_goal_progress(
    payload: UpdateGoalProgressParams,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """Apply an ``update_goal_progress`` action. Out-of-range progress is clamped."""
    outcome = await ActionExecutor(store).apply(
        account_id,
        Action(type=ActionType.UPDATE_GOAL_PROGRESS, parameters=payload.model_dump(mode="json", by_alias=True)),
    )
    goal = await store.goals.get(account_id, outcome.record_id)
    return ApiResponse(
        success=True,
        message="Goal progress updated successfully",
        data=GoalResponse.model_validate(goal).model_dump(mode="json"),
    )


@router.get("/correlations/{record_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_correlations(
    record_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
    analyzer: CorrelationAnalyzer = Depends(get_correlation_analyzer),
):
    """
    Analyze one financial record against the workspace without applying anything.

    An unavailable model yields the empty result, not an error.
    """
    record = await store.financial_records.get(account_id, record_id)
    if record is None:
        raise NotFoundError(message=RecordErrorDetails.FINANCIAL_RECORD_NOT_FOUND)

    goals = await store.goals.list_all(account_id)
    tasks = await store.tasks.list_all(account_id)
    records = await store.financial_records.list_all(account_id)

    result = await analyzer.analyze(record, goals, tasks, records)
    return ApiResponse(
        success=True,
        message="Correlations analyzed",
        data=result.model_dump(mode="json", by_alias=True),
    )
