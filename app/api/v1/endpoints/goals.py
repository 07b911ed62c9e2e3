"""Goal REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.planning import GoalCreate, GoalUpdate, GoalResponse
from app.core.constants import RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore
from app.services.goal_progress import recompute_goal_progress

router = APIRouter()

DERIVED_PROGRESS_FIELDS = {"target_amount", "type"}


def _goal_data(goal) -> dict:
    return GoalResponse.model_validate(goal).model_dump(mode="json")


@router.get("", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_goals(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    goals = await store.goals.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Goals retrieved",
        data=[_goal_data(g) for g in goals]
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    payload: GoalCreate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """
    Create a goal. ``target_amount`` is given in major units.

    A goal with a target starts at the progress derived from current totals.
    """
    goal = await store.goals.create(account_id, payload.to_model_values())
    if goal.target_amount:
        await recompute_goal_progress(store, account_id)
    return ApiResponse(success=True, message="Goal created", data=_goal_data(goal))


@router.get("/{goal_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_goal(
    goal_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    goal = await store.goals.get(account_id, goal_id)
    if goal is None:
        raise NotFoundError(message=RecordErrorDetails.GOAL_NOT_FOUND)
    return ApiResponse(success=True, message="Goal retrieved", data=_goal_data(goal))


@router.patch("/{goal_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """
    Partial update. Progress outside [0, 100] is clamped, not rejected.

    Changing the target or type of a target-bearing goal recomputes its progress.
    """
    values = payload.to_model_values()
    goal = await store.goals.update(account_id, goal_id, values)
    if goal is None:
        raise NotFoundError(message=RecordErrorDetails.GOAL_NOT_FOUND)
    if goal.target_amount and DERIVED_PROGRESS_FIELDS & values.keys():
        await recompute_goal_progress(store, account_id)
    return ApiResponse(success=True, message="Goal updated", data=_goal_data(goal))


@router.delete("/{goal_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_goal(
    goal_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    if not await store.goals.delete(account_id, goal_id):
        raise NotFoundError(message=RecordErrorDetails.GOAL_NOT_FOUND)
    return ApiResponse(success=True, message="Goal deleted")
