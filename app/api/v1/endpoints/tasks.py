"""Task REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.planning import TaskCreate, TaskUpdate, TaskResponse
from app.core.constants import RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore

router = APIRouter()


def _task_data(task) -> dict:
    return TaskResponse.model_validate(task).model_dump(mode="json")


@router.get("", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_tasks(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    tasks = await store.tasks.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Tasks retrieved",
        data=[_task_data(t) for t in tasks]
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    task = await store.tasks.create(account_id, payload.to_model_values())
    return ApiResponse(success=True, message="Task created", data=_task_data(task))


@router.get("/{task_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_task(
    task_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    task = await store.tasks.get(account_id, task_id)
    if task is None:
        raise NotFoundError(message=RecordErrorDetails.TASK_NOT_FOUND)
    return ApiResponse(success=True, message="Task retrieved", data=_task_data(task))


@router.patch("/{task_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """Partial update. Any status may move to any other."""
    task = await store.tasks.update(account_id, task_id, payload.to_model_values())
    if task is None:
        raise NotFoundError(message=RecordErrorDetails.TASK_NOT_FOUND)
    return ApiResponse(success=True, message="Task updated", data=_task_data(task))


@router.delete("/{task_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_task(
    task_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    if not await store.tasks.delete(account_id, task_id):
        raise NotFoundError(message=RecordErrorDetails.TASK_NOT_FOUND)
    return ApiResponse(success=True, message="Task deleted")
