"""Financial record REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.financial import FinancialRecordCreate, FinancialRecordUpdate, FinancialRecordResponse
from app.core.constants import RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore
from app.services.correlation_pipeline import CorrelationDispatcher, get_correlation_dispatcher
from app.services.goal_progress import recompute_goal_progress

router = APIRouter()


def _record_data(record) -> dict:
    return FinancialRecordResponse.model_validate(record).model_dump(mode="json")


@router.get("", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_financial_records(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    records = await store.financial_records.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Financial records retrieved",
        data=[_record_data(r) for r in records]
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_financial_record(
    payload: FinancialRecordCreate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
    dispatcher: CorrelationDispatcher = Depends(get_correlation_dispatcher),
):
    """
    Record revenue or an expense. ``amount`` is given in major units.

    Correlation and goal recalculation run in the background once the record
    is committed; their outcome never affects this response.
    """
    record = await store.financial_records.create(account_id, payload.to_model_values())
    data = _record_data(record)
    await store.commit()

    dispatcher.dispatch(account_id, record.id)
    return ApiResponse(success=True, message="Financial record created", data=data)


@router.get("/{record_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_financial_record(
    record_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    record = await store.financial_records.get(account_id, record_id)
    if record is None:
        raise NotFoundError(message=RecordErrorDetails.FINANCIAL_RECORD_NOT_FOUND)
    return ApiResponse(success=True, message="Financial record retrieved", data=_record_data(record))


@router.patch("/{record_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_financial_record(
    record_id: int,
    payload: FinancialRecordUpdate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
    dispatcher: CorrelationDispatcher = Depends(get_correlation_dispatcher),
):
    record = await store.financial_records.update(account_id, record_id, payload.to_model_values())
    if record is None:
        raise NotFoundError(message=RecordErrorDetails.FINANCIAL_RECORD_NOT_FOUND)
    data = _record_data(record)
    await store.commit()

    dispatcher.dispatch(account_id, record_id)
    return ApiResponse(success=True, message="Financial record updated", data=data)


@router.delete("/{record_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_financial_record(
    record_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    """Delete a record and recalculate target-bearing goals from the remaining totals."""
    if not await store.financial_records.delete(account_id, record_id):
        raise NotFoundError(message=RecordErrorDetails.FINANCIAL_RECORD_NOT_FOUND)
    await recompute_goal_progress(store, account_id)
    return ApiResponse(success=True, message="Financial record deleted")
