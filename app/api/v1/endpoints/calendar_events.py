"""Calendar event REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.planning import CalendarEventCreate, CalendarEventUpdate, CalendarEventResponse
from app.core.constants import RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore

router = APIRouter()


def _event_data(event) -> dict:
    return CalendarEventResponse.model_validate(event).model_dump(mode="json")


@router.get("", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_calendar_events(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    events = await store.calendar_events.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Calendar events retrieved",
        data=[_event_data(e) for e in events]
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_calendar_event(
    payload: CalendarEventCreate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    event = await store.calendar_events.create(account_id, payload.to_model_values())
    return ApiResponse(success=True, message="Calendar event created", data=_event_data(event))


@router.patch("/{event_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_calendar_event(
    event_id: int,
    payload: CalendarEventUpdate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    event = await store.calendar_events.update(account_id, event_id, payload.to_model_values())
    if event is None:
        raise NotFoundError(message=RecordErrorDetails.CALENDAR_EVENT_NOT_FOUND)
    return ApiResponse(success=True, message="Calendar event updated", data=_event_data(event))


@router.delete("/{event_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_calendar_event(
    event_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    if not await store.calendar_events.delete(account_id, event_id):
        raise NotFoundError(message=RecordErrorDetails.CALENDAR_EVENT_NOT_FOUND)
    return ApiResponse(success=True, message="Calendar event deleted")
