"""Conversation and chat message REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.conversation import ConversationCreate, ConversationResponse, MessageCreate
from app.core.dependencies import check_message_rate_limit, get_current_account, get_record_store
from app.repositories.record_store import RecordStore
from app.services.correlation_pipeline import CorrelationDispatcher, get_correlation_dispatcher
from app.services.message_service import MessageService

router = APIRouter()


async def get_message_service(
    store: RecordStore = Depends(get_record_store),
    dispatcher: CorrelationDispatcher = Depends(get_correlation_dispatcher),
) -> MessageService:
    """Dependency injection for MessageService; model clients are created lazily."""
    return MessageService(store, dispatcher=dispatcher)


@router.get("/conversations", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_conversations(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    conversations = await store.conversations.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Conversations retrieved",
        data=[ConversationResponse.model_validate(c).model_dump(mode="json") for c in conversations]
    )


@router.post("/conversations", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    payload: ConversationCreate,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    conversation = await store.conversations.create(account_id, payload.model_dump())
    return ApiResponse(
        success=True,
        message="Conversation created",
        data=ConversationResponse.model_validate(conversation).model_dump(mode="json")
    )


@router.get("/messages/{conversation_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_messages(
    conversation_id: int,
    account_id: str = Depends(get_current_account),
    message_service: MessageService = Depends(get_message_service),
):
    messages = await message_service.list_messages(account_id, conversation_id)
    return ApiResponse(
        success=True,
        message="Messages retrieved",
        data=[m.model_dump(mode="json") for m in messages]
    )


@router.post("/messages", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def post_message(
    payload: MessageCreate,
    _: None = Depends(check_message_rate_limit),
    account_id: str = Depends(get_current_account),
    message_service: MessageService = Depends(get_message_service),
):
    """
    Save a message. User messages in a conversation also get an assistant
    reply; any actions the assistant requested are applied before it is saved.

    A model failure does not fail the request: the user message is returned
    with ``ai_message`` null and an ``error`` string.
    """
    exchange = await message_service.post_message(account_id, payload)
    return ApiResponse(
        success=exchange.error is None,
        message=exchange.error or "Message sent",
        data=exchange.model_dump(mode="json")
    )
