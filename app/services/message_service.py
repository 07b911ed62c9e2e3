"""
Message Service - stores a chat turn and, for user turns, generates the reply.

Flow for a user message in a conversation:
save message -> build context -> converse -> execute actions -> save reply
-> retitle the conversation on its first message.
"""

import logging
from typing import Optional

from app.core.constants import (
    CONVERSATION_TITLE_MAX_LENGTH,
    DEFAULT_CONVERSATION_TITLE,
    ChatErrorDetails,
    MessageRole,
    RecordErrorDetails,
)
from app.core.exceptions import ModelUnavailableError, NotFoundError
from app.repositories.record_store import RecordStore
from app.schemas.conversation import MessageCreate, MessageExchangeResponse, MessageResponse
from app.services.action_executor import (
    ActionExecutor,
    confirmation_from_outcomes,
    created_financial_record_ids,
)
from app.services.chat_driver import ConversationalDriver
from app.services.context_builder import RelevanceContextBuilder, render_system_prompt
from app.services.correlation_pipeline import CorrelationDispatcher, correlation_dispatcher

logger = logging.getLogger("message_service")


def title_from_message(content: str) -> str:
    """Conversation title derived from its first message."""
    content = content.strip()
    if len(content) > CONVERSATION_TITLE_MAX_LENGTH:
        return f"{content[:CONVERSATION_TITLE_MAX_LENGTH]}..."
    return content


class MessageService:
    def __init__(
        self,
        store: RecordStore,
        context_builder: Optional[RelevanceContextBuilder] = None,
        driver: Optional[ConversationalDriver] = None,
        dispatcher: Optional[CorrelationDispatcher] = None,
    ):
        self.store = store
        self.context_builder = context_builder or RelevanceContextBuilder(store)
        self.driver = driver or ConversationalDriver()
        self.dispatcher = dispatcher or correlation_dispatcher

    async def list_messages(self, account_id: str, conversation_id: int) -> list[MessageResponse]:
        await self._require_conversation(account_id, conversation_id)
        messages = await self.store.messages.list_by_conversation(account_id, conversation_id)
        return [MessageResponse.model_validate(m) for m in messages]

    async def post_message(self, account_id: str, payload: MessageCreate) -> MessageExchangeResponse:
        """
        Persist a message and generate the assistant reply for user turns.

        The user message stays saved when the model fails; the response then
        carries ``ai_message=None`` and a generic error string.

        Raises:
            NotFoundError: Conversation or document is missing or foreign
        """
        if payload.conversation_id is not None:
            await self._require_conversation(account_id, payload.conversation_id)
        if payload.document_id is not None:
            document = await self.store.documents.get(account_id, payload.document_id)
            if document is None:
                raise NotFoundError(message=RecordErrorDetails.DOCUMENT_NOT_FOUND)

        user_message = await self.store.messages.create(account_id, payload.model_dump(mode="python"))
        await self.store.commit()
        user_response = MessageResponse.model_validate(user_message)

        if payload.role != MessageRole.USER or payload.conversation_id is None:
            return MessageExchangeResponse(user_message=user_response)

        conversation_id = payload.conversation_id
        history_records = await self.store.messages.list_by_conversation(account_id, conversation_id)
        history = [{"role": m.role, "content": m.content} for m in history_records]

        try:
            context = await self.context_builder.build_context(account_id, payload.content, conversation_id)
            result = await self.driver.converse(history, render_system_prompt(context))
        except ModelUnavailableError as e:
            logger.error(f"[MESSAGES] Reply generation failed for conversation {conversation_id}: {e.message}")
            return MessageExchangeResponse(
                user_message=user_response,
                ai_message=None,
                error=ChatErrorDetails.AI_RESPONSE_FAILED,
            )

        outcomes = await ActionExecutor(self.store).execute(account_id, result.actions)
        reply_text = result.response_text or confirmation_from_outcomes(outcomes)

        ai_message = await self.store.messages.create(
            account_id,
            {
                "conversation_id": conversation_id,
                "role": MessageRole.ASSISTANT.value,
                "content": reply_text,
            },
        )

        if len(history_records) == 1:
            conversation = await self.store.conversations.get(account_id, conversation_id)
            if conversation is not None and conversation.title == DEFAULT_CONVERSATION_TITLE:
                await self.store.conversations.update(
                    account_id, conversation_id, {"title": title_from_message(payload.content)}
                )

        await self.store.commit()

        for record_id in created_financial_record_ids(outcomes):
            self.dispatcher.dispatch(account_id, record_id)

        return MessageExchangeResponse(
            user_message=user_response,
            ai_message=MessageResponse.model_validate(ai_message),
        )

    async def _require_conversation(self, account_id: str, conversation_id: int) -> None:
        conversation = await self.store.conversations.get(account_id, conversation_id)
        if conversation is None:
            raise NotFoundError(message=RecordErrorDetails.CONVERSATION_NOT_FOUND)
