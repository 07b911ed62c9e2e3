"""Conversation and message repositories implemented using PostgreSQL."""
from app.models.conversation import Conversation, Message
from app.repositories.base import AccountScopedRepository


class ConversationRepository(AccountScopedRepository[Conversation]):
    model = Conversation

    def _default_order(self):
        return (Conversation.updated_at.desc(), Conversation.id.desc())


class MessageRepository(AccountScopedRepository[Message]):
    model = Message

    async def list_by_conversation(self, account_id: str, conversation_id: int) -> list[Message]:
        """Messages of one conversation in chronological order."""
        stmt = (
            self._scoped(account_id)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
