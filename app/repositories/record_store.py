"""Single entry point to every account-scoped repository bound to one session."""
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.account_repository import AccountRepository
from app.repositories.task_repository import TaskRepository
from app.repositories.goal_repository import GoalRepository
from app.repositories.financial_record_repository import FinancialRecordRepository
from app.repositories.calendar_event_repository import CalendarEventRepository
from app.repositories.document_repository import DocumentRepository, AiInsightRepository
from app.repositories.conversation_repository import ConversationRepository, MessageRepository


class RecordStore:
    """Groups the repositories so services can take one collaborator."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.accounts = AccountRepository(session)
        self.tasks = TaskRepository(session)
        self.goals = GoalRepository(session)
        self.financial_records = FinancialRecordRepository(session)
        self.calendar_events = CalendarEventRepository(session)
        self.documents = DocumentRepository(session)
        self.insights = AiInsightRepository(session)
        self.conversations = ConversationRepository(session)
        self.messages = MessageRepository(session)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
