"""SQLAlchemy ORM models."""
from app.models.account import Account
from app.models.planning import Task, Goal, CalendarEvent
from app.models.financial import FinancialRecord
from app.models.document import Document, AiInsight
from app.models.conversation import Conversation, Message

__all__ = [
    "Account",
    "Task",
    "Goal",
    "CalendarEvent",
    "FinancialRecord",
    "Document",
    "AiInsight",
    "Conversation",
    "Message",
]
