from enum import StrEnum


class TaskStatus(StrEnum):
    """Task status. Any state may move to any other."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Fallback ranking weight for tasks (higher first)
PRIORITY_RANK = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}


class GoalType(StrEnum):
    REVENUE = "revenue"
    EXPENSE = "expense"
    OTHER = "other"


class GoalStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class FinancialRecordType(StrEnum):
    REVENUE = "revenue"
    EXPENSE = "expense"
    OTHER = "other"


class DocumentStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class ActionType(StrEnum):
    """Mutations the assistant may request through function calling."""
    UPDATE_TASK_STATUS = "update_task_status"
    UPDATE_GOAL_PROGRESS = "update_goal_progress"
    CREATE_GOAL = "create_goal"
    CREATE_TASK = "create_task"
    CREATE_CALENDAR_EVENT = "create_calendar_event"
    CREATE_FINANCIAL_RECORD = "create_financial_record"


PROGRESS_MIN = 0
PROGRESS_MAX = 100

DEFAULT_TOPIC = "general"
DEFAULT_CONVERSATION_TITLE = "New Conversation"
CONVERSATION_TITLE_MAX_LENGTH = 50


class GeneralErrorDetails(StrEnum):
    """General application error messages."""

    INTERNAL_SERVER_ERROR = "Internal server error"
    UNAUTHORIZED = "Authentication required"
    RATE_LIMIT_EXCEEDED = "Too many messages sent. Please wait before sending again"


class RecordErrorDetails(StrEnum):
    """Record lookup and validation error messages."""

    TASK_NOT_FOUND = "Task not found"
    GOAL_NOT_FOUND = "Goal not found"
    FINANCIAL_RECORD_NOT_FOUND = "Financial record not found"
    CALENDAR_EVENT_NOT_FOUND = "Calendar event not found"
    DOCUMENT_NOT_FOUND = "Document not found"
    CONVERSATION_NOT_FOUND = "Conversation not found"


class ChatErrorDetails(StrEnum):
    """Chat and messaging related error messages."""

    AI_RESPONSE_FAILED = "Failed to generate AI response"
