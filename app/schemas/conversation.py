from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from app.core.constants import MessageRole, DEFAULT_CONVERSATION_TITLE


class ConversationCreate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    title: str = Field(default=DEFAULT_CONVERSATION_TITLE, min_length=1)


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    created_at: datetime
    updated_at: datetime


class MessageCreate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    conversation_id: Optional[int] = None
    role: MessageRole = MessageRole.USER
    content: str = Field(min_length=1)
    document_id: Optional[int] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: Optional[int] = None
    role: str
    content: str
    document_id: Optional[int] = None
    created_at: datetime


class MessageExchangeResponse(BaseModel):
    """Result of posting a message: the stored user turn and, when generated, the reply."""
    user_message: MessageResponse
    ai_message: Optional[MessageResponse] = None
    error: Optional[str] = None
