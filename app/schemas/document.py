from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any
from datetime import datetime


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    summary: Optional[str] = None
    insights: List[Any] = Field(default_factory=list)
    status: str
    uploaded_at: datetime
    processed_at: Optional[datetime] = None


class AiInsightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: Optional[int] = None
    type: str
    title: str
    content: str
    confidence: int
    created_at: datetime


class BusinessInsightsSummary(BaseModel):
    """Workspace-wide narrative summary. Empty lists when the model is unavailable."""
    model_config = ConfigDict(populate_by_name=True)

    insights: List[str] = Field(default_factory=list)
    financial_trends: List[str] = Field(default_factory=list, alias="financialTrends")
    goal_alignment: List[str] = Field(default_factory=list, alias="goalAlignment")
    recommendations: List[str] = Field(default_factory=list)


class StatsResponse(BaseModel):
    documents_processed: int
    active_goals: int
    insights_generated: int
    total_documents: int
    completed_goals: int
