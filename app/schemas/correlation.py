from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List
from app.core.constants import TaskStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class DataCorrelation(_CamelModel):
    financial_record_id: int
    related_goals: List[int] = Field(default_factory=list)
    related_tasks: List[int] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    reasoning: str = ""
    suggested_actions: List[str] = Field(default_factory=list)


class ProgressProposal(_CamelModel):
    goal_id: int
    new_progress: float
    reason: str = ""


class TaskStatusProposal(_CamelModel):
    task_id: int
    new_status: TaskStatus
    reason: str = ""


class CorrelationResult(_CamelModel):
    """Ephemeral output of one correlation pass; never persisted."""
    correlations: List[DataCorrelation] = Field(default_factory=list)
    business_insights: List[str] = Field(default_factory=list)
    recommended_actions: List[str] = Field(default_factory=list)
    progress_updates: List[ProgressProposal] = Field(default_factory=list)
    task_updates: List[TaskStatusProposal] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "CorrelationResult":
        return cls()

    def is_empty(self) -> bool:
        return not (
            self.correlations
            or self.business_insights
            or self.recommended_actions
            or self.progress_updates
            or self.task_updates
        )
