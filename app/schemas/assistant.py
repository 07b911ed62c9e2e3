from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional
from app.core.constants import ActionType, TaskStatus


class Action(BaseModel):
    """A mutation requested by the model, executed server-side."""
    type: ActionType
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ActionOutcome(BaseModel):
    """What happened to one action. Informational; callers may ignore it."""
    action: Action
    status: Literal["applied", "skipped"]
    record_id: Optional[int] = None
    summary: Optional[str] = None
    error: Optional[str] = None


class ConversationResult(BaseModel):
    """``response_text`` is empty when the model only asked for actions."""
    response_text: str = ""
    actions: List[Action] = Field(default_factory=list)


class UpdateTaskStatusParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    task_id: int = Field(alias="taskId")
    status: TaskStatus


class UpdateGoalProgressParams(BaseModel):
    """Progress is not range-checked here; the executor clamps it."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    goal_id: int = Field(alias="goalId")
    progress: float
