from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from app.core.constants import TaskPriority, TaskStatus, GoalType, GoalStatus
from app.schemas.common import UtcDatetime, ClampedProgress
from app.utils.money import to_minor_units


class TaskCreate(BaseModel):
    """Payload for creating a task, shared by the REST API and the assistant."""
    model_config = ConfigDict(extra='ignore')

    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[UtcDatetime] = None

    def to_model_values(self) -> dict:
        return self.model_dump(mode="python")


class TaskUpdate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[UtcDatetime] = None

    def to_model_values(self) -> dict:
        return self.model_dump(mode="python", exclude_unset=True)


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class GoalCreate(BaseModel):
    """
    Payload for creating a goal.

    ``target_amount`` is given in major units and stored in minor units.
    """
    model_config = ConfigDict(extra='ignore')

    title: str = Field(min_length=1)
    description: Optional[str] = None
    type: GoalType
    category: str = Field(min_length=1)
    target_amount: Optional[float] = Field(default=None, gt=0)
    target_date: Optional[UtcDatetime] = None
    progress: ClampedProgress = 0
    status: GoalStatus = GoalStatus.ACTIVE

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Category is required")
        return v.strip()

    def to_model_values(self) -> dict:
        values = self.model_dump(mode="python")
        if self.target_amount is not None:
            values["target_amount"] = to_minor_units(self.target_amount)
        return values


class GoalUpdate(BaseModel):
    """Direct user edit. Out-of-range progress is clamped, not rejected."""
    model_config = ConfigDict(extra='ignore')

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    target_amount: Optional[float] = Field(default=None, gt=0)
    target_date: Optional[UtcDatetime] = None
    progress: Optional[ClampedProgress] = None
    status: Optional[GoalStatus] = None

    def to_model_values(self) -> dict:
        values = self.model_dump(mode="python", exclude_unset=True)
        if values.get("target_amount") is not None:
            values["target_amount"] = to_minor_units(values["target_amount"])
        return values


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    type: str
    category: str
    target_amount: Optional[int] = None
    target_date: Optional[datetime] = None
    progress: int
    status: str
    created_at: datetime
    updated_at: datetime


class CalendarEventCreate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: UtcDatetime
    end_date: UtcDatetime
    all_day: bool = False
    completed: bool = False

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: datetime, info) -> datetime:
        start = info.data.get("start_date")
        if start is not None and v < start:
            raise ValueError("end_date must not be before start_date")
        return v

    def to_model_values(self) -> dict:
        return self.model_dump(mode="python")


class CalendarEventUpdate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    all_day: Optional[bool] = None
    completed: Optional[bool] = None

    def to_model_values(self) -> dict:
        return self.model_dump(mode="python", exclude_unset=True)


class CalendarEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    all_day: bool
    completed: bool
    created_at: datetime
    updated_at: datetime
