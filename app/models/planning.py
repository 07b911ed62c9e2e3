"""Planning SQLAlchemy models - Tasks, Goals, Calendar Events."""
from datetime import datetime
from sqlalchemy import BigInteger, String, Integer, Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base
from app.core.constants import TaskPriority, TaskStatus, GoalStatus
from app.models.base import AccountOwnedMixin


class Task(AccountOwnedMixin, Base):
    """Task model."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(
        String(20), default=TaskPriority.MEDIUM.value, nullable=False
    )  # low, medium, high
    status: Mapped[str] = mapped_column(
        String(20), default=TaskStatus.PENDING.value, nullable=False, index=True
    )  # pending, in_progress, completed
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, status={self.status})>"


class Goal(AccountOwnedMixin, Base):
    """Business goal model. Progress is derived from financial totals when a target amount exists."""

    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # revenue, expense, other
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    target_amount: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # minor units
    target_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # 0-100
    status: Mapped[str] = mapped_column(
        String(20), default=GoalStatus.ACTIVE.value, nullable=False, index=True
    )  # active, completed, paused

    def __repr__(self) -> str:
        return f"<Goal(id={self.id}, title={self.title!r}, progress={self.progress})>"


class CalendarEvent(AccountOwnedMixin, Base):
    """Calendar event model."""

    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    all_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<CalendarEvent(id={self.id}, title={self.title!r})>"
