"""Shared column definitions for account-owned models."""
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, declared_attr


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountOwnedMixin:
    """Adds the owning account and audit timestamps."""

    @declared_attr
    def account_id(cls) -> Mapped[str]:
        return mapped_column(
            String(64), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
        )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )
