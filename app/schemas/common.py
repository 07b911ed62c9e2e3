"""Shared field types for request schemas."""
from datetime import datetime
from typing import Annotated
from pydantic import AfterValidator
from app.core.constants import PROGRESS_MIN, PROGRESS_MAX
from app.utils.dates import ensure_utc


def clamp_progress(value: float | int) -> int:
    """Clamp a progress percentage into [0, 100] and truncate to an integer."""
    return int(min(PROGRESS_MAX, max(PROGRESS_MIN, value)))


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
ClampedProgress = Annotated[float, AfterValidator(clamp_progress)]
