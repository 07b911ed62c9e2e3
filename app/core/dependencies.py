"""Dependencies for FastAPI endpoints."""
from fastapi import Depends, Request, Header
from slowapi import Limiter
from slowapi.util import get_remote_address
from limits import parse_many
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import AppException, RateLimitError
from app.core.constants import GeneralErrorDetails
from app.core.config import settings
from app.core.database import get_db
from app.repositories.account_repository import AccountRepository
from app.repositories.record_store import RecordStore

# Can be changed to Redis later: storage_uri="redis://localhost:6379"
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


async def get_current_account(
    x_account_id: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> str:
    """
    Resolve the account that owns every record touched by the request.

    Authentication lives in front of this service; it forwards the verified
    account identifier in the ``X-Account-Id`` header.

    Raises:
        AppException: If the header is missing, blank, or names no account
    """
    account_id = (x_account_id or "").strip()
    if not account_id:
        raise AppException(
            message=GeneralErrorDetails.UNAUTHORIZED,
            status_code=401
        )

    account = await AccountRepository(db).get_by_id(account_id)
    if account is None:
        raise AppException(
            message=GeneralErrorDetails.UNAUTHORIZED,
            status_code=401
        )
    return account.id


async def get_record_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    """Dependency injection for the account-scoped repositories."""
    return RecordStore(db)


async def check_message_rate_limit(request: Request) -> None:
    """Rate limit dependency for the chat endpoint, since every message costs model calls."""
    app_limiter = request.app.state.limiter
    rate_limit_str = f"{settings.MESSAGE_RATE_LIMIT_PER_MINUTE}/minute"

    key = get_remote_address(request)
    rate_limit = parse_many(rate_limit_str)[0]

    if not app_limiter._limiter.hit(rate_limit, key):
        raise RateLimitError(message=GeneralErrorDetails.RATE_LIMIT_EXCEEDED)

    return None
