"""Health check endpoints for monitoring and orchestration."""
from fastapi import APIRouter, Response, status

from app.core.database import db_manager
from app.schemas.response import ApiResponse

router = APIRouter()


@router.get("/health", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def health_check(response: Response):
    """
    Liveness plus database connectivity.

    Returns 503 when the database cannot be reached.
    """
    database_ok = await db_manager.check_connection()
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ApiResponse(
        success=database_ok,
        message="System operational" if database_ok else "Database unavailable",
        data={"status": "ok" if database_ok else "degraded", "database": database_ok}
    )
