"""AI insight and dashboard REST API endpoints."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.document import AiInsightResponse
from app.core.dependencies import get_current_account, get_record_store
from app.repositories.record_store import RecordStore
from app.services.insights_service import InsightsService

router = APIRouter()


async def get_insights_service(store: RecordStore = Depends(get_record_store)) -> InsightsService:
    return InsightsService(store)


def _insight_data(insight) -> dict:
    return AiInsightResponse.model_validate(insight).model_dump(mode="json")


@router.get("/insights", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_insights(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    insights = await store.insights.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Insights retrieved",
        data=[_insight_data(i) for i in insights]
    )


@router.get("/insights/document/{document_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_document_insights(
    document_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    insights = await store.insights.list_by_document(account_id, document_id)
    return ApiResponse(
        success=True,
        message="Insights retrieved",
        data=[_insight_data(i) for i in insights]
    )


@router.get("/insights/business", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def business_insights(
    account_id: str = Depends(get_current_account),
    insights_service: InsightsService = Depends(get_insights_service),
):
    """Workspace-wide narrative summary; empty lists when the model is unavailable."""
    summary = await insights_service.business_summary(account_id)
    return ApiResponse(
        success=True,
        message="Business insights generated",
        data=summary.model_dump(mode="json", by_alias=True)
    )


@router.get("/stats", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_stats(
    account_id: str = Depends(get_current_account),
    insights_service: InsightsService = Depends(get_insights_service),
):
    stats = await insights_service.stats(account_id)
    return ApiResponse(success=True, message="Stats retrieved", data=stats.model_dump(mode="json"))
