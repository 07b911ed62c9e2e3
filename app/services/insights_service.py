"""
Insights Service - workspace-wide business summary and dashboard counters.
"""

import json
import logging
from typing import Optional
from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.constants import DocumentStatus, FinancialRecordType, GoalStatus
from app.core.llm import get_openai_client
from app.repositories.record_store import RecordStore
from app.schemas.document import BusinessInsightsSummary, StatsResponse
from app.utils.dates import format_date
from app.utils.money import format_minor_units

logger = logging.getLogger("insights_service")

SYSTEM_PROMPT = (
    "You are a business intelligence expert analyzing financial data, goals, and tasks "
    "to provide actionable insights."
)

RECENT_RECORDS_IN_PROMPT = 10


class InsightsService:
    def __init__(self, store: RecordStore, client: Optional[AsyncOpenAI] = None):
        self.store = store
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def stats(self, account_id: str) -> StatsResponse:
        documents = await self.store.documents.list_all(account_id)
        goals = await self.store.goals.list_all(account_id)
        insights = await self.store.insights.list_all(account_id)

        return StatsResponse(
            documents_processed=sum(1 for d in documents if d.status == DocumentStatus.COMPLETED),
            active_goals=sum(1 for g in goals if g.status == GoalStatus.ACTIVE),
            insights_generated=len(insights),
            total_documents=len(documents),
            completed_goals=sum(1 for g in goals if g.status == GoalStatus.COMPLETED),
        )

    async def _build_prompt(self, account_id: str) -> str:
        totals = await self.store.financial_records.totals_by_type(account_id)
        goals = await self.store.goals.list_all(account_id)
        tasks = await self.store.tasks.list_all(account_id)
        records = await self.store.financial_records.list_all(account_id)

        revenue = totals.get(FinancialRecordType.REVENUE.value, 0)
        expenses = totals.get(FinancialRecordType.EXPENSE.value, 0)
        other = totals.get(FinancialRecordType.OTHER.value, 0)

        goal_lines = "\n".join(
            f'- "{g.title}": {g.progress}% complete, Status: {g.status}, Target: {format_date(g.target_date)}'
            for g in goals
        ) or "- None"
        task_lines = "\n".join(
            f'- "{t.title}": {t.status}, Priority: {t.priority}' for t in tasks
        ) or "- None"
        record_lines = "\n".join(
            f"- {r.type}: {r.category} {format_minor_units(r.amount)} - {r.description or 'No description'}"
            for r in records[-RECENT_RECORDS_IN_PROMPT:]
        ) or "- None"

        return f"""Analyze this business data to provide comprehensive insights:

FINANCIAL SUMMARY:
- Total Revenue: {format_minor_units(revenue)}
- Total Expenses: {format_minor_units(expenses)}
- Total Other: {format_minor_units(other)}
- Net Profit: {format_minor_units(revenue - expenses)}

GOALS STATUS:
{goal_lines}

TASKS STATUS:
{task_lines}

RECENT FINANCIAL RECORDS:
{record_lines}

Provide analysis in JSON format:
{{
  "insights": ["business insight 1", "business insight 2"],
  "financialTrends": ["trend 1", "trend 2"],
  "goalAlignment": ["alignment insight 1", "alignment insight 2"],
  "recommendations": ["recommendation 1", "recommendation 2"]
}}"""

    async def business_summary(self, account_id: str) -> BusinessInsightsSummary:
        """Narrative summary of the workspace. Empty lists when the model fails."""
        prompt = await self._build_prompt(account_id)
        try:
            response = await self.client.chat.completions.create(
                model=settings.INSIGHTS_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
            content = response.choices[0].message.content or "{}"
            return BusinessInsightsSummary.model_validate(json.loads(content))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"[INSIGHTS] Unusable summary reply: {e}")
        except Exception as e:
            logger.error(f"[INSIGHTS] Summary generation failed: {e}")
        return BusinessInsightsSummary()
