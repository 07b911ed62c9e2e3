"""
Correlation Analyzer - asks the model how one financial record relates to
the account's goals and tasks.

The reply is advisory. It is validated against CorrelationResult and any
failure degrades to an empty result, so callers never see an exception.
"""

import json
import logging
from typing import Optional, Sequence
from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.constants import FinancialRecordType
from app.core.llm import get_openai_client
from app.models import FinancialRecord, Goal, Task
from app.schemas.correlation import CorrelationResult
from app.utils.dates import format_date
from app.utils.money import format_minor_units

logger = logging.getLogger("correlation_analyzer")

SYSTEM_PROMPT = (
    "You are an expert business intelligence AI that analyzes financial data to find "
    "correlations with business goals and tasks. Always respond with valid JSON."
)

RECENT_RECORDS_IN_PROMPT = 5


def _sum_by_type(records: Sequence[FinancialRecord], record_type: FinancialRecordType) -> int:
    return sum(r.amount for r in records if r.type == record_type)


def build_correlation_prompt(
    record: FinancialRecord,
    goals: Sequence[Goal],
    tasks: Sequence[Task],
    recent_records: Sequence[FinancialRecord],
) -> str:
    total_revenue = _sum_by_type(recent_records, FinancialRecordType.REVENUE)
    total_expenses = _sum_by_type(recent_records, FinancialRecordType.EXPENSE)

    goal_lines = "\n".join(
        f'- ID: {g.id}, Title: "{g.title}", Type: {g.type}, Category: {g.category}, '
        f"Progress: {g.progress}%, Target Amount: {format_minor_units(g.target_amount)}, "
        f"Target Date: {format_date(g.target_date)}, Status: {g.status}, "
        f"Description: {g.description or 'No description'}"
        for g in goals
    ) or "- None"
    task_lines = "\n".join(
        f'- ID: {t.id}, Title: "{t.title}", Status: {t.status}, Priority: {t.priority}, '
        f"Due: {format_date(t.due_date) if t.due_date else 'No due date'}"
        for t in tasks
    ) or "- None"
    recent_lines = "\n".join(
        f"- {r.type}: {r.category} {format_minor_units(r.amount)} - {r.description or 'No description'}"
        for r in list(recent_records)[-RECENT_RECORDS_IN_PROMPT:]
    ) or "- None"

    return f"""You are an AI business intelligence agent that analyzes financial data to correlate it with business goals and tasks.

FINANCIAL RECORD TO ANALYZE:
- ID: {record.id}
- Type: {record.type}
- Category: {record.category}
- Amount: {format_minor_units(record.amount)}
- Description: {record.description or 'No description'}
- Date: {format_date(record.date)}

EXISTING GOALS:
{goal_lines}

TOTAL REVENUE ANALYSIS:
- Total Revenue: {format_minor_units(total_revenue)}
- Total Expenses: {format_minor_units(total_expenses)}
- Net Revenue: {format_minor_units(total_revenue - total_expenses)}

EXISTING TASKS:
{task_lines}

RECENT FINANCIAL CONTEXT:
{recent_lines}

ANALYSIS REQUIREMENTS:
1. Identify which goals and tasks are directly related to this financial record
2. Goals with a Target Amount are recalculated automatically; only propose progress for goals without one, and only when the evidence is clear
3. Suggest task status changes based on financial evidence
4. Provide business insights about spending patterns and goal alignment
5. Be conservative - only propose updates when there's clear evidence

Respond with a JSON object in this exact format:
{{
  "correlations": [
    {{
      "financialRecordId": {record.id},
      "relatedGoals": [goal_id_array],
      "relatedTasks": [task_id_array],
      "confidence": 0.0-1.0,
      "reasoning": "explanation of why these are related",
      "suggestedActions": ["action1", "action2"]
    }}
  ],
  "businessInsights": ["insight1", "insight2"],
  "recommendedActions": ["action1", "action2"],
  "progressUpdates": [
    {{"goalId": goal_id, "newProgress": percentage, "reason": "explanation"}}
  ],
  "taskUpdates": [
    {{"taskId": task_id, "newStatus": "completed|in_progress|pending", "reason": "explanation"}}
  ]
}}"""


class CorrelationAnalyzer:
    """JSON-mode correlation of a financial record with goals and tasks."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def analyze(
        self,
        record: FinancialRecord,
        goals: Sequence[Goal],
        tasks: Sequence[Task],
        recent_records: Sequence[FinancialRecord],
    ) -> CorrelationResult:
        """
        Analyze one financial record.

        Returns:
            CorrelationResult; empty on transport failure, empty content,
            malformed JSON or a reply that does not match the schema
        """
        prompt = build_correlation_prompt(record, goals, tasks, recent_records)
        try:
            response = await self.client.chat.completions.create(
                model=settings.CORRELATION_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
            content = response.choices[0].message.content
            if not content:
                logger.warning(f"[CORRELATION] Empty reply for record {record.id}")
                return CorrelationResult.empty()
            result = CorrelationResult.model_validate(json.loads(content))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"[CORRELATION] Unusable reply for record {record.id}: {e}")
            return CorrelationResult.empty()
        except Exception as e:
            logger.error(f"[CORRELATION] Analysis failed for record {record.id}: {e}")
            return CorrelationResult.empty()

        logger.info(
            f"[CORRELATION] Record {record.id}: {len(result.correlations)} correlation(s), "
            f"{len(result.progress_updates)} progress and {len(result.task_updates)} task proposal(s)"
        )
        return result
