"""
Relevance Context Builder - decides which stored records go into the assistant prompt.

A short topic is extracted from the user's message, every collection is split
into records that mention the topic ("relevant") and a small, policy-ranked
sample of the rest ("fallback"), and both are rendered as separate labelled
sections so the model can weight them differently.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, Sequence
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.constants import DEFAULT_TOPIC, GoalStatus, PRIORITY_RANK
from app.core.llm import get_openai_client
from app.models import AiInsight, CalendarEvent, Document, FinancialRecord, Goal, Message, Task
from app.repositories.record_store import RecordStore
from app.utils.dates import ensure_utc, format_date, utcnow
from app.utils.money import format_minor_units

logger = logging.getLogger("context_builder")

TOPIC_SYSTEM_PROMPT = (
    "Extract the main topic or keyword from the user message. Return only a single word "
    "or short phrase that captures the core subject. Examples: 'revenue', 'tasks', 'goals', "
    "'team', 'growth', 'expenses', 'calendar', 'documents'."
)

ASSISTANT_INSTRUCTIONS = """You are an AI business assistant with the ability to update tasks and goals. Help users with business analysis, planning, and decision-making. Provide clear, actionable advice based on their questions and any document context they provide.

CRITICAL: When the user provides data that would change goal progress or task status, you MUST call the appropriate function to update it. Do not just calculate or mention the change - actually execute it using the available functions.

IMPORTANT: You must call the function IN THE SAME RESPONSE as your calculation. Do not say "updating now" or "executing update" - just call the function directly.

FORMATTING GUIDELINES:
- Use markdown: **bold** for emphasis, ### for subheadings, bullet or numbered lists
- Use tables when comparing multiple items with similar attributes
- Format dates consistently and clearly

FUNCTION CALLING REQUIREMENTS:
- You MUST call update_task_status / update_goal_progress whenever the user provides information that changes task status or goal progress
- NEVER say you're updating something without calling the actual function
- If you calculate a new progress percentage, immediately call update_goal_progress with that percentage

PROGRESS CALCULATION RULES:
- Goal progress must be between 0 and 100; cap anything above 100 at 100
- Goals that carry a target amount are recalculated from financial records automatically

GOAL IDENTIFICATION:
- Use the exact ID number shown in the lists below
- Match goals and tasks by their title text to find the correct ID"""

CLOSING_INSTRUCTIONS = (
    "Use this context to provide more relevant and helpful responses. Reference specific "
    "tasks, goals, documents, or calendar events when appropriate."
)

SUMMARY_PREVIEW_CHARS = 100


@dataclass
class RecordBundle:
    """One subset of the account's records, per collection."""
    tasks: list[Task] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    financial_records: list[FinancialRecord] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)
    insights: list[AiInsight] = field(default_factory=list)
    calendar_events: list[CalendarEvent] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)

    def count(self) -> int:
        return sum(len(getattr(self, f.name)) for f in fields(self))

    def is_empty(self) -> bool:
        return self.count() == 0


@dataclass
class RelevantContext:
    topic: str
    relevant: RecordBundle
    fallback: RecordBundle


def contains_topic(topic: str, *texts: Optional[str]) -> bool:
    """Case-insensitive substring match of the topic against any of the texts."""
    if not topic:
        return False
    needle = topic.lower()
    return any(text and needle in text.lower() for text in texts)


def _partition(
    records: Sequence[Any], topic: str, text_of: Callable[[Any], Iterable[Optional[str]]]
) -> tuple[list[Any], list[Any]]:
    relevant, rest = [], []
    for record in records:
        (relevant if contains_topic(topic, *text_of(record)) else rest).append(record)
    return relevant, rest


def _clean_topic(raw: Optional[str]) -> str:
    topic = (raw or "").strip().strip("\"'`").rstrip(".!?").strip().lower()
    return topic or DEFAULT_TOPIC


class RelevanceContextBuilder:
    """Builds the two-tier (relevant + fallback) context for one user message."""

    def __init__(
        self,
        store: RecordStore,
        client: Optional[AsyncOpenAI] = None,
        fallback_limit: Optional[int] = None,
        event_window_days: Optional[int] = None,
    ):
        self.store = store
        self._client = client
        self.fallback_limit = fallback_limit or settings.CONTEXT_FALLBACK_LIMIT
        self.event_window_days = event_window_days or settings.CONTEXT_EVENT_WINDOW_DAYS

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def extract_topic(self, message: str) -> str:
        """
        Derive a short topic from the message with a cheap model call.

        Never raises: any failure or empty reply degrades to ``"general"``.
        """
        try:
            response = await self.client.chat.completions.create(
                model=settings.TOPIC_MODEL,
                messages=[
                    {"role": "system", "content": TOPIC_SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
                max_tokens=20,
                temperature=0.1,
            )
            topic = _clean_topic(response.choices[0].message.content)
        except Exception as e:
            logger.warning(f"[CONTEXT] Topic extraction failed, using '{DEFAULT_TOPIC}': {e}")
            return DEFAULT_TOPIC

        logger.info(f"[CONTEXT] Topic detected: '{topic}'")
        return topic

    async def build_context(
        self, account_id: str, message: str, conversation_id: Optional[int]
    ) -> RelevantContext:
        """Extract the topic and split every collection into relevant and fallback bundles."""
        topic = await self.extract_topic(message)

        tasks = await self.store.tasks.list_all(account_id)
        goals = await self.store.goals.list_all(account_id)
        financial_records = await self.store.financial_records.list_all(account_id)
        documents = await self.store.documents.list_all(account_id)
        insights = await self.store.insights.list_all(account_id)
        calendar_events = await self.store.calendar_events.list_all(account_id)
        messages = (
            await self.store.messages.list_by_conversation(account_id, conversation_id)
            if conversation_id is not None
            else []
        )

        return self.partition(
            topic,
            tasks=tasks,
            goals=goals,
            financial_records=financial_records,
            documents=documents,
            insights=insights,
            calendar_events=calendar_events,
            messages=messages,
        )

    def partition(
        self,
        topic: str,
        *,
        tasks: Sequence[Task] = (),
        goals: Sequence[Goal] = (),
        financial_records: Sequence[FinancialRecord] = (),
        documents: Sequence[Document] = (),
        insights: Sequence[AiInsight] = (),
        calendar_events: Sequence[CalendarEvent] = (),
        messages: Sequence[Message] = (),
    ) -> RelevantContext:
        limit = self.fallback_limit
        relevant, fallback = RecordBundle(), RecordBundle()

        relevant.tasks, rest_tasks = _partition(tasks, topic, lambda t: (t.title, t.description))
        # sorted() is stable, so equal priorities keep store order
        fallback.tasks = sorted(
            rest_tasks,
            key=lambda t: PRIORITY_RANK.get(t.priority, 0),
            reverse=True,
        )[:limit]

        relevant.goals, rest_goals = _partition(goals, topic, lambda g: (g.title, g.description))
        fallback.goals = sorted(
            (g for g in rest_goals if g.status == GoalStatus.ACTIVE),
            key=lambda g: g.progress,
            reverse=True,
        )[:limit]

        relevant.financial_records, rest_records = _partition(
            financial_records, topic, lambda r: (r.category, r.description)
        )
        fallback.financial_records = sorted(
            rest_records, key=lambda r: ensure_utc(r.date), reverse=True
        )[:limit]

        relevant.documents, rest_documents = _partition(
            documents, topic, lambda d: (d.original_name, d.filename, d.summary)
        )
        fallback.documents = sorted(
            rest_documents, key=lambda d: ensure_utc(d.uploaded_at), reverse=True
        )[:limit]

        relevant.insights, rest_insights = _partition(insights, topic, lambda i: (i.title, i.content))
        fallback.insights = sorted(
            rest_insights, key=lambda i: ensure_utc(i.created_at), reverse=True
        )[:limit]

        relevant.calendar_events, rest_events = _partition(
            calendar_events, topic, lambda e: (e.title, e.description)
        )
        now = utcnow()
        window_end = now + timedelta(days=self.event_window_days)
        fallback.calendar_events = sorted(
            (e for e in rest_events if now <= ensure_utc(e.start_date) <= window_end),
            key=lambda e: ensure_utc(e.start_date),
        )[:limit]

        relevant.messages, rest_messages = _partition(messages, topic, lambda m: (m.content,))
        fallback.messages = list(rest_messages)[-limit:]

        logger.info(
            f"[CONTEXT] topic='{topic}' relevant={relevant.count()} fallback={fallback.count()}"
        )
        return RelevantContext(topic=topic, relevant=relevant, fallback=fallback)


# =============================================================================
# PROMPT RENDERING
# =============================================================================

def _render_task(task: Task) -> str:
    line = f'ID: {task.id} - "{task.title}" - {task.status} (Priority: {task.priority})'
    if task.description:
        line += f" - {task.description}"
    if task.due_date:
        line += f" - Due: {format_date(task.due_date)}"
    return line


def _render_goal(goal: Goal) -> str:
    line = (
        f'ID: {goal.id} - "{goal.title}" - {goal.status} '
        f"(Progress: {goal.progress}%, Target: {format_date(goal.target_date)}"
    )
    if goal.target_amount:
        line += f", Target Amount: {format_minor_units(goal.target_amount)}"
    line += ")"
    if goal.description:
        line += f" - {goal.description}"
    return line


def _render_financial_record(record: FinancialRecord) -> str:
    line = (
        f"{record.type} - {record.category} - {format_minor_units(record.amount)} "
        f"({format_date(record.date)})"
    )
    if record.description:
        line += f" - {record.description}"
    return line


def _preview(text: str) -> str:
    if len(text) <= SUMMARY_PREVIEW_CHARS:
        return text
    return f"{text[:SUMMARY_PREVIEW_CHARS]}..."


def _render_document(document: Document) -> str:
    line = f"{document.original_name} - {document.status} ({format_date(document.uploaded_at)})"
    if document.summary:
        line += f" - {_preview(document.summary)}"
    return line


def _render_insight(insight: AiInsight) -> str:
    return f"{insight.type}: {insight.title} - {_preview(insight.content)}"


def _render_event(event: CalendarEvent) -> str:
    line = f"{event.title} - {format_date(event.start_date)} to {format_date(event.end_date)}"
    if event.description:
        line += f" - {event.description}"
    return line


# (attribute, relevant heading, fallback heading, renderer)
_SECTIONS = (
    ("tasks", "Relevant Tasks", "Top Priority Tasks", _render_task),
    ("goals", "Relevant Goals", "Active Goals", _render_goal),
    ("financial_records", "Relevant Financial Records", "Recent Financial Records", _render_financial_record),
    ("documents", "Relevant Documents", "Recent Documents", _render_document),
    ("insights", "Relevant AI Insights", "Recent AI Insights", _render_insight),
    ("calendar_events", "Relevant Calendar Events", "Upcoming Calendar Events", _render_event),
)


def _render_bundle(bundle: RecordBundle, relevant: bool) -> list[str]:
    parts = []
    for attr, relevant_heading, fallback_heading, render in _SECTIONS:
        items = getattr(bundle, attr)
        if not items:
            continue
        heading = relevant_heading if relevant else fallback_heading
        lines = [f"{index}. {render(item)}" for index, item in enumerate(items, start=1)]
        parts.append(f"### {heading} ({len(items)}):\n" + "\n".join(lines))
    return parts


def render_system_prompt(context: RelevantContext) -> str:
    """
    Render the assistant system prompt for a context.

    Empty collections produce no subsection, and a bundle with nothing to show
    produces no top-level section. Conversation messages are not rendered;
    they reach the model as chat history.
    """
    relevant_parts = _render_bundle(context.relevant, relevant=True)
    fallback_parts = _render_bundle(context.fallback, relevant=False)

    sections = [
        ASSISTANT_INSTRUCTIONS,
        "## CONTEXT SUMMARY\n"
        f'Topic detected: "{context.topic}"\n'
        f"Relevant data items found: {context.relevant.count()}\n"
        f"Fallback data items included: {context.fallback.count()}",
    ]
    if relevant_parts:
        sections.append(f"## RELEVANT DATA (Topic: {context.topic})\n\n" + "\n\n".join(relevant_parts))
    if fallback_parts:
        sections.append("## FALLBACK DATA (Additional Context)\n\n" + "\n\n".join(fallback_parts))
    sections.append(CLOSING_INSTRUCTIONS)
    return "\n\n".join(sections)
