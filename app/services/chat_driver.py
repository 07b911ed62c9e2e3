"""
Conversational Driver - one chat completion with declared tools.

The model's reply is split into the text shown to the user and the list of
actions it asked for through function calling. Nothing is executed here.
"""

import json
import logging
from typing import Any, Optional
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.constants import (
    ActionType,
    FinancialRecordType,
    GoalStatus,
    GoalType,
    TaskPriority,
    TaskStatus,
)
from app.core.exceptions import ModelUnavailableError
from app.core.llm import get_openai_client
from app.schemas.assistant import Action, ConversationResult

logger = logging.getLogger("chat_driver")


def _function(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "function": {
            "name": str(name),
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


UPDATE_TOOLS = [
    _function(
        ActionType.UPDATE_TASK_STATUS,
        "Update the status of a task",
        {
            "taskId": {"type": "integer", "description": "The ID of the task to update"},
            "status": {
                "type": "string",
                "enum": [s.value for s in TaskStatus],
                "description": "The new status for the task",
            },
        },
        ["taskId", "status"],
    ),
    _function(
        ActionType.UPDATE_GOAL_PROGRESS,
        "Update the progress of a goal",
        {
            "goalId": {"type": "integer", "description": "The ID of the goal to update"},
            "progress": {
                "type": "integer",
                "minimum": 0,
                "maximum": 100,
                "description": "The new progress percentage (0-100)",
            },
        },
        ["goalId", "progress"],
    ),
]

CREATE_TOOLS = [
    _function(
        ActionType.CREATE_GOAL,
        "Create a new business goal",
        {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "type": {"type": "string", "enum": [t.value for t in GoalType]},
            "category": {"type": "string"},
            "target_amount": {"type": "number", "description": "Target amount in dollars"},
            "target_date": {"type": "string", "description": "ISO 8601 date"},
            "status": {"type": "string", "enum": [s.value for s in GoalStatus]},
        },
        ["title", "type", "category"],
    ),
    _function(
        ActionType.CREATE_TASK,
        "Create a new task",
        {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "priority": {"type": "string", "enum": [p.value for p in TaskPriority]},
            "status": {"type": "string", "enum": [s.value for s in TaskStatus]},
            "due_date": {"type": "string", "description": "ISO 8601 date"},
        },
        ["title"],
    ),
    _function(
        ActionType.CREATE_CALENDAR_EVENT,
        "Create a calendar event",
        {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "start_date": {"type": "string", "description": "ISO 8601 date-time"},
            "end_date": {"type": "string", "description": "ISO 8601 date-time"},
            "all_day": {"type": "boolean"},
        },
        ["title", "start_date", "end_date"],
    ),
    _function(
        ActionType.CREATE_FINANCIAL_RECORD,
        "Record revenue or an expense",
        {
            "type": {"type": "string", "enum": [t.value for t in FinancialRecordType]},
            "category": {"type": "string"},
            "amount": {"type": "number", "description": "Amount in dollars, at least 0.01"},
            "description": {"type": "string"},
            "date": {"type": "string", "description": "ISO 8601 date"},
        },
        ["type", "category", "amount", "date"],
    ),
]


def declared_tools(include_create: Optional[bool] = None) -> list[dict]:
    if include_create is None:
        include_create = settings.ASSISTANT_CREATE_ACTIONS_ENABLED
    return UPDATE_TOOLS + CREATE_TOOLS if include_create else list(UPDATE_TOOLS)



class ConversationalDriver:
    """Runs one assistant turn and parses tool calls into actions."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def converse(self, history: list[dict], context_prompt: str) -> ConversationResult:
        """
        Send the context prompt and chat history to the model.

        Args:
            history: Prior turns as ``{"role", "content"}`` dicts, oldest first
            context_prompt: Rendered system prompt

        Returns:
            ConversationResult with the reply text and requested actions. The
            text is empty when the model only called tools; the caller writes
            the confirmation once it knows which actions were applied.

        Raises:
            ModelUnavailableError: Transport failure or unusable reply
        """
        tools = declared_tools()
        allowed = {tool["function"]["name"] for tool in tools}

        try:
            response = await self.client.chat.completions.create(
                model=settings.CHAT_MODEL,
                messages=[{"role": "system", "content": context_prompt}, *history],
                tools=tools,
                tool_choice="auto",
                max_tokens=settings.CHAT_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"[CHAT] Model call failed: {e}")
            raise ModelUnavailableError(message=str(e)) from e

        if not response.choices:
            logger.error("[CHAT] Model returned no choices")
            raise ModelUnavailableError(message="Model returned no choices")

        message = response.choices[0].message
        actions = self._parse_tool_calls(getattr(message, "tool_calls", None) or [], allowed)
        text = (message.content or "").strip()

        if not text and not actions:
            raise ModelUnavailableError(message="Model returned an empty reply")

        logger.info(f"[CHAT] Reply with {len(actions)} action(s)")
        return ConversationResult(response_text=text, actions=actions)

    @staticmethod
    def _parse_tool_calls(tool_calls: list[Any], allowed: set[str]) -> list[Action]:
        actions = []
        for call in tool_calls:
            function = getattr(call, "function", None)
            name = getattr(function, "name", None)
            if name not in allowed:
                logger.warning(f"[CHAT] Dropping call to undeclared tool: {name}")
                continue
            try:
                arguments = json.loads(function.arguments or "{}")
            except (json.JSONDecodeError, TypeError) as e:
                logger.warning(f"[CHAT] Dropping {name} call with malformed arguments: {e}")
                continue
            if not isinstance(arguments, dict):
                logger.warning(f"[CHAT] Dropping {name} call with non-object arguments")
                continue
            actions.append(Action(type=ActionType(name), parameters=arguments))
        return actions
