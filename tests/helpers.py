"""Shared fixtures: in-memory database, canned OpenAI responses, sample records."""
import json
import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, db_manager
from app.repositories.record_store import RecordStore
import app.models  # noqa: F401

ACCOUNT_ID = "acct-owner"
OTHER_ACCOUNT_ID = "acct-other"


def completion(content=None, tool_calls=None):
    """Chat completion shaped like the OpenAI SDK's response object."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def json_completion(payload):
    return completion(content=payload if isinstance(payload, str) else json.dumps(payload))


def tool_call(name, arguments, call_id="call_1"):
    args = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=args),
    )


def fake_openai(*responses, error=None):
    """
    Client whose ``chat.completions.create`` returns the given responses in
    order, or raises ``error`` on every call.
    """
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        client.chat.completions.create = AsyncMock(side_effect=list(responses))
    return client


def dt(year, month, day, hour=0):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh in-memory SQLite schema per test with two provisioned accounts."""

    async def asyncSetUp(self):
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        db_manager.bind(self.engine)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self.session = self.session_factory()
        self.store = RecordStore(self.session)

        await self.store.accounts.create(ACCOUNT_ID, "owner@example.com", "Owner")
        await self.store.accounts.create(OTHER_ACCOUNT_ID, "other@example.com", "Other")
        await self.session.commit()

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def reload(self, repository: str, record_id: int, account_id: str = ACCOUNT_ID):
        """Read a record through a new session, bypassing this test's identity map."""
        async with self.session_factory() as session:
            return await getattr(RecordStore(session), repository).get(account_id, record_id)

    async def add_task(self, title="Task", account_id=ACCOUNT_ID, **values):
        task = await self.store.tasks.create(account_id, {"title": title, **values})
        await self.session.commit()
        return task

    async def add_goal(self, title="Goal", account_id=ACCOUNT_ID, **values):
        values.setdefault("type", "other")
        values.setdefault("category", "general")
        goal = await self.store.goals.create(account_id, {"title": title, **values})
        await self.session.commit()
        return goal

    async def add_record(self, record_type, amount, account_id=ACCOUNT_ID, **values):
        values.setdefault("category", "sales")
        values.setdefault("date", dt(2026, 1, 15))
        record = await self.store.financial_records.create(
            account_id, {"type": record_type, "amount": amount, **values}
        )
        await self.session.commit()
        return record
