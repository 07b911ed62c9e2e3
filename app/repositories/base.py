"""Account-scoped CRUD shared by every repository."""
from typing import Generic, Optional, Sequence, TypeVar
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class AccountScopedRepository(Generic[ModelT]):
    """
    Base repository. Every query includes the account identifier as a predicate,
    so a record owned by another account behaves exactly like a missing one.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    def _scoped(self, account_id: str):
        return select(self.model).where(self.model.account_id == account_id)

    def _default_order(self) -> Sequence:
        return (self.model.created_at.asc(), self.model.id.asc())

    async def get(self, account_id: str, record_id: int) -> Optional[ModelT]:
        """Retrieve one record owned by the account."""
        stmt = self._scoped(account_id).where(self.model.id == record_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, account_id: str) -> list[ModelT]:
        """Retrieve all records owned by the account."""
        stmt = self._scoped(account_id).order_by(*self._default_order())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, account_id: str, values: dict) -> ModelT:
        """Insert a record for the account."""
        record = self.model(account_id=account_id, **values)
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def update(self, account_id: str, record_id: int, values: dict) -> Optional[ModelT]:
        """Apply a partial update. Returns None when the record is missing or foreign."""
        record = await self.get(account_id, record_id)
        if record is None:
            return None
        for field, value in values.items():
            setattr(record, field, value)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def delete(self, account_id: str, record_id: int) -> bool:
        """Delete a record. Returns False when nothing was deleted."""
        stmt = (
            delete(self.model)
            .where(self.model.account_id == account_id, self.model.id == record_id)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0
