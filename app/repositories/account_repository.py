"""Account repository implementation using PostgreSQL."""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.account import Account


class AccountRepository:
    """Lookup and registration of accounts provisioned by the auth layer."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        stmt = select(Account).where(Account.id == account_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, account_id: str, email: str, name: Optional[str] = None) -> Account:
        account = Account(id=account_id, email=email, name=name)
        self._session.add(account)
        await self._session.flush()
        await self._session.refresh(account)
        return account
