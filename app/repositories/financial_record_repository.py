"""Financial record repository implementation using PostgreSQL."""
from sqlalchemy import select, func
from app.models.financial import FinancialRecord
from app.repositories.base import AccountScopedRepository


class FinancialRecordRepository(AccountScopedRepository[FinancialRecord]):
    model = FinancialRecord

    def _default_order(self):
        return (FinancialRecord.date.asc(), FinancialRecord.id.asc())

    async def totals_by_type(self, account_id: str) -> dict[str, int]:
        """Sum of amounts (minor units) per record type for the account."""
        stmt = (
            select(FinancialRecord.type, func.coalesce(func.sum(FinancialRecord.amount), 0))
            .where(FinancialRecord.account_id == account_id)
            .group_by(FinancialRecord.type)
        )
        result = await self._session.execute(stmt)
        return {record_type: int(total) for record_type, total in result.all()}
