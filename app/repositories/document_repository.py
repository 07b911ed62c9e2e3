"""Document and insight repositories implemented using PostgreSQL."""
from app.models.document import Document, AiInsight
from app.repositories.base import AccountScopedRepository


class DocumentRepository(AccountScopedRepository[Document]):
    model = Document

    def _default_order(self):
        return (Document.uploaded_at.desc(), Document.id.desc())


class AiInsightRepository(AccountScopedRepository[AiInsight]):
    model = AiInsight

    def _default_order(self):
        return (AiInsight.created_at.desc(), AiInsight.id.desc())

    async def list_by_document(self, account_id: str, document_id: int) -> list[AiInsight]:
        stmt = (
            self._scoped(account_id)
            .where(AiInsight.document_id == document_id)
            .order_by(*self._default_order())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
