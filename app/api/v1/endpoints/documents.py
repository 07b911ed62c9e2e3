"""Document REST API endpoints. Upload and extraction happen elsewhere."""
from fastapi import APIRouter, Depends, status

from app.schemas.response import ApiResponse
from app.schemas.document import DocumentResponse
from app.core.constants import RecordErrorDetails
from app.core.dependencies import get_current_account, get_record_store
from app.core.exceptions import NotFoundError
from app.repositories.record_store import RecordStore

router = APIRouter()


def _document_data(document) -> dict:
    return DocumentResponse.model_validate(document).model_dump(mode="json")


@router.get("", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_documents(
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    documents = await store.documents.list_all(account_id)
    return ApiResponse(
        success=True,
        message="Documents retrieved",
        data=[_document_data(d) for d in documents]
    )


@router.get("/{document_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_document(
    document_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    document = await store.documents.get(account_id, document_id)
    if document is None:
        raise NotFoundError(message=RecordErrorDetails.DOCUMENT_NOT_FOUND)
    return ApiResponse(success=True, message="Document retrieved", data=_document_data(document))


@router.delete("/{document_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_document(
    document_id: int,
    account_id: str = Depends(get_current_account),
    store: RecordStore = Depends(get_record_store),
):
    if not await store.documents.delete(account_id, document_id):
        raise NotFoundError(message=RecordErrorDetails.DOCUMENT_NOT_FOUND)
    return ApiResponse(success=True, message="Document deleted")
