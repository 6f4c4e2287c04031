from fastapi import APIRouter, Depends

from daas.api.dependencies import get_access_service
from daas.api.schemas import DocumentOut, ErrorOut
from daas.domain.access import AccessRequestService

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get("", response_model=list[DocumentOut])
async def list_documents(service: AccessRequestService = Depends(get_access_service)):
    return [DocumentOut.model_validate(d) for d in service.list_documents()]


@router.get("/{document_id}", response_model=DocumentOut, responses={404: {"model": ErrorOut}})
async def get_document(document_id: int, service: AccessRequestService = Depends(get_access_service)):
    return DocumentOut.model_validate(service.get_document(document_id))
