from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from daas.api.dependencies import get_access_service
from daas.api.schemas import AccessRequestOut, CreateAccessRequestIn, DecisionIn, ErrorOut
from daas.domain.access import AccessRequestService

router = APIRouter(prefix="/access-requests", tags=["Access Requests"])


@router.get(
    "",
    summary="List access requests",
    description="Returns all access requests, those filed by one user, or only pending ones.",
    response_model=list[AccessRequestOut],
)
async def list_access_requests(
    user_id: Optional[int] = Query(default=None, description="Only requests filed by this user"),
    pending_only: bool = Query(default=False, description="Only requests awaiting a decision"),
    service: AccessRequestService = Depends(get_access_service),
):
    """
    List access requests.

    Query Parameters:
    - pending_only: takes precedence over user_id
    - user_id: filter by requester
    """
    views = service.list_requests(user_id=user_id, pending_only=pending_only)
    return [AccessRequestOut.model_validate(v) for v in views]


@router.get(
    "/{request_id}",
    response_model=AccessRequestOut,
    responses={404: {"model": ErrorOut}},
)
async def get_access_request(
    request_id: int,
    service: AccessRequestService = Depends(get_access_service),
):
    """Get a specific access request."""
    return AccessRequestOut.model_validate(service.get_request(request_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=AccessRequestOut,
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}},
)
async def create_access_request(
    payload: CreateAccessRequestIn,
    user_id: int = Query(description="Identity of the requester"),
    service: AccessRequestService = Depends(get_access_service),
):
    view = await service.create_request(
        requester_id=user_id,
        document_id=payload.document_id,
        reason=payload.reason,
        access_type=payload.access_type,
    )
    return AccessRequestOut.model_validate(view)


@router.put(
    "/{request_id}/decision",
    response_model=AccessRequestOut,
    responses={
        403: {"model": ErrorOut},
        404: {"model": ErrorOut},
        409: {"model": ErrorOut},
    },
)
async def decide_access_request(
    request_id: int,
    payload: DecisionIn,
    approver_id: int = Query(description="Identity of the approver"),
    service: AccessRequestService = Depends(get_access_service),
):
    """Approve or reject a pending access request."""
    view = await service.record_decision(
        request_id=request_id,
        approver_id=approver_id,
        approved=payload.approved,
        comment=payload.comment,
    )
    return AccessRequestOut.model_validate(view)
