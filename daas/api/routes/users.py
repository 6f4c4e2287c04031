from fastapi import APIRouter, Depends

from daas.api.dependencies import get_access_service
from daas.api.schemas import ErrorOut, UserOut
from daas.domain.access import AccessRequestService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserOut])
async def list_users(service: AccessRequestService = Depends(get_access_service)):
    return [UserOut.model_validate(u) for u in service.list_users()]


@router.get("/{user_id}", response_model=UserOut, responses={404: {"model": ErrorOut}})
async def get_user(user_id: int, service: AccessRequestService = Depends(get_access_service)):
    return UserOut.model_validate(service.get_user(user_id))
