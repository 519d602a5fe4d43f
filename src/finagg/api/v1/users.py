from fastapi import APIRouter, Depends

from finagg.api.deps import get_user_service
from finagg.schemas.user import UserInfo
from finagg.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserInfo])
async def list_users(service: UserService = Depends(get_user_service)) -> list[UserInfo]:
    return await service.list_users()
