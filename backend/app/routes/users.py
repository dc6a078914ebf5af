"""
User Routes - The caller's own profile
"""
from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user_id, get_user_service
from app.models.user import User, UserUpdate
from app.services.users import UserService

router = APIRouter(prefix="/v1/users", tags=["users"])


@router.get("/me", response_model=User)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    """Get the caller's profile"""
    return await service.get_me(user_id)


@router.patch("/me", response_model=User)
async def update_me(
    request: UserUpdate,
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    """Update (or create) the caller's profile; plan tier is not writable here"""
    return await service.update_me(user_id, request)
