from fastapi import APIRouter, Depends

from auth import UserContext, get_current_user
from schemas import ProfileUpdate, UserProfile
from services import profile_service

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def read_profile(user: UserContext = Depends(get_current_user)) -> UserProfile:
    return await profile_service.get_profile(user)


@router.put("", response_model=UserProfile)
async def update_profile(
    payload: ProfileUpdate,
    user: UserContext = Depends(get_current_user),
) -> UserProfile:
    return await profile_service.update_profile(user, payload)
