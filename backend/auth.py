import asyncio
from dataclasses import dataclass, replace
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
import httpx

from config import settings
from repositories.profiles_repository import is_admin as repo_is_admin


@dataclass(frozen=True)
class UserContext:
    user_id: str
    email: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    is_admin: bool = False

    @property
    def email_confirmed(self) -> bool:
        return bool(self.email_confirmed_at)


async def _fetch_user(access_token: str) -> dict:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_service_role_key,
    }
    url = f"{settings.supabase_url}/auth/v1/user"
    async with httpx.AsyncClient(timeout=10) as client:
        response = await client.get(url, headers=headers)
    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
    return response.json()


async def get_current_user(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> UserContext:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token"
        )
    token = authorization.split(" ", 1)[1]
    user = await _fetch_user(token)
    user_id = user.get("id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user profile"
        )
    return UserContext(
        user_id=user_id,
        email=user.get("email"),
        email_confirmed_at=user.get("email_confirmed_at"),
        last_sign_in_at=user.get("last_sign_in_at"),
    )


async def require_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    admin = await asyncio.to_thread(repo_is_admin, user.user_id)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return replace(user, is_admin=True)
