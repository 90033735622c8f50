import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from auth import UserContext
from repositories import profiles_repository
from schemas import ProfileUpdate, UserProfile


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _identity_fields(user: UserContext) -> Dict[str, Any]:
    return {
        "id": user.user_id,
        "email": user.email,
        "email_confirmed": user.email_confirmed,
        "email_confirmed_at": user.email_confirmed_at,
        "last_sign_in_at": user.last_sign_in_at,
    }


def _get_or_create(user: UserContext) -> Dict[str, Any]:
    row = profiles_repository.fetch_profile(user.user_id)
    if row:
        return row
    now = _now()
    return profiles_repository.upsert_profile(
        {**_identity_fields(user), "created_at": now, "updated_at": now}
    )


async def get_profile(user: UserContext) -> UserProfile:
    row = await asyncio.to_thread(_get_or_create, user)
    return UserProfile(**row)


async def update_profile(user: UserContext, payload: ProfileUpdate) -> UserProfile:
    changes = payload.model_dump(exclude_unset=True)
    record = {**_identity_fields(user), **changes, "updated_at": _now()}
    row = await asyncio.to_thread(profiles_repository.upsert_profile, record)
    return UserProfile(**row)
