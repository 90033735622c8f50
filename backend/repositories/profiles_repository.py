from typing import Any, Dict, Optional

from supabase_client import get_supabase

TABLE_NAME = "user_profiles"


def fetch_profile(user_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def upsert_profile(record: Dict[str, Any]) -> Dict[str, Any]:
    response = (
        get_supabase().table(TABLE_NAME).upsert(record, on_conflict="id").execute()
    )
    data = response.data or []
    if not data:
        raise RuntimeError("Failed to store profile")
    return data[0]


def is_admin(user_id: str) -> bool:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("is_admin")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return bool(items and items[0].get("is_admin"))
