from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "orders"


def fetch_by_idempotency_key(user_id: str, key: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .eq("idempotency_key", key)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_user_orders(user_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def insert_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store order")
    return response.data[0]
