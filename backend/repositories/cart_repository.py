from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "cart_items"
WITH_PRODUCT = "*, product:products(*)"


def fetch_cart(user_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select(WITH_PRODUCT)
        .eq("user_id", user_id)
        .execute()
    )
    return response.data or []


def fetch_line(user_id: str, line_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select(WITH_PRODUCT)
        .eq("id", line_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_line_for_product(user_id: str, product_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .eq("product_id", product_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_quantities(user_id: str) -> List[int]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("quantity")
        .eq("user_id", user_id)
        .execute()
    )
    return [int(row.get("quantity") or 0) for row in response.data or []]


def insert_line(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store cart line")
    return response.data[0]


def update_quantity(user_id: str, line_id: str, quantity: int) -> bool:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .update({"quantity": quantity})
        .eq("id", line_id)
        .eq("user_id", user_id)
        .execute()
    )
    return bool(response.data)


def delete_line(user_id: str, line_id: str) -> bool:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .delete()
        .eq("id", line_id)
        .eq("user_id", user_id)
        .execute()
    )
    return bool(response.data)


def clear_cart(user_id: str) -> int:
    response = get_supabase().table(TABLE_NAME).delete().eq("user_id", user_id).execute()
    return len(response.data or [])
