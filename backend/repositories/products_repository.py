from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "products"


def fetch_product(product_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", product_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_products(
    *,
    order_by: str = "created_at",
    desc: bool = True,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    query = get_supabase().table(TABLE_NAME).select("*").order(order_by, desc=desc)
    if limit:
        query = query.limit(limit)
    response = query.execute()
    return response.data or []


def fetch_products_by_category(category: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("category", category)
        .order("name")
        .execute()
    )
    return response.data or []


def search_products(pattern: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .ilike("name", pattern)
        .order("name")
        .execute()
    )
    return response.data or []


def insert_product(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store product")
    return response.data[0]


def update_product(product_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase().table(TABLE_NAME).update(changes).eq("id", product_id).execute()
    )
    items = response.data or []
    return items[0] if items else None


def delete_product(product_id: str) -> bool:
    response = get_supabase().table(TABLE_NAME).delete().eq("id", product_id).execute()
    return bool(response.data)


def compare_and_set_stock(product_id: str, expected: int, new_value: int) -> bool:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .update({"stock": new_value})
        .eq("id", product_id)
        .eq("stock", expected)
        .execute()
    )
    return bool(response.data)
