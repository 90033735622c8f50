import asyncio
from typing import List

from repositories import orders_repository
from schemas import Order


async def list_orders(user_id: str) -> List[Order]:
    rows = await asyncio.to_thread(orders_repository.fetch_user_orders, user_id)
    return [Order(**row) for row in rows]
