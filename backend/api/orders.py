from fastapi import APIRouter, Depends

from auth import UserContext, get_current_user
from schemas import OrderListResponse
from services.orders_service import list_orders

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def read_orders(
    user: UserContext = Depends(get_current_user),
) -> OrderListResponse:
    orders = await list_orders(user.user_id)
    return OrderListResponse(items=orders)
