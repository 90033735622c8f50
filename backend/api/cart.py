from fastapi import APIRouter, Depends, HTTPException, Response, status

from auth import UserContext, get_current_user
from schemas import CartCountResponse, CartItemCreate, CartItemUpdate, CartLine, CartResponse
from services import cart_service

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def read_cart(user: UserContext = Depends(get_current_user)) -> CartResponse:
    return await cart_service.get_cart(user.user_id)


@router.get("/count", response_model=CartCountResponse)
async def read_cart_count(
    user: UserContext = Depends(get_current_user),
) -> CartCountResponse:
    return CartCountResponse(count=await cart_service.count_items(user.user_id))


@router.post("/items", response_model=CartLine, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    payload: CartItemCreate,
    user: UserContext = Depends(get_current_user),
) -> CartLine:
    return await cart_service.add_item(user.user_id, payload.product_id, payload.quantity)


@router.patch("/items/{line_id}", response_model=CartResponse)
async def update_cart_item(
    line_id: str,
    payload: CartItemUpdate,
    user: UserContext = Depends(get_current_user),
) -> CartResponse:
    return await cart_service.set_quantity(user.user_id, line_id, payload.quantity)


@router.delete("/items/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cart_item(
    line_id: str,
    user: UserContext = Depends(get_current_user),
) -> Response:
    removed = await cart_service.remove_item(user.user_id, line_id)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
