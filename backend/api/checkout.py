from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.errors import status_for
from auth import UserContext, get_current_user
from errors import ErrorKind
from schemas import (
    CheckoutRequest,
    CheckoutResponse,
    PricingSummary,
    WalletOrderRequest,
    WalletOrderResponse,
)
from services import checkout_service

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.get("/summary", response_model=PricingSummary)
async def read_summary(user: UserContext = Depends(get_current_user)) -> PricingSummary:
    return await checkout_service.get_summary(user.user_id)


@router.post("/paypal/orders", response_model=WalletOrderResponse)
async def create_paypal_order(
    payload: WalletOrderRequest,
    user: UserContext = Depends(get_current_user),
) -> WalletOrderResponse:
    return await checkout_service.create_wallet_order(user.user_id, payload.idempotency_key)


@router.post(
    "/finalize",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def finalize_checkout(
    payload: CheckoutRequest,
    user: UserContext = Depends(get_current_user),
):
    succeeded, body = await checkout_service.finalize(user, payload)
    if succeeded:
        return body
    return JSONResponse(
        status_code=status_for(ErrorKind(body.failure)),
        content=body.model_dump(mode="json"),
    )
