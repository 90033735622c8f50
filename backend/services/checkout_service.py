import asyncio
import logging
import uuid

import httpx

from auth import UserContext
from config import settings
from errors import ErrorKind, StorefrontError, ValidationError
from repositories import cart_repository
from schemas import (
    CheckoutRequest,
    CheckoutResponse,
    Order,
    PricingSummary,
    WalletOrderResponse,
)
from services.cart_service import price_cart, summarize
from services.checkout.orchestrator import (
    FinalizationOrchestrator,
    FinalizationOutcome,
    FinalizationRequest,
)
from services.checkout.payment_methods import build_paypal_client
from services.checkout.wallet import checkout_tag

logger = logging.getLogger("storefront")

orchestrator = FinalizationOrchestrator(settings)


async def get_summary(user_id: str) -> PricingSummary:
    rows = await asyncio.to_thread(cart_repository.fetch_cart, user_id)
    return summarize(price_cart(rows))


async def create_wallet_order(user_id: str, idempotency_key: str | None) -> WalletOrderResponse:
    rows = await asyncio.to_thread(cart_repository.fetch_cart, user_id)
    if not rows:
        raise ValidationError("Your cart is empty")
    pricing = price_cart(rows)
    client = build_paypal_client(settings)
    if not client.is_configured:
        raise StorefrontError(
            "PayPal credentials not configured", kind=ErrorKind.CONFIGURATION_ERROR
        )
    request_id = idempotency_key or str(uuid.uuid4())
    try:
        order = await client.create_order(
            pricing.total,
            settings.currency,
            request_id,
            custom_id=checkout_tag(user_id, request_id),
        )
    except httpx.HTTPStatusError as exc:
        logger.warning("PayPal order creation failed with HTTP %s", exc.response.status_code)
        raise StorefrontError(
            "PayPal order could not be created", kind=ErrorKind.CAPTURE_ERROR
        ) from exc
    except httpx.RequestError as exc:
        raise StorefrontError("PayPal is unreachable", kind=ErrorKind.NETWORK_ERROR) from exc
    return WalletOrderResponse(
        order_id=order["id"],
        amount=float(pricing.total),
        currency=settings.currency,
        idempotency_key=request_id,
    )


def _to_response(outcome: FinalizationOutcome) -> CheckoutResponse:
    capture = outcome.capture
    return CheckoutResponse(
        state=outcome.state.value,
        history=[state.value for state in outcome.history],
        idempotency_key=outcome.idempotency_key,
        pricing=summarize(outcome.pricing) if outcome.pricing else None,
        order=Order(**outcome.order) if outcome.order else None,
        payment_reference=capture.reference if capture else None,
        instructions=capture.instructions if capture else None,
        failure=outcome.failure.value if outcome.failure else None,
        cause=outcome.cause.value if outcome.cause else None,
        message=outcome.message,
        support_reference=outcome.support_reference,
    )


async def finalize(user: UserContext, payload: CheckoutRequest) -> tuple[bool, CheckoutResponse]:
    request = FinalizationRequest(
        payment_method=payload.payment_method,
        shipping_address=payload.shipping_address.model_dump(),
        idempotency_key=payload.idempotency_key,
        email=payload.email,
        card_token=payload.card_payment_method_id,
        wallet_order_id=payload.paypal_order_id,
    )
    outcome = await orchestrator.finalize(user, request)
    return outcome.succeeded, _to_response(outcome)
