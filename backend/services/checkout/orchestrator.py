import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from auth import UserContext
from config import Settings
from errors import ErrorKind, StorefrontError
from repositories import cart_repository
from services.pricing import PriceBreakdown, compute_pricing, lines_from_cart
from .capture import CaptureResult, PaymentCapture, PaymentMethod
from .order_writer import write_order
from .payment_methods import build_capture

logger = logging.getLogger("storefront")

REQUIRED_ADDRESS_FIELDS = ("first_name", "last_name", "address", "city", "postal_code")


class FinalizationState(str, Enum):
    IDLE = "idle"
    PRICING_COMPUTED = "pricing_computed"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_CONFIRMED = "payment_confirmed"
    ORDER_WRITTEN = "order_written"
    FAILED = "failed"


TRANSITIONS = {
    FinalizationState.IDLE: {FinalizationState.PRICING_COMPUTED},
    FinalizationState.PRICING_COMPUTED: {FinalizationState.PAYMENT_PENDING},
    FinalizationState.PAYMENT_PENDING: {FinalizationState.PAYMENT_CONFIRMED},
    FinalizationState.PAYMENT_CONFIRMED: {FinalizationState.ORDER_WRITTEN},
    FinalizationState.ORDER_WRITTEN: set(),
    FinalizationState.FAILED: set(),
}


@dataclass
class FinalizationRequest:
    payment_method: PaymentMethod
    shipping_address: Dict[str, Any]
    idempotency_key: Optional[str] = None
    email: Optional[str] = None
    card_token: Optional[str] = None
    wallet_order_id: Optional[str] = None


@dataclass
class FinalizationOutcome:
    state: FinalizationState = FinalizationState.IDLE
    history: List[FinalizationState] = field(
        default_factory=lambda: [FinalizationState.IDLE]
    )
    idempotency_key: str = ""
    pricing: Optional[PriceBreakdown] = None
    capture: Optional[CaptureResult] = None
    order: Optional[Dict[str, Any]] = None
    failure: Optional[ErrorKind] = None
    cause: Optional[ErrorKind] = None
    message: Optional[str] = None
    support_reference: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == FinalizationState.ORDER_WRITTEN

    def advance(self, state: FinalizationState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal checkout transition {self.state} -> {state}")
        self.state = state
        self.history.append(state)

    def fail(
        self,
        kind: ErrorKind,
        message: str,
        *,
        cause: Optional[ErrorKind] = None,
    ) -> "FinalizationOutcome":
        self.state = FinalizationState.FAILED
        self.history.append(FinalizationState.FAILED)
        self.failure = kind
        self.cause = cause
        self.message = message
        return self


def _missing_address_fields(address: Dict[str, Any]) -> List[str]:
    return [name for name in REQUIRED_ADDRESS_FIELDS if not str(address.get(name) or "").strip()]


def _short_stock(lines: List[Dict[str, Any]]) -> Optional[str]:
    for line in lines:
        product = line.get("product")
        if not product:
            return str(line.get("product_id"))
        if int(product.get("stock") or 0) < int(line.get("quantity") or 0):
            return product.get("name") or str(product.get("id"))
    return None


class FinalizationOrchestrator:
    def __init__(
        self,
        settings: Settings,
        *,
        capture_factory: Callable[..., PaymentCapture] = build_capture,
        writer: Callable[..., Dict[str, Any]] = write_order,
    ) -> None:
        self.settings = settings
        self.capture_factory = capture_factory
        self.writer = writer

    def price(self, lines: List[Dict[str, Any]]) -> PriceBreakdown:
        return compute_pricing(
            lines_from_cart(lines),
            tax_rate=self.settings.tax_rate,
            flat_shipping=self.settings.flat_shipping_fee,
        )

    async def finalize(
        self, user: Optional[UserContext], request: FinalizationRequest
    ) -> FinalizationOutcome:
        outcome = FinalizationOutcome(
            idempotency_key=request.idempotency_key or str(uuid.uuid4())
        )
        if user is None or not user.user_id:
            return outcome.fail(ErrorKind.AUTH_REQUIRED, "Sign in to complete checkout")

        try:
            lines = await asyncio.to_thread(cart_repository.fetch_cart, user.user_id)
        except Exception as exc:
            logger.warning("Cart lookup failed for %s: %s", user.user_id, exc)
            return outcome.fail(ErrorKind.NETWORK_ERROR, "Could not load your cart")

        if not lines:
            return outcome.fail(ErrorKind.INCOMPLETE_INPUT, "Your cart is empty")
        missing = _missing_address_fields(request.shipping_address)
        if missing:
            return outcome.fail(
                ErrorKind.INCOMPLETE_INPUT,
                "Please fill in all shipping information: " + ", ".join(missing),
            )
        short = _short_stock(lines)
        if short:
            return outcome.fail(
                ErrorKind.INSUFFICIENT_STOCK, f"Not enough stock for {short}"
            )
        try:
            outcome.pricing = self.price(lines)
        except StorefrontError as exc:
            return outcome.fail(ErrorKind.INCOMPLETE_INPUT, exc.message)
        outcome.advance(FinalizationState.PRICING_COMPUTED)

        adapter = self.capture_factory(
            request.payment_method,
            self.settings,
            card_token=request.card_token,
            wallet_order_id=request.wallet_order_id,
            user_id=user.user_id,
        )
        outcome.advance(FinalizationState.PAYMENT_PENDING)
        logger.info(
            "Capturing %s %s via %s for user %s (key %s)",
            outcome.pricing.total,
            self.settings.currency,
            request.payment_method.value,
            user.user_id,
            outcome.idempotency_key,
        )
        capture = await adapter.capture(outcome.pricing.total, outcome.idempotency_key)
        outcome.capture = capture
        if not capture.confirmed:
            logger.warning(
                "Payment not confirmed for user %s: %s (%s)",
                user.user_id,
                capture.failure_reason,
                capture.message,
            )
            kind = (
                ErrorKind.PAYMENT_CANCELLED
                if capture.failure_reason == ErrorKind.USER_CANCELLED
                else ErrorKind.PAYMENT_DECLINED
            )
            return outcome.fail(
                kind,
                capture.message or "Payment was not completed",
                cause=capture.failure_reason,
            )
        outcome.advance(FinalizationState.PAYMENT_CONFIRMED)

        try:
            outcome.order = await asyncio.to_thread(
                self.writer,
                user_id=user.user_id,
                email=request.email or user.email,
                lines=lines,
                pricing=outcome.pricing,
                capture=capture,
                shipping_address=request.shipping_address,
                idempotency_key=outcome.idempotency_key,
                currency=self.settings.currency,
            )
        except Exception as exc:
            logger.exception(
                "Order write failed after payment %s for user %s",
                capture.reference,
                user.user_id,
            )
            outcome.support_reference = capture.reference
            cause = exc.kind if isinstance(exc, StorefrontError) else None
            return outcome.fail(
                ErrorKind.PARTIAL_WRITE_ERROR,
                "Your payment was received but the order could not be completed. "
                f"Contact support with reference {capture.reference}.",
                cause=cause,
            )
        outcome.advance(FinalizationState.ORDER_WRITTEN)
        logger.info("Order %s written for user %s", outcome.order.get("id"), user.user_id)
        return outcome
