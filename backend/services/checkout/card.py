import asyncio
import logging
from decimal import Decimal
from typing import Any, Optional

import stripe

from errors import ErrorKind
from services.pricing import to_minor_units
from .capture import CaptureResult, PaymentMethod

logger = logging.getLogger("storefront")

DECLINED_STATUSES = {"requires_payment_method", "requires_action", "canceled"}


class CardCapture:
    method = PaymentMethod.CARD

    def __init__(
        self,
        payment_method_token: Optional[str],
        *,
        api_key: str,
        currency: str,
    ) -> None:
        self.payment_method_token = payment_method_token
        self.api_key = api_key
        self.currency = currency.lower()

    def _create_intent(self, amount: Decimal, reference: str) -> Any:
        return stripe.PaymentIntent.create(
            api_key=self.api_key,
            idempotency_key=f"{reference}-create",
            amount=to_minor_units(amount),
            currency=self.currency,
            payment_method=self.payment_method_token,
            payment_method_types=["card"],
            metadata={"idempotency_key": reference},
        )

    def _confirm_intent(self, intent_id: str, reference: str) -> Any:
        return stripe.PaymentIntent.confirm(
            intent_id,
            api_key=self.api_key,
            idempotency_key=f"{reference}-confirm",
            payment_method=self.payment_method_token,
        )

    async def capture(self, amount: Decimal, reference: str) -> CaptureResult:
        if not self.api_key:
            return CaptureResult.failure(
                self.method,
                ErrorKind.CONFIGURATION_ERROR,
                "Stripe secret key not configured",
            )
        if not self.payment_method_token:
            return CaptureResult.failure(
                self.method,
                ErrorKind.VALIDATION_ERROR,
                "Card payment method token is required",
            )

        intent_id = ""
        try:
            intent = await asyncio.to_thread(self._create_intent, amount, reference)
            intent_id = intent.id
            intent = await asyncio.to_thread(self._confirm_intent, intent_id, reference)
        except stripe.CardError as exc:
            return CaptureResult.failure(
                self.method,
                ErrorKind.PROCESSOR_DECLINED,
                exc.user_message or "Card was declined",
                intent_id,
            )
        except stripe.AuthenticationError as exc:
            logger.error("Stripe rejected the configured secret key: %s", exc)
            return CaptureResult.failure(
                self.method,
                ErrorKind.CONFIGURATION_ERROR,
                "Card processor credentials are invalid",
                intent_id,
            )
        except stripe.APIConnectionError as exc:
            logger.warning("Stripe unreachable: %s", exc)
            return CaptureResult.failure(
                self.method,
                ErrorKind.NETWORK_ERROR,
                "Card processor is unreachable",
                intent_id,
            )
        except stripe.StripeError as exc:
            logger.warning("Stripe error during capture: %s", exc)
            return CaptureResult.failure(
                self.method,
                ErrorKind.CAPTURE_ERROR,
                exc.user_message or "Payment processing failed",
                intent_id,
            )

        status = getattr(intent, "status", None)
        if status == "succeeded":
            return CaptureResult.success(self.method, intent.id)
        if status in DECLINED_STATUSES:
            return CaptureResult.failure(
                self.method,
                ErrorKind.PROCESSOR_DECLINED,
                f"Payment was not completed (status {status})",
                intent.id,
            )
        return CaptureResult.failure(
            self.method,
            ErrorKind.CAPTURE_ERROR,
            f"Payment is not confirmed (status {status})",
            intent.id,
        )
