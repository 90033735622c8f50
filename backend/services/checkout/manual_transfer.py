import time
from decimal import Decimal
from typing import Callable

from services.pricing import to_money
from .capture import CaptureResult, PaymentMethod

INSTRUCTIONS_TEMPLATE = """Interac e-Transfer Payment Instructions:

Send: ${amount} {currency}
To: {email}
Reference: {reference}
Security Question: What is your order number?
Answer: {reference}

Your order will be processed within 24 hours of payment receipt.
You will receive a confirmation email once payment is verified."""


def make_reference(clock: Callable[[], float] = time.time) -> str:
    return f"ORD-{int(clock() * 1000)}"


def build_instructions(amount: Decimal, currency: str, email: str, reference: str) -> str:
    return INSTRUCTIONS_TEMPLATE.format(
        amount=f"{to_money(amount):.2f}",
        currency=currency,
        email=email,
        reference=reference,
    )


class ManualTransferCapture:
    """Issues bank transfer instructions; funds are not verified here."""

    method = PaymentMethod.INTERAC

    def __init__(
        self,
        *,
        recipient_email: str,
        currency: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.recipient_email = recipient_email
        self.currency = currency.upper()
        self._clock = clock

    async def capture(self, amount: Decimal, reference: str) -> CaptureResult:
        order_ref = make_reference(self._clock)
        return CaptureResult.success(
            self.method,
            order_ref,
            settled=False,
            instructions=build_instructions(
                amount, self.currency, self.recipient_email, order_ref
            ),
        )
