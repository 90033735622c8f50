from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol

from errors import ErrorKind


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    INTERAC = "interac"


@dataclass(frozen=True)
class CaptureResult:
    confirmed: bool
    reference: str
    method: PaymentMethod
    failure_reason: Optional[ErrorKind] = None
    message: Optional[str] = None
    # False when the processor has not moved funds yet (manual transfer).
    settled: bool = True
    instructions: Optional[str] = None

    @classmethod
    def success(cls, method: PaymentMethod, reference: str, **extra) -> "CaptureResult":
        return cls(confirmed=True, reference=reference, method=method, **extra)

    @classmethod
    def failure(
        cls,
        method: PaymentMethod,
        reason: ErrorKind,
        message: str,
        reference: str = "",
    ) -> "CaptureResult":
        return cls(
            confirmed=False,
            reference=reference,
            method=method,
            failure_reason=reason,
            message=message,
        )


class PaymentCapture(Protocol):
    method: PaymentMethod

    async def capture(self, amount: Decimal, reference: str) -> CaptureResult:
        ...
