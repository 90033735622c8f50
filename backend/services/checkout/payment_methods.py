from typing import Optional

from config import Settings
from .capture import PaymentCapture, PaymentMethod
from .card import CardCapture
from .manual_transfer import ManualTransferCapture
from .wallet import PayPalClient, WalletCapture


def build_paypal_client(settings: Settings) -> PayPalClient:
    return PayPalClient(
        settings.paypal_api_base,
        settings.paypal_client_id,
        settings.paypal_client_secret,
    )


def build_capture(
    method: PaymentMethod,
    settings: Settings,
    *,
    card_token: Optional[str] = None,
    wallet_order_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> PaymentCapture:
    if method == PaymentMethod.CARD:
        return CardCapture(
            card_token,
            api_key=settings.stripe_secret_key,
            currency=settings.currency,
        )
    if method == PaymentMethod.PAYPAL:
        return WalletCapture(
            wallet_order_id,
            client=build_paypal_client(settings),
            currency=settings.currency,
            user_id=user_id,
        )
    if method == PaymentMethod.INTERAC:
        return ManualTransferCapture(
            recipient_email=settings.manual_transfer_email,
            currency=settings.currency,
        )
    raise ValueError(f"Unsupported payment method: {method}")
