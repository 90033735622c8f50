from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from errors import ErrorKind
from services.checkout.capture import PaymentMethod
from services.checkout.card import CardCapture


@pytest.fixture
def stripe_calls(monkeypatch):
    calls = {"create": [], "confirm": [], "confirm_status": "succeeded"}

    def fake_create(**params):
        calls["create"].append(params)
        return SimpleNamespace(id="pi_123", status="requires_confirmation")

    def fake_confirm(intent_id, **params):
        calls["confirm"].append((intent_id, params))
        return SimpleNamespace(id=intent_id, status=calls["confirm_status"])

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    monkeypatch.setattr(stripe.PaymentIntent, "confirm", fake_confirm)
    return calls


def card(token="pm_card_visa", api_key="sk_test_123"):
    return CardCapture(token, api_key=api_key, currency="USD")


async def test_successful_charge(stripe_calls):
    result = await card().capture(Decimal("22.60"), "key-1")

    assert result.confirmed
    assert result.reference == "pi_123"
    assert result.method == PaymentMethod.CARD
    create = stripe_calls["create"][0]
    assert create["amount"] == 2260
    assert create["currency"] == "usd"
    assert create["payment_method"] == "pm_card_visa"
    assert create["idempotency_key"] == "key-1-create"
    intent_id, confirm = stripe_calls["confirm"][0]
    assert intent_id == "pi_123"
    assert confirm["idempotency_key"] == "key-1-confirm"


async def test_unconfirmed_intent_is_not_success(stripe_calls):
    stripe_calls["confirm_status"] = "requires_action"

    result = await card().capture(Decimal("5.00"), "key-2")

    assert not result.confirmed
    assert result.failure_reason == ErrorKind.PROCESSOR_DECLINED


async def test_processing_intent_is_capture_error(stripe_calls):
    stripe_calls["confirm_status"] = "processing"

    result = await card().capture(Decimal("5.00"), "key-3")

    assert not result.confirmed
    assert result.failure_reason == ErrorKind.CAPTURE_ERROR


async def test_card_declined(monkeypatch, stripe_calls):
    def declined(intent_id, **params):
        raise stripe.CardError("Your card was declined.", None, "card_declined")

    monkeypatch.setattr(stripe.PaymentIntent, "confirm", declined)

    result = await card().capture(Decimal("5.00"), "key-4")

    assert not result.confirmed
    assert result.failure_reason == ErrorKind.PROCESSOR_DECLINED
    assert result.reference == "pi_123"


async def test_network_failure(monkeypatch, stripe_calls):
    def unreachable(**params):
        raise stripe.APIConnectionError("connection reset")

    monkeypatch.setattr(stripe.PaymentIntent, "create", unreachable)

    result = await card().capture(Decimal("5.00"), "key-5")

    assert result.failure_reason == ErrorKind.NETWORK_ERROR
    assert stripe_calls["confirm"] == []


async def test_missing_secret_key_never_calls_stripe(stripe_calls):
    result = await card(api_key="").capture(Decimal("5.00"), "key-6")

    assert result.failure_reason == ErrorKind.CONFIGURATION_ERROR
    assert stripe_calls["create"] == []


async def test_missing_token(stripe_calls):
    result = await card(token=None).capture(Decimal("5.00"), "key-7")

    assert result.failure_reason == ErrorKind.VALIDATION_ERROR
    assert stripe_calls["create"] == []
