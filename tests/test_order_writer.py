from decimal import Decimal

import pytest

from errors import InsufficientStockError, OrderWriteError, PartialWriteError
from repositories import cart_repository
from services.checkout.capture import CaptureResult, PaymentMethod
from services.checkout.order_writer import write_order
from services.pricing import compute_pricing, lines_from_cart

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address": "1 Main St",
    "city": "Toronto",
    "postal_code": "M5V 1A1",
    "country": "Canada",
}


def write(lines, capture=None, key="key-1"):
    pricing = compute_pricing(
        lines_from_cart(lines), tax_rate=Decimal("0.13"), flat_shipping=Decimal("5.00")
    )
    return write_order(
        user_id="user-1",
        email="ada@example.com",
        lines=lines,
        pricing=pricing,
        capture=capture or CaptureResult.success(PaymentMethod.CARD, "pi_1"),
        shipping_address=ADDRESS,
        idempotency_key=key,
        currency="USD",
    )


def test_writes_order_clears_cart_and_decrements_stock(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")

    order = write(lines)

    assert order["status"] == "completed"
    assert order["payment_reference"] == "pi_1"
    assert order["payment_method"] == "card"
    assert order["total_amount"] == pytest.approx(39.54)
    assert order["items"] == [
        {"product_id": "p-1", "quantity": 2, "price": 10.0},
        {"product_id": "p-2", "quantity": 1, "price": 9.99},
    ]
    assert stocked_cart.find("products", "p-1")["stock"] == 3
    assert stocked_cart.find("products", "p-2")["stock"] == 0
    remaining = [row["user_id"] for row in stocked_cart.rows("cart_items")]
    assert remaining == ["user-2"]


def test_insufficient_stock_never_goes_negative(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    stocked_cart.find("products", "p-2")["stock"] = 0

    with pytest.raises(InsufficientStockError):
        write(lines)

    assert stocked_cart.find("products", "p-1")["stock"] == 5
    assert stocked_cart.find("products", "p-2")["stock"] == 0
    assert stocked_cart.rows("orders") == []
    assert len(stocked_cart.rows("cart_items")) == 3


def test_manual_transfer_order_awaits_payment(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    capture = CaptureResult.success(PaymentMethod.INTERAC, "ORD-1", settled=False)

    order = write(lines, capture)

    assert order["status"] == "awaiting_payment"
    assert order["payment_method"] == "interac"


def test_replayed_key_returns_existing_order(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    first = write(lines)

    second = write(lines)

    assert second["id"] == first["id"]
    assert len(stocked_cart.rows("orders")) == 1
    assert stocked_cart.find("products", "p-1")["stock"] == 3


def test_unconfirmed_capture_is_refused(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    capture = CaptureResult(confirmed=False, reference="", method=PaymentMethod.CARD)

    with pytest.raises(OrderWriteError):
        write(lines, capture)

    assert stocked_cart.rows("orders") == []
    assert stocked_cart.find("products", "p-1")["stock"] == 5


def test_failed_order_insert_restores_stock(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    stocked_cart.failures[("orders", "insert")] = RuntimeError("insert failed")

    with pytest.raises(PartialWriteError):
        write(lines)

    assert stocked_cart.find("products", "p-1")["stock"] == 5
    assert stocked_cart.find("products", "p-2")["stock"] == 1
    assert len(stocked_cart.rows("cart_items")) == 3


def test_failed_cart_clear_keeps_order(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    stocked_cart.failures[("cart_items", "delete")] = RuntimeError("delete failed")

    with pytest.raises(PartialWriteError) as excinfo:
        write(lines)

    orders = stocked_cart.rows("orders")
    assert len(orders) == 1
    assert excinfo.value.order_id == orders[0]["id"]
    assert stocked_cart.find("products", "p-1")["stock"] == 3


def test_concurrent_stock_change_is_reread(stocked_cart):
    lines = cart_repository.fetch_cart("user-1")
    raced = []

    def concurrent_checkout(query):
        if query.table == "products" and query.operation == "update" and not raced:
            raced.append(True)
            stocked_cart.find("products", "p-1")["stock"] = 4

    stocked_cart.hooks.append(concurrent_checkout)

    write(lines)

    assert stocked_cart.find("products", "p-1")["stock"] == 2
