import logging
from typing import Any, Dict, List, Tuple

from errors import InsufficientStockError, OrderWriteError, PartialWriteError, StorefrontError
from repositories import cart_repository, orders_repository, products_repository
from services.pricing import PriceBreakdown, to_money
from .capture import CaptureResult

logger = logging.getLogger("storefront")

STOCK_UPDATE_ATTEMPTS = 3
STATUS_COMPLETED = "completed"
STATUS_AWAITING_PAYMENT = "awaiting_payment"


def _decrement_stock(product_id: str, quantity: int) -> int:
    for _ in range(STOCK_UPDATE_ATTEMPTS):
        product = products_repository.fetch_product(product_id)
        current = int((product or {}).get("stock") or 0)
        if product is None or current < quantity:
            raise InsufficientStockError(product_id, quantity, current)
        if products_repository.compare_and_set_stock(product_id, current, current - quantity):
            return current - quantity
    raise OrderWriteError(f"Stock for product {product_id} kept changing")


def _restore_stock(product_id: str, quantity: int) -> None:
    for _ in range(STOCK_UPDATE_ATTEMPTS):
        product = products_repository.fetch_product(product_id)
        if product is None:
            break
        current = int(product.get("stock") or 0)
        if products_repository.compare_and_set_stock(product_id, current, current + quantity):
            return
    logger.error("Could not restore %s units of stock for product %s", quantity, product_id)


def _release(reserved: List[Tuple[str, int]]) -> None:
    for product_id, quantity in reversed(reserved):
        try:
            _restore_stock(product_id, quantity)
        except Exception:
            logger.exception("Stock restore failed for product %s", product_id)


def _requested_quantities(lines: List[Dict[str, Any]]) -> Dict[str, int]:
    quantities: Dict[str, int] = {}
    for line in lines:
        product_id = str(line["product_id"])
        quantities[product_id] = quantities.get(product_id, 0) + int(line["quantity"])
    return quantities


def build_order_record(
    *,
    user_id: str,
    email: str | None,
    lines: List[Dict[str, Any]],
    pricing: PriceBreakdown,
    capture: CaptureResult,
    shipping_address: Dict[str, Any],
    idempotency_key: str,
    currency: str,
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "email": email,
        "subtotal": float(pricing.subtotal),
        "shipping_cost": float(pricing.shipping),
        "tax_amount": float(pricing.tax),
        "total_amount": float(pricing.total),
        "currency": currency,
        "status": STATUS_COMPLETED if capture.settled else STATUS_AWAITING_PAYMENT,
        "payment_method": capture.method.value,
        "payment_reference": capture.reference,
        "idempotency_key": idempotency_key,
        "shipping_address": shipping_address,
        "items": [
            {
                "product_id": line["product_id"],
                "quantity": int(line["quantity"]),
                "price": float(to_money((line.get("product") or {}).get("price"))),
            }
            for line in lines
        ],
    }


def write_order(
    *,
    user_id: str,
    email: str | None,
    lines: List[Dict[str, Any]],
    pricing: PriceBreakdown,
    capture: CaptureResult,
    shipping_address: Dict[str, Any],
    idempotency_key: str,
    currency: str,
) -> Dict[str, Any]:
    if not capture.confirmed:
        raise OrderWriteError("Refusing to write an order for an unconfirmed payment")

    existing = orders_repository.fetch_by_idempotency_key(user_id, idempotency_key)
    if existing:
        logger.info("Order %s already written for key %s", existing.get("id"), idempotency_key)
        return existing

    reserved: List[Tuple[str, int]] = []
    try:
        for product_id, quantity in _requested_quantities(lines).items():
            _decrement_stock(product_id, quantity)
            reserved.append((product_id, quantity))
    except StorefrontError:
        _release(reserved)
        raise
    except Exception as exc:
        _release(reserved)
        raise PartialWriteError("Stock could not be updated") from exc

    record = build_order_record(
        user_id=user_id,
        email=email,
        lines=lines,
        pricing=pricing,
        capture=capture,
        shipping_address=shipping_address,
        idempotency_key=idempotency_key,
        currency=currency,
    )
    try:
        order = orders_repository.insert_order(record)
    except Exception as exc:
        _release(reserved)
        raise PartialWriteError("Order could not be recorded") from exc

    try:
        cart_repository.clear_cart(user_id)
    except Exception as exc:
        raise PartialWriteError(
            "Cart could not be cleared", order_id=str(order.get("id"))
        ) from exc
    return order
