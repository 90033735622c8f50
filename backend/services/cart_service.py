import asyncio
from typing import Any, Dict, List

from config import settings
from errors import NotFoundError, ValidationError
from repositories import cart_repository, products_repository
from schemas import CartLine, CartResponse, PricingSummary
from services.pricing import PriceBreakdown, compute_pricing, lines_from_cart


def summarize(pricing: PriceBreakdown) -> PricingSummary:
    return PricingSummary(
        subtotal=float(pricing.subtotal),
        shipping=float(pricing.shipping),
        tax=float(pricing.tax),
        total=float(pricing.total),
        item_count=pricing.item_count,
        currency=settings.currency,
    )


def price_cart(rows: List[Dict[str, Any]]) -> PriceBreakdown:
    return compute_pricing(
        lines_from_cart(rows),
        tax_rate=settings.tax_rate,
        flat_shipping=settings.flat_shipping_fee,
    )


def _format_line(row: Dict[str, Any]) -> CartLine:
    return CartLine(
        id=str(row["id"]),
        product_id=str(row["product_id"]),
        quantity=int(row["quantity"]),
        product=row.get("product"),
    )


async def get_cart(user_id: str) -> CartResponse:
    rows = await asyncio.to_thread(cart_repository.fetch_cart, user_id)
    return CartResponse(
        items=[_format_line(row) for row in rows],
        summary=summarize(price_cart(rows)),
    )


def _add_item(user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
    product = products_repository.fetch_product(product_id)
    if not product:
        raise NotFoundError("Product not found")
    stock = int(product.get("stock") or 0)
    if stock <= 0:
        raise ValidationError("Product is out of stock")

    existing = cart_repository.fetch_line_for_product(user_id, product_id)
    new_quantity = quantity + (int(existing["quantity"]) if existing else 0)
    if new_quantity > stock:
        raise ValidationError(f"Only {stock} left in stock")
    if existing:
        cart_repository.update_quantity(user_id, existing["id"], new_quantity)
        return {**existing, "quantity": new_quantity, "product": product}
    row = cart_repository.insert_line(
        {"user_id": user_id, "product_id": product_id, "quantity": quantity}
    )
    return {**row, "product": product}


async def add_item(user_id: str, product_id: str, quantity: int) -> CartLine:
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")
    row = await asyncio.to_thread(_add_item, user_id, product_id, quantity)
    return _format_line(row)


def _set_quantity(user_id: str, line_id: str, quantity: int) -> None:
    line = cart_repository.fetch_line(user_id, line_id)
    if not line:
        raise NotFoundError("Cart item not found")
    if quantity <= 0:
        cart_repository.delete_line(user_id, line_id)
        return
    stock = int((line.get("product") or {}).get("stock") or 0)
    if quantity > stock:
        raise ValidationError(f"Only {stock} left in stock")
    cart_repository.update_quantity(user_id, line_id, quantity)


async def set_quantity(user_id: str, line_id: str, quantity: int) -> CartResponse:
    await asyncio.to_thread(_set_quantity, user_id, line_id, quantity)
    return await get_cart(user_id)


async def remove_item(user_id: str, line_id: str) -> bool:
    return await asyncio.to_thread(cart_repository.delete_line, user_id, line_id)


async def count_items(user_id: str) -> int:
    quantities = await asyncio.to_thread(cart_repository.fetch_quantities, user_id)
    return sum(quantities)
