from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PricedLine:
    unit_price: Decimal
    quantity: int
    free_shipping: bool = False


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    item_count: int


def to_money(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value if value not in (None, "") else 0))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def compute_pricing(
    lines: Iterable[PricedLine],
    *,
    tax_rate: Decimal,
    flat_shipping: Decimal,
) -> PriceBreakdown:
    billable: List[PricedLine] = []
    for line in lines:
        if line.quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        if line.unit_price < 0:
            raise ValidationError("Price cannot be negative")
        if line.quantity > 0:
            billable.append(line)

    subtotal = to_money(sum((line.unit_price * line.quantity for line in billable), ZERO))
    if all(line.free_shipping for line in billable):
        shipping = ZERO
    else:
        shipping = to_money(flat_shipping)
    tax = to_money(Decimal(str(tax_rate)) * (subtotal + shipping))
    return PriceBreakdown(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
        item_count=sum(line.quantity for line in billable),
    )


def lines_from_cart(rows: Iterable[Dict[str, Any]]) -> List[PricedLine]:
    lines: List[PricedLine] = []
    for row in rows:
        product = row.get("product") or {}
        lines.append(
            PricedLine(
                unit_price=to_money(product.get("price")),
                quantity=int(row.get("quantity") or 0),
                free_shipping=bool(product.get("is_free_shipping")),
            )
        )
    return lines
