"""
Order pricing rules.

Every function here is pure: it takes explicit snapshots of the line items and
the order header and returns plain numbers. Nothing is cached; callers simply
recompute on every read.

Rules:
  line total       quantity * unit cost
  subtotal         sum of line totals
  shipping         floored at 0
  discount         clamped to [0, subtotal + shipping]  (applied before tax)
  tax              (subtotal + shipping - discount) * rate% , never negative
  grand total      subtotal + shipping - discount + tax

Partially filled forms must never raise: any missing, unparseable or
non-finite number is read as 0.
"""
import math
from typing import Any, Iterable

from models.order import LineItem, OrderHeader, OrderTotals


def to_number(value: Any) -> float:
    """Coerce a form value to a finite float, falling back to 0."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def line_total(item: LineItem) -> float:
    return to_number(item.quantity) * to_number(item.unit_cost)


def subtotal(items: Iterable[LineItem]) -> float:
    return sum((line_total(item) for item in items), 0.0)


def shipping_fee(header: OrderHeader) -> float:
    return max(to_number(header.shipping_fee), 0.0)


def tax_rate_percent(header: OrderHeader) -> float:
    return to_number(header.tax_rate_percent)


def clamped_discount(header: OrderHeader, sub: float) -> float:
    """The discount actually applied: never negative, never above the payable base."""
    requested = max(to_number(header.discount), 0.0)
    return min(requested, sub + shipping_fee(header))


def tax_amount(header: OrderHeader, sub: float) -> float:
    base = max(sub + shipping_fee(header) - clamped_discount(header, sub), 0.0)
    return base * tax_rate_percent(header) / 100


def grand_total(header: OrderHeader, sub: float) -> float:
    return (
        sub
        + shipping_fee(header)
        - clamped_discount(header, sub)
        + tax_amount(header, sub)
    )


def compute_totals(items: Iterable[LineItem], header: OrderHeader) -> OrderTotals:
    """Return a consistent totals snapshot for the given items and header."""
    sub = subtotal(items)
    return OrderTotals(
        subtotal=sub,
        shipping_fee=shipping_fee(header),
        clamped_discount=clamped_discount(header, sub),
        tax_amount=tax_amount(header, sub),
        grand_total=grand_total(header, sub),
    )
