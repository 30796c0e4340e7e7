"""
Order assembly: validation and snapshotting of the form into a SubmissionRecord.

assemble_submission() is the only way a record is produced from live form
state. It refuses (OrderValidationError) when a required field is missing or
invalid, or when the subtotal is not positive, so the gateway is never called
for an order that could not be priced.
"""
import logging
import math
from typing import Any, Iterable, Mapping

from models.order import (
    ORDER_STATUSES,
    LineItem,
    OrderHeader,
    SubmissionLine,
    SubmissionRecord,
    line_cost_field,
    payload_field,
)
from models.result import FieldError

from .errors import OrderValidationError
from .pricing import compute_totals, tax_rate_percent, to_number

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_non_negative_number(value: Any) -> bool:
    """True for a present, finite number >= 0 (numeric strings allowed)."""
    if _is_blank(value) or isinstance(value, bool):
        return False
    try:
        n = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(n) and n >= 0


def _optional_str(value: Any):
    return str(value) if value not in (None, "") else None


def _optional_id(value: Any):
    """Keep int and str reference ids, drop anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    return value


def _as_quantity(value: Any):
    """Return the quantity as an int when it is whole, else as a float."""
    n = to_number(value)
    return int(n) if n.is_integer() else n


def validate_order(
    header: OrderHeader,
    items: Iterable[LineItem],
    direction: str,
) -> list[FieldError]:
    """Return every reason the order cannot be submitted (empty when valid)."""
    items = list(items)
    errors: list[FieldError] = []

    if _is_blank(header.document_number):
        errors.append(FieldError(
            type="missing_document_number",
            field="document_number",
            description="Document number is required",
        ))
    if _is_blank(header.order_date):
        errors.append(FieldError(
            type="missing_order_date",
            field="order_date",
            description="Order date is required",
        ))
    if _is_blank(header.party_id):
        party = "Customer" if direction == "sale" else "Supplier"
        errors.append(FieldError(
            type="missing_party",
            field="party_id",
            description=f"{party} is required",
        ))
    allowed = ORDER_STATUSES[direction]
    if header.status not in allowed:
        errors.append(FieldError(
            type="invalid_status",
            field="status",
            description=f"Status must be one of: {', '.join(allowed)}",
        ))

    for name, error_type, label in (
        ("shipping_fee", "invalid_shipping_fee", "Shipping"),
        ("discount", "invalid_discount", "Discount"),
        ("tax_rate_percent", "invalid_tax_rate", "Tax rate"),
    ):
        if not _is_non_negative_number(getattr(header, name)):
            errors.append(FieldError(
                type=error_type,
                field=name,
                description=f"{label} must be a number of at least 0",
            ))

    if not items:
        errors.append(FieldError(
            type="missing_line_items",
            field="items",
            description="At least one line item is required",
        ))

    for idx, item in enumerate(items):
        if _is_blank(item.product_id):
            errors.append(FieldError(
                type="missing_product",
                field="product_id",
                description=f"Line {idx + 1}: product is required",
                line_index=idx,
            ))
        if not _is_non_negative_number(item.unit_cost):
            errors.append(FieldError(
                type="invalid_unit_cost",
                field="unit_cost",
                description=f"Line {idx + 1}: unit cost must be a number of at least 0",
                line_index=idx,
            ))
        qty_ok = _is_non_negative_number(item.quantity)
        if qty_ok:
            qty = float(item.quantity)
            qty_ok = qty >= 1 and qty.is_integer()
        if not qty_ok:
            errors.append(FieldError(
                type="invalid_quantity",
                field="quantity",
                description=f"Line {idx + 1}: quantity must be a whole number of at least 1",
                line_index=idx,
            ))

    totals = compute_totals(items, header)
    if totals.subtotal <= 0:
        errors.append(FieldError(
            type="subtotal_not_positive",
            field="subtotal",
            description="Subtotal must be greater than zero",
        ))

    return errors


def assemble_submission(
    header: OrderHeader,
    items: Iterable[LineItem],
    direction: str,
) -> SubmissionRecord:
    """
    Snapshot the form into an immutable SubmissionRecord.

    Raises OrderValidationError without side effects when the order is not
    submittable.
    """
    items = list(items)
    errors = validate_order(header, items, direction)
    if errors:
        logger.debug("Order %s failed validation: %s",
                     header.document_number, [e.type for e in errors])
        raise OrderValidationError(errors)

    totals = compute_totals(items, header)
    return SubmissionRecord(
        direction=direction,
        document_number=header.document_number.strip(),
        order_date=header.order_date,
        expected_date=header.expected_date or None,
        party_id=header.party_id,
        status=header.status,
        notes=header.notes or "",
        shipping_fee=totals.shipping_fee,
        discount=totals.clamped_discount,
        tax_rate_percent=tax_rate_percent(header),
        lines=tuple(
            SubmissionLine(
                product_id=item.product_id,
                quantity=_as_quantity(item.quantity),
                unit_cost=to_number(item.unit_cost),
            )
            for item in items
        ),
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        grand_total=totals.grand_total,
    )


def read_submission(payload: Mapping[str, Any], direction: str) -> SubmissionRecord:
    """
    Rebuild a SubmissionRecord from a stored or fetched wire payload.

    Lenient: missing numbers read as 0, missing text as empty, an "items" value
    that is not a list reads as no lines, and line items that are not objects
    are skipped.
    """
    payload = payload or {}
    cost_key = line_cost_field(direction)

    items = payload.get("items")
    if not isinstance(items, list):
        items = []

    lines = []
    for raw in items:
        if not isinstance(raw, Mapping):
            continue
        cost = raw.get(cost_key)
        if cost is None:
            cost = raw.get("price", raw.get("cost", raw.get("unitCost")))
        lines.append(SubmissionLine(
            product_id=_optional_id(raw.get("productId")),
            quantity=_as_quantity(raw.get("qty", raw.get("quantity"))),
            unit_cost=to_number(cost),
        ))

    return SubmissionRecord(
        direction=direction,
        document_number=str(payload.get(payload_field(direction, "document_number")) or ""),
        order_date=str(payload.get("date") or ""),
        expected_date=_optional_str(payload.get(payload_field(direction, "expected_date"))),
        party_id=_optional_id(payload.get(payload_field(direction, "party_id"))),
        status=str(payload.get("status") or "Pending"),
        notes=str(payload.get("notes") or ""),
        shipping_fee=to_number(payload.get("shipping")),
        discount=to_number(payload.get("discount")),
        tax_rate_percent=to_number(payload.get("taxRate")),
        lines=tuple(lines),
        subtotal=to_number(payload.get("subtotal")),
        tax_amount=to_number(payload.get("taxAmount")),
        grand_total=to_number(payload.get("grandTotal")),
    )
