"""
Invoice document rendering.

render_invoice() turns a finalized order into an InvoiceDocument: the logical
content of the printable invoice (header, item table, totals, closing note).
It never mutates its input and never fails on incomplete data: missing
numbers print as 0.00 and products that cannot be resolved against the
reference data print as "Unknown".
"""
import logging
from typing import Any, Mapping, Optional, Union

from models.document import InvoiceDocument, InvoiceRow, TotalLine
from models.order import SubmissionRecord
from ordering.assembler import read_submission
from ordering.pricing import to_number
from ordering.reference_data import ReferenceData

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown"
DEFAULT_CURRENCY_SYMBOL = "৳"
DEFAULT_CLOSING_NOTE = "Thank you for your business!"

_NUMBER_LABELS = {"sale": "Invoice Number", "purchase": "PO Number"}


def format_money(value: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return f"{symbol} {to_number(value):.2f}"


def format_quantity(value: Any) -> str:
    n = to_number(value)
    return str(int(n)) if n.is_integer() else str(n)


def _detect_direction(payload: Mapping[str, Any]) -> str:
    if "invoiceNumber" in payload or "customerId" in payload:
        return "sale"
    return "purchase"


def render_invoice(
    record: Union[SubmissionRecord, Mapping[str, Any]],
    reference: Optional[ReferenceData] = None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    closing_note: str = DEFAULT_CLOSING_NOTE,
    direction: Optional[str] = None,
) -> InvoiceDocument:
    """
    Build the printable invoice for *record*.

    *record* is either a SubmissionRecord or a stored wire payload (as returned
    by a gateway's get_by_id / list); for payloads the direction is taken from
    *direction* or inferred from the field names.
    """
    if not isinstance(record, SubmissionRecord):
        payload = record if isinstance(record, Mapping) else {}
        record = read_submission(payload, direction or _detect_direction(payload))

    rows: list[InvoiceRow] = []
    warnings: list[str] = []
    for i, line in enumerate(record.lines, start=1):
        product = reference.product(line.product_id) if reference else None
        if product is None:
            msg = f"Line {i}: product {line.product_id!r} not found"
            logger.warning("Invoice %s: %s", record.document_number, msg)
            warnings.append(msg)
        qty = to_number(line.quantity)
        cost = to_number(line.unit_cost)
        rows.append(InvoiceRow(
            index=i,
            product_name=product.name if product else UNKNOWN_PRODUCT,
            resolved=product is not None,
            quantity=format_quantity(qty),
            unit_cost=format_money(cost, currency_symbol),
            amount=format_money(line.amount, currency_symbol),
        ))

    totals = [
        TotalLine(label="Subtotal:", value=format_money(record.subtotal, currency_symbol)),
        TotalLine(label="Shipping:", value=format_money(record.shipping_fee, currency_symbol)),
        TotalLine(label="Discount:", value=format_money(record.discount, currency_symbol)),
        TotalLine(label="Tax:", value=format_money(record.tax_amount, currency_symbol)),
        TotalLine(label="Grand Total:", value=format_money(record.grand_total, currency_symbol), bold=True),
    ]

    return InvoiceDocument(
        document_number=record.document_number,
        number_label=_NUMBER_LABELS.get(record.direction, "Number"),
        date=record.order_date,
        rows=rows,
        totals=totals,
        closing_note=closing_note,
        notes=record.notes or None,
        warnings=warnings,
    )
