from pathlib import Path
from pydantic import BaseModel
from typing import Any, Literal, Optional

from .document import InvoiceDocument
from .order import SubmissionRecord


FieldErrorType = Literal[
    # Header
    "missing_document_number",
    "missing_order_date",
    "missing_party",
    "invalid_status",
    "invalid_shipping_fee",
    "invalid_discount",
    "invalid_tax_rate",
    # Lines
    "missing_line_items",
    "missing_product",
    "invalid_unit_cost",
    "invalid_quantity",
    # Totals
    "subtotal_not_positive",
]


class FieldError(BaseModel):
    """A single reason an order cannot be submitted."""
    type: FieldErrorType
    field: str                              # Which field is affected
    description: str                        # Human-readable explanation
    line_index: Optional[int] = None        # 0-based row for line-level errors


class SubmitOutcome(BaseModel):
    """
    What a completed submission produced.

    stale is True when the form was reset while the submission was in flight;
    in that case no document was rendered and the form was left as it is.
    render_error is set when the order was saved but its invoice could not be
    written.
    """
    record: SubmissionRecord
    response: Any = None
    document: Optional[InvoiceDocument] = None
    document_path: Optional[Path] = None
    stale: bool = False
    render_error: Optional[str] = None
