from .reference import Product, Party
from .order import (
    Direction, LineItem, OrderHeader, OrderTotals, SubmissionLine, SubmissionRecord,
    ORDER_STATUSES, SALE_STATUSES, PURCHASE_STATUSES,
)
from .document import InvoiceDocument, InvoiceRow, TotalLine
from .result import FieldError, SubmitOutcome

__all__ = [
    "Product", "Party",
    "Direction", "LineItem", "OrderHeader", "OrderTotals", "SubmissionLine", "SubmissionRecord",
    "ORDER_STATUSES", "SALE_STATUSES", "PURCHASE_STATUSES",
    "InvoiceDocument", "InvoiceRow", "TotalLine",
    "FieldError", "SubmitOutcome",
]
