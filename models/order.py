from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Literal, Optional, Tuple, Union


Direction = Literal["sale", "purchase"]

SALE_STATUSES = ("Pending", "Paid", "Partially Paid", "Cancelled")
PURCHASE_STATUSES = ("Pending", "Approved", "Received", "Cancelled")
ORDER_STATUSES: Dict[str, Tuple[str, ...]] = {
    "sale": SALE_STATUSES,
    "purchase": PURCHASE_STATUSES,
}

# Wire names that differ between the two directions
_HEADER_FIELDS = {
    "sale": {
        "document_number": "invoiceNumber",
        "expected_date": "dueDate",
        "party_id": "customerId",
    },
    "purchase": {
        "document_number": "poNumber",
        "expected_date": "expectedDate",
        "party_id": "supplierId",
    },
}
_LINE_COST_FIELD = {"sale": "price", "purchase": "cost"}


def payload_field(direction: str, canonical: str) -> str:
    """Return the wire name of a header field for *direction*."""
    return _HEADER_FIELDS[direction].get(canonical, canonical)


def line_cost_field(direction: str) -> str:
    return _LINE_COST_FIELD[direction]


class LineItem(BaseModel):
    """
    A single product row on the order form.
    Numeric values are held exactly as entered; they are coerced when read.
    """
    product_id: Optional[Union[int, str]] = None
    unit_cost: Any = 0
    quantity: Any = 1


class OrderHeader(BaseModel):
    """Order-level fields of the form (everything except the line items)."""
    document_number: Optional[str] = None
    order_date: Optional[str] = None        # YYYY-MM-DD
    expected_date: Optional[str] = None     # YYYY-MM-DD (due date for sales)
    party_id: Optional[Union[int, str]] = None
    status: Optional[str] = "Pending"
    shipping_fee: Any = 0
    discount: Any = 0
    tax_rate_percent: Any = 5
    notes: Optional[str] = ""


class OrderTotals(BaseModel):
    """Derived totals. Always recomputed from the line items and header."""
    model_config = ConfigDict(frozen=True)

    subtotal: float = 0.0
    shipping_fee: float = 0.0
    clamped_discount: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0


class SubmissionLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: Optional[Union[int, str]] = None
    quantity: Union[int, float] = 0
    unit_cost: float = 0.0

    @property
    def amount(self) -> float:
        return self.quantity * self.unit_cost


class SubmissionRecord(BaseModel):
    """
    Immutable snapshot of an order taken at submit time.

    Canonical field names are used in Python; to_payload() produces the wire
    shape, which names some fields differently for sales and purchases
    (e.g. line cost is "price" on a sale and "cost" on a purchase).
    """
    model_config = ConfigDict(frozen=True)

    direction: Direction
    document_number: str
    order_date: str
    expected_date: Optional[str] = None
    party_id: Optional[Union[int, str]] = None
    status: str = "Pending"
    notes: str = ""

    shipping_fee: float = 0.0
    discount: float = 0.0                   # Clamped discount actually applied
    tax_rate_percent: float = 0.0
    lines: Tuple[SubmissionLine, ...] = Field(default_factory=tuple)

    subtotal: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0

    def to_payload(self) -> dict:
        """Return the JSON-ready request body for this record's direction."""
        d = self.direction
        cost_key = line_cost_field(d)
        return {
            payload_field(d, "document_number"): self.document_number,
            "date":                              self.order_date,
            payload_field(d, "expected_date"):   self.expected_date,
            payload_field(d, "party_id"):        self.party_id,
            "status":                            self.status,
            "notes":                             self.notes,
            "shipping":                          self.shipping_fee,
            "discount":                          self.discount,
            "taxRate":                           self.tax_rate_percent,
            "items": [
                {"productId": line.product_id, "qty": line.quantity, cost_key: line.unit_cost}
                for line in self.lines
            ],
            "subtotal":                          self.subtotal,
            "taxAmount":                         self.tax_amount,
            "grandTotal":                        self.grand_total,
        }
