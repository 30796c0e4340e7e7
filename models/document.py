from pydantic import BaseModel, Field
from typing import List, Optional


class InvoiceRow(BaseModel):
    """One line of the invoice table, with display-ready values."""
    index: int                              # 1-based row number
    product_name: str
    resolved: bool = True                   # False when the product id was unknown
    quantity: str
    unit_cost: str
    amount: str


class TotalLine(BaseModel):
    label: str
    value: str
    bold: bool = False


class InvoiceDocument(BaseModel):
    """
    Logical content of a printable invoice.
    Output backends (PDF, HTML) lay this out; they do not compute anything.
    """
    title: str = "INVOICE"
    document_number: str
    number_label: str                       # e.g. "PO Number" / "Invoice Number"
    date: str
    rows: List[InvoiceRow] = Field(default_factory=list)
    totals: List[TotalLine] = Field(default_factory=list)
    closing_note: str = ""
    notes: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def filename(self) -> str:
        safe = self.document_number.replace("/", "-").replace("\\", "-") or "invoice"
        return f"{safe}.pdf"
