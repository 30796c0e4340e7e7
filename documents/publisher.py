"""
Renders finalized orders and writes them to the documents folder.
"""
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from models.document import InvoiceDocument
from models.order import SubmissionRecord
from ordering.reference_data import ReferenceData

from .html_export import write_html
from .pdf import write_pdf
from .renderer import DEFAULT_CLOSING_NOTE, DEFAULT_CURRENCY_SYMBOL, render_invoice

logger = logging.getLogger(__name__)


class InvoicePublisher:
    """
    Usage:
        publisher = InvoicePublisher.from_config(config, reference)
        document, pdf_path = publisher.publish(record)
    """

    def __init__(
        self,
        reference: Optional[ReferenceData],
        output_dir: Path,
        currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
        closing_note: str = DEFAULT_CLOSING_NOTE,
        write_html_copy: bool = False,
        template_file: Optional[Path] = None,
    ) -> None:
        self.reference = reference
        self.output_dir = Path(output_dir)
        self.currency_symbol = currency_symbol
        self.closing_note = closing_note
        self.write_html_copy = write_html_copy
        self.template_file = template_file

    @classmethod
    def from_config(
        cls,
        config: Any,
        reference: Optional[ReferenceData],
        write_html_copy: bool = False,
    ) -> "InvoicePublisher":
        return cls(
            reference,
            config.output_dir,
            currency_symbol=config.currency_symbol,
            closing_note=config.closing_note,
            write_html_copy=write_html_copy,
            template_file=config.invoice_template,
        )

    def render(
        self,
        record: Union[SubmissionRecord, Mapping[str, Any]],
        direction: Optional[str] = None,
    ) -> InvoiceDocument:
        return render_invoice(
            record,
            self.reference,
            currency_symbol=self.currency_symbol,
            closing_note=self.closing_note,
            direction=direction,
        )

    def publish(
        self,
        record: Union[SubmissionRecord, Mapping[str, Any]],
        direction: Optional[str] = None,
    ) -> Tuple[InvoiceDocument, Path]:
        """Render *record* and write its PDF (plus HTML when enabled)."""
        document = self.render(record, direction)
        pdf_path = write_pdf(document, self.output_dir)
        if self.write_html_copy:
            write_html(document, self.output_dir, self.template_file)
        return document, pdf_path
