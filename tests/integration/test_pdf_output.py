"""
Integration tests for invoice files written to disk (PDF read back with pdfplumber).
"""
import pdfplumber
import pytest

from documents.pdf import build_pdf, write_pdf
from documents.publisher import InvoicePublisher
from documents.renderer import render_invoice


def _pdf_text(path):
    with pdfplumber.open(path) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


@pytest.mark.integration
class TestPdfOutput:

    def test_write_pdf(self, sample_record, reference, temp_dir):
        document = render_invoice(sample_record, reference, currency_symbol="Tk")
        path = write_pdf(document, temp_dir / "documents")

        assert path == temp_dir / "documents" / "PO-251019-1432.pdf"
        assert path.read_bytes().startswith(b"%PDF")

        text = _pdf_text(path)
        assert "INVOICE" in text
        assert "PO Number: PO-251019-1432" in text
        assert "Milk Vita Butter 100gm" in text
        assert "Grand Total:" in text
        assert "Tk 1218.00" in text
        assert "Thank you for your business!" in text

    def test_default_currency_symbol_does_not_break_output(self, sample_record, reference):
        data = build_pdf(render_invoice(sample_record, reference))
        assert data.startswith(b"%PDF")

    def test_long_orders_flow_onto_more_pages(self, sample_header, reference, temp_dir):
        from models.order import LineItem
        from ordering.assembler import assemble_submission

        items = [LineItem(product_id=1 + i % 4, unit_cost=10, quantity=1) for i in range(80)]
        record = assemble_submission(sample_header, items, "purchase")
        path = write_pdf(render_invoice(record, reference), temp_dir)

        with pdfplumber.open(path) as pdf:
            assert len(pdf.pages) > 1


@pytest.mark.integration
class TestInvoicePublisher:

    def test_publish_writes_pdf_and_html(self, test_config, sample_record, reference):
        test_config.currency_symbol = "Tk"
        publisher = InvoicePublisher.from_config(test_config, reference, write_html_copy=True)

        document, pdf_path = publisher.publish(sample_record)

        assert pdf_path.exists()
        html_path = test_config.output_dir / "PO-251019-1432.html"
        assert html_path.exists()
        assert "Tk 1218.00" in html_path.read_text(encoding="utf-8")
        assert document.totals[-1].value == "Tk 1218.00"

    def test_publish_stored_payload(self, test_config, sample_record, reference):
        publisher = InvoicePublisher.from_config(test_config, reference)
        payload = sample_record.to_payload()

        document, pdf_path = publisher.publish(payload, "purchase")

        assert pdf_path.name == "PO-251019-1432.pdf"
        assert document.rows[1].product_name == "Farm Fresh Milk Powder 1L"
        assert not (test_config.output_dir / "PO-251019-1432.html").exists()
