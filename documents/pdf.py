"""
PDF output for invoice documents (reportlab).

Layout only: every value printed here was already computed and formatted by
documents.renderer.
"""
import logging
from io import BytesIO
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from models.document import InvoiceDocument

logger = logging.getLogger(__name__)

# A4 page dimensions (210 x 297 mm)
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - (2 * MARGIN)

styles = getSampleStyleSheet()
cell_style = styles["Normal"]


def _draw_table(pdf, table: Table, y_position: float, x: float = MARGIN) -> float:
    """Draw *table* below y_position, splitting it across pages when it does not fit."""
    top = PAGE_HEIGHT - MARGIN
    while True:
        available = y_position - MARGIN
        _, table_height = table.wrap(CONTENT_WIDTH, available)
        if table_height <= available:
            table.drawOn(pdf, x, y_position - table_height)
            return y_position - table_height

        parts = table.split(CONTENT_WIDTH, available)
        if len(parts) >= 2:
            head, table = parts[0], parts[1]
            _, head_height = head.wrap(CONTENT_WIDTH, available)
            head.drawOn(pdf, x, y_position - head_height)
        elif y_position >= top:
            # Single row taller than a page
            table.drawOn(pdf, x, y_position - table_height)
            return y_position - table_height
        pdf.showPage()
        y_position = top


def build_pdf(document: InvoiceDocument) -> bytes:
    """Render *document* to PDF bytes."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"{document.title} {document.document_number}")

    y_position = PAGE_HEIGHT - MARGIN

    # Title
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(PAGE_WIDTH / 2, y_position, document.title)
    y_position -= 30

    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN, y_position, f"{document.number_label}: {document.document_number}")
    y_position -= 14
    pdf.drawString(MARGIN, y_position, f"Date: {document.date}")
    y_position -= 30

    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(MARGIN, y_position, "Items")
    y_position -= 10

    # Items table
    items_data = [["SL", "Product", "Qty", "Cost", "Amount"]]
    items_data.extend(
        [
            str(row.index),
            Paragraph(escape(row.product_name), cell_style),
            row.quantity,
            row.unit_cost,
            row.amount,
        ]
        for row in document.rows
    )
    items_table = Table(
        items_data,
        colWidths=[
            CONTENT_WIDTH * 0.08,
            CONTENT_WIDTH * 0.44,
            CONTENT_WIDTH * 0.12,
            CONTENT_WIDTH * 0.18,
            CONTENT_WIDTH * 0.18,
        ],
        repeatRows=1,
    )
    items_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
                ("LINEBELOW", (0, 1), (-1, -1), 0.25, colors.lightgrey),
                ("ALIGN", (0, 0), (0, -1), "CENTER"),
                ("ALIGN", (2, 0), (2, -1), "CENTER"),
                ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    y_position = _draw_table(pdf, items_table, y_position) - 20

    # Totals block, right-aligned
    totals_table = Table(
        [[line.label, line.value] for line in document.totals],
        colWidths=[CONTENT_WIDTH * 0.2, CONTENT_WIDTH * 0.2],
    )
    totals_style = [
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]
    for i, line in enumerate(document.totals):
        if line.bold:
            totals_style.append(("FONTNAME", (0, i), (-1, i), "Helvetica-Bold"))
    totals_table.setStyle(TableStyle(totals_style))
    y_position = _draw_table(
        pdf, totals_table, y_position, x=MARGIN + CONTENT_WIDTH * 0.6
    ) - 20

    if document.notes:
        note = Paragraph(f"Notes: {escape(document.notes)}", cell_style)
        _, note_height = note.wrap(CONTENT_WIDTH, PAGE_HEIGHT)
        note.drawOn(pdf, MARGIN, y_position - note_height)
        y_position -= note_height + 20

    pdf.setFont("Helvetica", 10)
    pdf.drawCentredString(PAGE_WIDTH / 2, max(y_position, MARGIN), document.closing_note)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def write_pdf(document: InvoiceDocument, output_dir: Path) -> Path:
    """Write <document_number>.pdf into *output_dir* and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / document.filename
    path.write_bytes(build_pdf(document))
    logger.info("Invoice PDF written: %s", path)
    return path
