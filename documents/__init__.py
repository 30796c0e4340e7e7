"""
Invoice document rendering and output.
"""
from .renderer import render_invoice, format_money, format_quantity, UNKNOWN_PRODUCT
from .pdf import build_pdf, write_pdf
from .html_export import render_html, write_html, DEFAULT_INVOICE_HTML_TEMPLATE

__all__ = [
    "render_invoice",
    "format_money",
    "format_quantity",
    "UNKNOWN_PRODUCT",
    "build_pdf",
    "write_pdf",
    "render_html",
    "write_html",
    "DEFAULT_INVOICE_HTML_TEMPLATE",
]
