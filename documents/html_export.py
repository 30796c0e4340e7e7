"""
Printable HTML rendition of an invoice document.
"""
import logging
from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader

from models.document import InvoiceDocument

logger = logging.getLogger(__name__)

# Default HTML invoice template
DEFAULT_INVOICE_HTML_TEMPLATE = """\
<!DOCTYPE html>
<!--
  Invoice template. Point INVOICE_TEMPLATE at a copy of this file to customise.
  Template engine : Jinja2  (https://jinja.palletsprojects.com/)
  Values are HTML-escaped automatically.

  Variables:
    title, document_number, number_label, date, notes, closing_note
    rows    list of: index, product_name, resolved, quantity, unit_cost, amount
    totals  list of: label, value, bold
-->
<html>
<head>
  <meta charset="utf-8">
  <title>{{ title }} {{ document_number }}</title>
  <style>
    body { font-family: Helvetica, Arial, sans-serif; font-size: 10pt; margin: 2em; }
    h1 { text-align: center; font-size: 18pt; }
    h2 { font-size: 14pt; }
    table.items { width: 100%; border-collapse: collapse; }
    table.items th { border-bottom: 1px solid #000; text-align: left; }
    table.items td { border-bottom: 1px solid #ddd; }
    .num { text-align: right; }
    .center { text-align: center; }
    table.totals { margin-left: auto; margin-top: 1em; }
    .closing { text-align: center; margin-top: 2em; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>
  <p>{{ number_label }}: {{ document_number }}<br>Date: {{ date }}</p>

  <h2>Items</h2>
  <table class="items">
    <thead>
      <tr><th class="center">SL</th><th>Product</th><th class="center">Qty</th><th class="num">Cost</th><th class="num">Amount</th></tr>
    </thead>
    <tbody>
    {% for row in rows %}
      <tr>
        <td class="center">{{ row.index }}</td>
        <td>{{ row.product_name }}</td>
        <td class="center">{{ row.quantity }}</td>
        <td class="num">{{ row.unit_cost }}</td>
        <td class="num">{{ row.amount }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>

  <table class="totals">
  {% for line in totals %}
    <tr>
      {% if line.bold %}<td><strong>{{ line.label }}</strong></td><td class="num"><strong>{{ line.value }}</strong></td>
      {% else %}<td>{{ line.label }}</td><td class="num">{{ line.value }}</td>{% endif %}
    </tr>
  {% endfor %}
  </table>

  {% if notes %}<p>Notes: {{ notes }}</p>{% endif %}
  <p class="closing">{{ closing_note }}</p>
</body>
</html>
"""


def render_html(document: InvoiceDocument, template_file: Optional[Path] = None) -> str:
    """
    Render *document* as HTML using the operator template (or built-in default).

    Args:
        document: The invoice to render
        template_file: Optional path to custom Jinja2 template file
    """
    if template_file and template_file.exists():
        env = Environment(
            loader=FileSystemLoader(str(template_file.parent)),
            autoescape=True,
            keep_trailing_newline=True,
        )
        tmpl = env.get_template(template_file.name)
    else:
        if template_file:
            logger.warning("Invoice template not found: %s (using built-in)", template_file)
        env = Environment(loader=BaseLoader(), autoescape=True, keep_trailing_newline=True)
        tmpl = env.from_string(DEFAULT_INVOICE_HTML_TEMPLATE)
    return tmpl.render(**document.model_dump())


def write_html(
    document: InvoiceDocument,
    output_dir: Path,
    template_file: Optional[Path] = None,
) -> Path:
    """Write <document_number>.html into *output_dir* and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / (Path(document.filename).stem + ".html")
    path.write_text(render_html(document, template_file), encoding="utf-8")
    logger.info("Invoice HTML written: %s", path)
    return path
