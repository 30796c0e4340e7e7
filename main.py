#!/usr/bin/env python3
"""
Order Desk — CLI entry point.

Usage examples:
  python main.py check                                   # Show gateway mode and reference data
  python main.py create -d purchase -p 1 --item 1:2 --item 2:1 --shipping 50 --discount 100
  python main.py create -d sale -p 3 --item 4:10:55 --tax-rate 7.5 --html
  python main.py list -d purchase                        # List stored purchase orders
  python main.py show 1 -d purchase                      # Print one stored order as JSON
  python main.py render 1 -d purchase                    # Re-create its PDF invoice
  python main.py clear -d sale --yes                     # Drop locally stored sales
"""
import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from config import Config
from documents.publisher import InvoicePublisher
from ordering import (
    LocalFallbackGateway,
    OrderForm,
    OrderValidationError,
    SubmissionError,
    create_gateway,
    load_reference_data,
)
from ordering.reference_data import parse_id


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieten noisy third-party loggers
    logging.getLogger("reportlab").setLevel(logging.WARNING)


direction_option = click.option(
    "--direction", "-d",
    type=click.Choice(["purchase", "sale"]),
    default="purchase",
    show_default=True,
    help="Purchase orders (suppliers) or sales (customers)",
)


def _parse_item(value: str) -> tuple:
    """PRODUCT:QTY[:COST] -> (product_id, qty, cost or None)."""
    parts = value.split(":")
    if len(parts) not in (2, 3) or not parts[0].strip():
        raise click.BadParameter(f"'{value}' is not PRODUCT:QTY[:COST]", param_hint="--item")
    cost = parts[2] if len(parts) == 3 else None
    return parse_id(parts[0]), parts[1], cost


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Order Desk — price, save and print sales and purchase orders."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# --------------------------------------------------------------------
# check command
# --------------------------------------------------------------------

@cli.command()
def check() -> None:
    """Show where orders will be saved and what reference data is loaded."""
    config = Config()

    click.echo("\n=== Order Desk Setup Check ===\n")
    if config.api_base_url:
        click.echo(f"  Mode:             remote  ({config.api_base_url})")
    else:
        click.echo("  Mode:             local fallback")
        click.echo(f"  Storage:          {config.storage_path}")

    try:
        reference = load_reference_data(config)
    except SubmissionError as e:
        click.echo(f"  Reference data:   ✗ NOT reachable ({e})")
    else:
        source = config.reference_api_url or "CSV files"
        click.echo(f"  Reference data:   {source}")
        click.echo(f"    products        {len(reference.products)}")
        click.echo(f"    suppliers       {len(reference.suppliers)}")
        click.echo(f"    customers       {len(reference.customers)}")

    click.echo(f"  Documents folder: {config.output_dir}")
    click.echo()


# --------------------------------------------------------------------
# create command
# --------------------------------------------------------------------

@cli.command()
@direction_option
@click.option("--party", "-p", required=True, help="Supplier / customer id")
@click.option("--item", "items", multiple=True, required=True, metavar="PRODUCT:QTY[:COST]",
              help="Line item; COST defaults to the product's unit cost. Repeatable.")
@click.option("--shipping", default="0", show_default=True)
@click.option("--discount", default="0", show_default=True)
@click.option("--tax-rate", default=None, help="Tax rate in percent (default from config)")
@click.option("--status", default="Pending", show_default=True)
@click.option("--expected-date", default=None, help="YYYY-MM-DD (due date for sales)")
@click.option("--notes", default="")
@click.option("--no-pdf", is_flag=True, help="Do not write the invoice PDF")
@click.option("--html", is_flag=True, help="Also write an HTML copy of the invoice")
def create(
    direction: str,
    party: str,
    items: tuple,
    shipping: str,
    discount: str,
    tax_rate: str | None,
    status: str,
    expected_date: str | None,
    notes: str,
    no_pdf: bool,
    html: bool,
) -> None:
    """Create an order, save it and print its invoice."""
    config = Config()
    reference = load_reference_data(config)
    gateway = create_gateway(config, direction)
    publisher = InvoicePublisher.from_config(config, reference, write_html_copy=html)
    form = OrderForm(direction, gateway, reference, config=config, publisher=publisher)

    form.header.party_id = parse_id(party)
    form.header.status = status
    form.header.shipping_fee = shipping
    form.header.discount = discount
    form.header.notes = notes
    if tax_rate is not None:
        form.header.tax_rate_percent = tax_rate
    if expected_date:
        form.header.expected_date = expected_date

    for i, value in enumerate(items):
        product_id, qty, cost = _parse_item(value)
        if i > 0:
            form.add_item()
        form.set_product(i, product_id)
        form.update_item(i, quantity=qty, unit_cost=cost)

    try:
        outcome = asyncio.run(form.submit(render=not no_pdf))
    except OrderValidationError as e:
        click.echo("  ✗ Order not saved:", err=True)
        for err in e.errors:
            click.echo(f"    - {err.description}", err=True)
        sys.exit(1)
    except SubmissionError as e:
        click.echo(f"  ✗ Failed to save order: {e}", err=True)
        sys.exit(1)

    record = outcome.record
    symbol = config.currency_symbol
    click.echo()
    click.echo(f"  ✓ Saved {record.document_number} ({gateway.mode})")
    click.echo(f"  Subtotal:     {symbol} {record.subtotal:.2f}")
    click.echo(f"  Shipping:     {symbol} {record.shipping_fee:.2f}")
    click.echo(f"  Discount:     {symbol} {record.discount:.2f}")
    click.echo(f"  Tax:          {symbol} {record.tax_amount:.2f}")
    click.echo(f"  Grand total:  {symbol} {record.grand_total:.2f}")
    if outcome.document and outcome.document.warnings:
        for w in outcome.document.warnings:
            click.echo(f"  ⚠ {w}")
    if outcome.document_path:
        click.echo(f"  Invoice:      {outcome.document_path}")
    if outcome.render_error:
        click.echo(f"  ⚠ Invoice not written: {outcome.render_error}", err=True)
    click.echo()


# --------------------------------------------------------------------
# list / show / render / clear commands
# --------------------------------------------------------------------

@cli.command("list")
@direction_option
@click.option("--page", type=int, default=None)
@click.option("--size", type=int, default=None)
@click.option("--query", "-q", default=None)
def list_orders(direction: str, page: int | None, size: int | None, query: str | None) -> None:
    """List stored orders."""
    config = Config()
    gateway = create_gateway(config, direction)
    try:
        result = asyncio.run(gateway.list(page=page, size=size, q=query))
    except SubmissionError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    if not isinstance(result, list):
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return
    if not result:
        click.echo("No orders stored.")
        return
    number_key = "invoiceNumber" if direction == "sale" else "poNumber"
    for i, rec in enumerate(result, start=1):
        if not isinstance(rec, dict):
            continue
        total = rec.get("grandTotal")
        total_str = f"{config.currency_symbol} {total:.2f}" if isinstance(total, (int, float)) else "-"
        number = str(rec.get(number_key) or "?")
        date = str(rec.get("date") or "")
        click.echo(f"  {i:>4}  {number:<20} {date:<12} {total_str}")


def _fetch_one(direction: str, record_id: str):
    config = Config()
    gateway = create_gateway(config, direction)
    try:
        record = asyncio.run(gateway.get_by_id(record_id))
    except SubmissionError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    if record is None:
        click.echo(f"✗ No order with id {record_id}", err=True)
        sys.exit(1)
    return config, record


@cli.command()
@click.argument("record_id")
@direction_option
def show(record_id: str, direction: str) -> None:
    """Print one stored order as JSON (local ids are 1-based positions)."""
    _, record = _fetch_one(direction, record_id)
    click.echo(json.dumps(record, indent=2, ensure_ascii=False))


@cli.command()
@click.argument("record_id")
@direction_option
@click.option("--output", "-o", default=None, type=click.Path(), help="Output directory")
@click.option("--html", is_flag=True, help="Also write an HTML copy of the invoice")
def render(record_id: str, direction: str, output: str | None, html: bool) -> None:
    """Write the invoice PDF for a stored order."""
    config, record = _fetch_one(direction, record_id)
    if output:
        config.output_dir = Path(output)
    reference = load_reference_data(config)
    publisher = InvoicePublisher.from_config(config, reference, write_html_copy=html)
    document, path = publisher.publish(record, direction)
    for w in document.warnings:
        click.echo(f"  ⚠ {w}")
    click.echo(f"  Invoice: {path}")


@cli.command()
@direction_option
@click.confirmation_option(prompt="Delete all locally stored orders?")
def clear(direction: str) -> None:
    """Remove locally stored orders (local fallback mode only)."""
    config = Config()
    gateway = create_gateway(config, direction)
    if not isinstance(gateway, LocalFallbackGateway):
        click.echo("✗ Orders are stored remotely; nothing to clear locally.", err=True)
        sys.exit(1)
    gateway.clear()
    click.echo("✓ Local orders cleared.")


if __name__ == "__main__":
    cli()
