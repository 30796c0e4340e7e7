"""
The order form: live header and line items plus the submit workflow.

State machine:

  editing ──submit()──▶ in flight ──success──▶ (render) ──▶ reset ──▶ editing
     ▲                     │
     └──────failure────────┘   form left as is so the user can resubmit

Only one submission may be in flight per form; a second submit() raises
SubmissionInProgressError. If reset() is called while a submission is in
flight, that submission's completion is marked stale and does not render or
reset the (already fresh) form again.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from models.order import LineItem, OrderHeader, OrderTotals, SubmissionRecord
from models.result import SubmitOutcome

from .assembler import assemble_submission
from .errors import OrderValidationError, SubmissionError, SubmissionInProgressError
from .gateway import SubmissionGateway
from .line_items import LineItemStore
from .pricing import compute_totals
from .reference_data import ReferenceData

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE_PERCENT = 5
_NUMBER_PREFIXES = {"sale": "INV", "purchase": "PO"}


def generate_document_number(direction: str, now: datetime) -> str:
    """e.g. PO-251019-1432 for a purchase created 2025-10-19 14:32."""
    return f"{_NUMBER_PREFIXES[direction]}-{now.strftime('%y%m%d-%H%M')}"


class OrderForm:
    def __init__(
        self,
        direction: str,
        gateway: SubmissionGateway,
        reference: Optional[ReferenceData] = None,
        config: Any = None,
        publisher: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.direction = direction
        self.gateway = gateway
        self.reference = reference or ReferenceData()
        self.publisher = publisher
        self.default_tax_rate_percent = (
            config.default_tax_rate_percent if config is not None else DEFAULT_TAX_RATE_PERCENT
        )
        self._clock = clock or datetime.now
        self._last_number_base: Optional[str] = None
        self._number_suffix = 1
        self._generation = 0
        self._in_flight = False

        self.header = OrderHeader()
        self.items = LineItemStore()
        self.touched = False
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _next_document_number(self) -> str:
        base = generate_document_number(self.direction, self._clock())
        if base == self._last_number_base:
            self._number_suffix += 1
            return f"{base}-{self._number_suffix}"
        self._last_number_base = base
        self._number_suffix = 1
        return base

    def reset(self) -> None:
        """Start a fresh order: new document number, today's dates, one empty row."""
        today = self._clock().date().isoformat()
        self.header = OrderHeader(
            document_number=self._next_document_number(),
            order_date=today,
            expected_date=today,
            party_id=None,
            status="Pending",
            shipping_fee=0,
            discount=0,
            tax_rate_percent=self.default_tax_rate_percent,
            notes="",
        )
        self.items = LineItemStore()
        self.touched = False
        self._generation += 1

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @property
    def totals(self) -> OrderTotals:
        return compute_totals(self.items, self.header)

    def add_item(self) -> LineItem:
        return self.items.add()

    def remove_item(self, index: int) -> bool:
        return self.items.remove(index)

    def update_item(self, index: int, **fields) -> LineItem:
        return self.items.update(index, **fields)

    def set_product(self, index: int, product_id: Any) -> LineItem:
        """Select a product on a row and copy its default unit cost when known."""
        item = self.items[index]
        item.product_id = product_id
        product = self.reference.product(product_id)
        if product is not None:
            item.unit_cost = product.unit_cost
        return item

    def mark_all_touched(self) -> None:
        self.touched = True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def assemble(self) -> SubmissionRecord:
        """Snapshot the form, marking every field touched if it is not valid."""
        try:
            return assemble_submission(self.header, self.items.snapshot(), self.direction)
        except OrderValidationError:
            self.mark_all_touched()
            raise

    async def submit(self, render: bool = True) -> SubmitOutcome:
        """
        Validate, persist through the gateway and, on success, render and reset.

        Raises OrderValidationError (gateway not called), SubmissionInProgressError,
        or the gateway's SubmissionError (form left untouched for a retry).
        Invoice rendering failures are logged and reported as render_error.
        """
        if self._in_flight:
            raise SubmissionInProgressError(
                f"Order {self.header.document_number} is already being submitted"
            )
        record = self.assemble()
        generation = self._generation

        self._in_flight = True
        try:
            response = await self.gateway.submit(record.to_payload())
        except SubmissionError as exc:
            logger.error("Saving %s failed, order kept for resubmission: %s",
                         record.document_number, exc)
            raise
        finally:
            self._in_flight = False

        if generation != self._generation:
            logger.warning("Form was reset while %s was in flight; ignoring its completion",
                           record.document_number)
            return SubmitOutcome(record=record, response=response, stale=True)

        logger.info("Order %s saved (%s mode, grand total %.2f)",
                    record.document_number, self.gateway.mode, record.grand_total)
        document = document_path = render_error = None
        if render and self.publisher is not None:
            try:
                document, document_path = self.publisher.publish(record)
            except Exception as exc:
                # Order is already persisted
                logger.exception("Order %s saved but its invoice could not be rendered",
                                 record.document_number)
                render_error = str(exc) or type(exc).__name__
        self.reset()
        return SubmitOutcome(
            record=record,
            response=response,
            document=document,
            document_path=document_path,
            render_error=render_error,
        )

    def preview_document(self) -> Tuple[Any, Any]:
        """Render the current order without submitting it."""
        if self.publisher is None:
            raise RuntimeError("No document publisher configured")
        record = self.assemble()
        return self.publisher.publish(record)
