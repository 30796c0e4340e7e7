"""
Ordered, mutable collection of line items for the active order form.

Rows are addressed by their current position only. The store always holds at
least one row: removing the last remaining row is a no-op.
"""
import logging
from typing import Iterator, List, Optional, Union

from models.order import LineItem

logger = logging.getLogger(__name__)


class LineItemStore:
    def __init__(self, items: Optional[List[LineItem]] = None) -> None:
        self._items: List[LineItem] = list(items) if items else [LineItem()]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self._items)

    def __getitem__(self, index: int) -> LineItem:
        return self._items[index]

    def add(self, item: Optional[LineItem] = None) -> LineItem:
        """Append a row (a fresh empty one by default) and return it."""
        item = item or LineItem()
        self._items.append(item)
        return item

    def remove(self, index: int) -> bool:
        """Remove the row at *index*. Returns False for the last row or an unknown index."""
        if not 0 <= index < len(self._items):
            logger.debug("Ignoring removal of line item %r (have %d)", index, len(self._items))
            return False
        if len(self._items) <= 1:
            logger.debug("Ignoring removal of the last line item")
            return False
        del self._items[index]
        return True

    def update(
        self,
        index: int,
        *,
        product_id: Union[int, str, None] = None,
        unit_cost=None,
        quantity=None,
    ) -> LineItem:
        """Patch the given fields of one row; fields left as None are unchanged."""
        item = self._items[index]
        if product_id is not None:
            item.product_id = product_id
        if unit_cost is not None:
            item.unit_cost = unit_cost
        if quantity is not None:
            item.quantity = quantity
        return item

    def clear(self) -> None:
        """Drop every row and start again from a single empty one."""
        self._items = [LineItem()]

    def snapshot(self) -> List[LineItem]:
        """Deep copies of the current rows, safe to hand to pure functions."""
        return [item.model_copy(deep=True) for item in self._items]
