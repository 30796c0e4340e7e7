"""
Unit tests for the line item store.
"""
import pytest

from models.order import LineItem
from ordering.line_items import LineItemStore


@pytest.mark.unit
class TestLineItemStore:

    def test_starts_with_one_empty_row(self):
        store = LineItemStore()
        assert len(store) == 1
        assert store[0].product_id is None
        assert store[0].quantity == 1

    def test_add_and_remove(self):
        store = LineItemStore()
        store.add(LineItem(product_id=2, unit_cost=910, quantity=1))
        assert len(store) == 2

        assert store.remove(0) is True
        assert len(store) == 1
        assert store[0].product_id == 2

    def test_removing_last_row_is_noop(self):
        store = LineItemStore()
        assert store.remove(0) is False
        assert len(store) == 1

    def test_remove_by_position(self):
        store = LineItemStore([LineItem(product_id=i) for i in (1, 2, 3)])
        store.remove(1)
        assert [item.product_id for item in store] == [1, 3]

    def test_update_only_given_fields(self):
        store = LineItemStore([LineItem(product_id=1, unit_cost=150, quantity=2)])
        store.update(0, quantity=5)
        assert store[0].quantity == 5
        assert store[0].unit_cost == 150
        assert store[0].product_id == 1

    def test_snapshot_is_detached(self):
        store = LineItemStore([LineItem(product_id=1, unit_cost=150, quantity=2)])
        snap = store.snapshot()
        store[0].quantity = 99
        assert snap[0].quantity == 2

    def test_clear_leaves_one_row(self):
        store = LineItemStore([LineItem(product_id=i) for i in (1, 2, 3)])
        store.clear()
        assert len(store) == 1
        assert store[0].product_id is None

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_remove_unknown_index_is_noop(self, index):
        store = LineItemStore([LineItem(product_id=1), LineItem(product_id=2)])
        assert store.remove(index) is False
        assert [item.product_id for item in store] == [1, 2]
