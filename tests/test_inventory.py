"""Tests for the inventory ledger."""

import logging

import pytest
from django.db import transaction

from apps.core.cache import cache_accelerator
from apps.core.exceptions import InsufficientStockException
from apps.orders.inventory import InventoryLedger
from apps.orders.models import LineItem

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger():
    return InventoryLedger()


def line(product, quantity):
    return LineItem(
        product_id=str(product.pk),
        product_name=product.name,
        product_image=product.image_src,
        quantity=quantity,
        price=product.price_regular,
        total=product.price_regular * quantity,
    )


class TestDecrement:
    def test_reduces_stock(self, ledger, product):
        assert ledger.decrement(product.pk, 4) is True

        product.refresh_from_db()
        assert product.stock_quantity == 6

    def test_can_reach_zero(self, ledger, product):
        ledger.decrement(product.pk, 10)

        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_never_goes_negative(self, ledger, product):
        with pytest.raises(InsufficientStockException) as exc_info:
            ledger.decrement(product.pk, 11)

        product.refresh_from_db()
        assert product.stock_quantity == 10
        assert exc_info.value.details["available"] == 10

    def test_untracked_product_untouched(self, ledger, make_product):
        product = make_product(stock_quantity=0, track_inventory=False)

        assert ledger.decrement(product.pk, 5) is False

        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_missing_product_is_skipped(self, ledger):
        assert ledger.decrement("00000000-0000-0000-0000-000000000001", 1) is False
        assert ledger.decrement("garbage", 1) is False

    def test_decrement_items_counts_changed_lines(self, ledger, make_product):
        tracked = make_product(name="Tracked")
        untracked = make_product(name="Untracked", track_inventory=False)

        changed = ledger.decrement_items([line(tracked, 2), line(untracked, 2)])

        assert changed == 1
        tracked.refresh_from_db()
        assert tracked.stock_quantity == 8

    def test_low_stock_warning(self, ledger, make_product, caplog):
        product = make_product(name="Desk Lamp", stock_quantity=6, low_stock_threshold=5)

        with caplog.at_level(logging.WARNING, logger="apps.orders.inventory"):
            ledger.decrement(product.pk, 2)

        assert "Low stock: Desk Lamp has 4 units left" in caplog.text


class TestRestore:
    def test_adds_stock_without_upper_bound(self, ledger, product):
        assert ledger.restore(product.pk, 25) is True

        product.refresh_from_db()
        assert product.stock_quantity == 35

    def test_untracked_product_untouched(self, ledger, make_product):
        product = make_product(stock_quantity=3, track_inventory=False)

        assert ledger.restore(product.pk, 5) is False

        product.refresh_from_db()
        assert product.stock_quantity == 3

    def test_restore_items(self, ledger, make_product):
        first = make_product(name="First", stock_quantity=1)
        second = make_product(name="Second", stock_quantity=2)

        assert ledger.restore_items([line(first, 1), line(second, 3)]) == 2

        first.refresh_from_db()
        second.refresh_from_db()
        assert first.stock_quantity == 2
        assert second.stock_quantity == 5


class TestCacheInvalidation:
    @pytest.fixture
    def cached(self, product):
        cache_accelerator.set("products", "list:all", [{"id": str(product.pk)}])
        cache_accelerator.set("product_detail", str(product.pk), {"id": str(product.pk)})

    def test_stock_change_invalidates_product_caches(
        self, ledger, product, cached, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            ledger.decrement(product.pk, 1)

        assert cache_accelerator.get("products", "list:all") is None
        assert cache_accelerator.get("product_detail", str(product.pk)) is None

    def test_invalidation_waits_for_commit(self, ledger, product, cached, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            ledger.decrement(product.pk, 1)

            assert cache_accelerator.get("products", "list:all") == [{"id": str(product.pk)}]

        assert len(callbacks) == 1
        callbacks[0]()
        assert cache_accelerator.get("products", "list:all") is None

    def test_rolled_back_change_keeps_cache(self, ledger, product, cached, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    ledger.decrement(product.pk, 1)
                    raise RuntimeError("checkout aborted")

        product.refresh_from_db()
        assert callbacks == []
        assert product.stock_quantity == 10
        assert cache_accelerator.get("products", "list:all") == [{"id": str(product.pk)}]
