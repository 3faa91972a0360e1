"""Tests for the synthetic data generator."""

import importlib.util
from pathlib import Path

import pytest

from apps.orders.models import Order

pytestmark = pytest.mark.django_db

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "generate_data.py"


@pytest.fixture
def generator():
    module_spec = importlib.util.spec_from_file_location("generate_data", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class TestGenerateOrders:
    def test_no_stock_skips_orders(self, generator, customer_user, make_product):
        sold_out = [make_product(name="Sold Out", stock_quantity=0)]

        orders = generator.generate_orders([customer_user], sold_out, count=5)

        assert orders == []
        assert Order.objects.count() == 0

    def test_places_orders_from_stocked_products(self, generator, customer_user, make_product):
        products = [make_product(name="Desk Lamp", stock_quantity=500)]

        orders = generator.generate_orders([customer_user], products, count=3)

        assert len(orders) == 3
        assert Order.objects.count() == 3
