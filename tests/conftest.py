"""Pytest fixtures for the storefront order tests."""

import itertools
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.core.roles import Role, role_lookup
from apps.orders.lifecycle import OrderLifecycle


@pytest.fixture(autouse=True)
def storefront_settings(settings):
    """Pin pricing settings so totals do not depend on the environment."""
    settings.STOREFRONT = {
        'TAX_RATE': Decimal('0.08'),
        'SHIPPING_COST': Decimal('0.00'),
        'CURRENCY': 'USD',
        'PRICE_TOLERANCE': Decimal('0.01'),
        'ORDER_NUMBER_PREFIX': 'ORD',
        'SEND_ORDER_CONFIRMATION': True,
        'CACHE_ENABLED': True,
        'CACHE_TTL': {'products': 300, 'product_detail': 600},
    }
    return settings


@pytest.fixture(autouse=True)
def clear_cache():
    """Local memory cache outlives a test; it also holds throttle counters."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def sequential_order_numbers(monkeypatch):
    """Real order numbers only have millisecond resolution."""
    counter = itertools.count(1)
    monkeypatch.setattr(
        "apps.orders.lifecycle.generate_order_number",
        lambda: f"ORD-2026-{next(counter):06d}",
    )


@pytest.fixture
def make_product(db):
    """Factory for catalog products."""

    def _make(**overrides):
        defaults = {
            "name": "Mechanical Keyboard",
            "company": "Keyco",
            "category": "electronics",
            "image_src": "https://img.example.com/keyboard.png",
            "price_regular": Decimal("10.00"),
            "price_sale": None,
            "stock_quantity": 10,
            "track_inventory": True,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def customer_info():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    }


@pytest.fixture
def checkout_payload():
    """Build a camelCase checkout request body."""

    def _payload(items, **overrides):
        body = {
            "customerName": "Jane Doe",
            "customerEmail": "jane@example.com",
            "customerPhone": "555-0100",
            "shippingAddress": "1 Main St",
            "shippingCity": "Springfield",
            "shippingState": "IL",
            "shippingZip": "62701",
            "items": items,
        }
        body.update(overrides)
        return body

    return _payload


@pytest.fixture
def lifecycle():
    return OrderLifecycle()


@pytest.fixture
def place_order(lifecycle, customer_info):
    """Create an order through the lifecycle."""

    def _place(items, **kwargs):
        kwargs.setdefault("customer", customer_info)
        return lifecycle.create_order(items=items, **kwargs)

    return _place


@pytest.fixture
def customer_user(db):
    user = get_user_model().objects.create_user(
        username="jane", email="jane@example.com", password="secret"
    )
    role_lookup.assign(user, Role.CUSTOMER)
    return user


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(
        username="mallory", email="mallory@example.com", password="secret"
    )


@pytest.fixture
def admin_user(db):
    user = get_user_model().objects.create_user(
        username="ops", email="ops@example.com", password="secret"
    )
    role_lookup.assign(user, Role.ADMIN)
    return user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer_user):
    api_client.force_authenticate(user=customer_user)
    return api_client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


class BrokenBackend:
    """Cache backend whose server is unreachable."""

    def _fail(self, *args, **kwargs):
        raise ConnectionError("cache unreachable")

    get = set = add = delete = incr = _fail


@pytest.fixture
def broken_backend():
    return BrokenBackend()
