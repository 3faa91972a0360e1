"""
Utility functions for the Storefront order service
"""
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

STOREFRONT_DEFAULTS = {
    'TAX_RATE': Decimal('0.08'),
    'SHIPPING_COST': Decimal('0.00'),
    'CURRENCY': 'USD',
    'PRICE_TOLERANCE': Decimal('0.01'),
    'ORDER_NUMBER_PREFIX': 'ORD',
    'SEND_ORDER_CONFIRMATION': True,
    'CACHE_ENABLED': True,
    'CACHE_TTL': {},
}


def get_storefront_setting(name: str) -> Any:
    """
    Read a value from settings.STOREFRONT, falling back to the built-in default.
    """
    configured = getattr(settings, 'STOREFRONT', {}) or {}
    if name in configured:
        return configured[name]
    return STOREFRONT_DEFAULTS[name]


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Coerce a number-like value to Decimal. Returns None for anything
    that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def round_money(value: Any) -> Decimal:
    """
    Round a monetary amount to 2 decimal places, half-up.
    """
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def generate_order_number(now: Optional[datetime] = None) -> str:
    """
    Build a human-readable order number: <PREFIX>-<year>-<last 6 digits of the ms timestamp>.
    Two calls in the same millisecond produce the same number.
    """
    prefix = get_storefront_setting('ORDER_NUMBER_PREFIX')
    if now is None:
        millis = time.time_ns() // 1_000_000
        year = datetime.now(timezone.utc).year
    else:
        millis = int(now.timestamp() * 1000)
        year = now.year
    return f"{prefix}-{year}-{str(millis)[-6:].zfill(6)}"


def truncate_for_display(text: str, max_length: int = 100) -> str:
    """
    Truncate text for display purposes.
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
