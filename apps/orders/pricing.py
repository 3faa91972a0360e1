"""
Server-side order price calculation.

Client-submitted prices and totals are never authoritative: every order is
priced from current catalog rows, fetched in a single batch query.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from apps.catalog.services import ProductCatalog, normalize_product_id, product_catalog
from apps.core.exceptions import (
    InsufficientStockException,
    InvalidProductPriceException,
    ProductNotFoundException,
    ValidationException,
)
from apps.core.utils import get_storefront_setting, round_money, to_decimal

from .models import LineItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderItem:
    """A requested cart line: product and quantity only."""
    product_id: Any
    quantity: int

    @classmethod
    def coerce(cls, item) -> 'OrderItem':
        if isinstance(item, OrderItem):
            return item
        if isinstance(item, dict):
            product_id = item.get('product_id', item.get('productId'))
            return cls(product_id=product_id, quantity=item.get('quantity'))
        raise ValidationException("Invalid item in order", field="items")


@dataclass(frozen=True)
class OrderCalculation:
    items: List[LineItem] = field(default_factory=list)
    subtotal: Decimal = Decimal('0.00')
    tax: Decimal = Decimal('0.00')
    tax_rate: Decimal = Decimal('0.00')
    shipping_cost: Decimal = Decimal('0.00')
    total: Decimal = Decimal('0.00')


class PriceCalculator:
    """
    Recomputes authoritative line items and totals from the catalog.
    Pure read + compute; never mutates stock.
    """

    def __init__(self, catalog: Optional[ProductCatalog] = None):
        self.catalog = catalog or product_catalog

    def calculate(
        self,
        items: Iterable,
        tax_rate=None,
        shipping_cost=None,
        lock: bool = False
    ) -> OrderCalculation:
        """
        Price a cart. Raises on the first failing line, so no partial
        calculation is ever returned.

        With lock=True the product rows stay locked for the caller's
        transaction, keeping the stock check valid until the decrement.
        """
        requested = self._validate_items(items)

        rate = to_decimal(get_storefront_setting('TAX_RATE') if tax_rate is None else tax_rate)
        shipping = to_decimal(get_storefront_setting('SHIPPING_COST') if shipping_cost is None else shipping_cost)
        if rate is None or rate < 0:
            raise ValidationException("Invalid tax rate", field="tax_rate")
        if shipping is None or shipping < 0:
            raise ValidationException("Invalid shipping cost", field="shipping_cost")

        products = self.catalog.get_many((item.product_id for item in requested), for_update=lock)

        # Repeated lines of one product draw on the same stock
        wanted = Counter()
        for item in requested:
            wanted[normalize_product_id(item.product_id)] += item.quantity

        line_items: List[LineItem] = []
        subtotal = Decimal('0')

        for item in requested:
            key = normalize_product_id(item.product_id)
            product = products.get(key) if key else None

            if product is None:
                raise ProductNotFoundException(item.product_id)

            if product.track_inventory:
                available = product.stock_quantity or 0
                if available < wanted[key]:
                    raise InsufficientStockException(
                        product_name=product.name,
                        requested=wanted[key],
                        available=available
                    )

            price = to_decimal(product.effective_price)
            if price is None or price < 0:
                raise InvalidProductPriceException(product.pk, product.name)

            line_total = price * item.quantity
            subtotal += line_total

            line_items.append(LineItem(
                product_id=str(product.pk),
                product_name=product.name,
                product_image=product.image_src,
                quantity=item.quantity,
                price=round_money(price),
                total=round_money(line_total),
            ))

        subtotal = round_money(subtotal)
        tax = round_money(subtotal * rate)
        shipping = round_money(shipping)
        total = round_money(subtotal + tax + shipping)

        logger.debug(f"Calculated order: {len(line_items)} lines, subtotal={subtotal}, total={total}")

        return OrderCalculation(
            items=line_items,
            subtotal=subtotal,
            tax=tax,
            tax_rate=rate,
            shipping_cost=shipping,
            total=total,
        )

    def _validate_items(self, items: Iterable) -> List[OrderItem]:
        requested = [OrderItem.coerce(item) for item in (items or [])]

        if not requested:
            raise ValidationException("Order must contain at least one item", field="items")

        for item in requested:
            quantity = item.quantity
            if (
                not item.product_id
                or isinstance(quantity, bool)
                or not isinstance(quantity, int)
                or quantity <= 0
            ):
                raise ValidationException(
                    "Invalid item in order",
                    details={"productId": str(item.product_id) if item.product_id else None,
                             "quantity": quantity}
                )

        return requested


def prices_match(client_total, calculation: OrderCalculation, tolerance=None) -> bool:
    """
    Compare a client-proposed total with the server calculation.
    Used only as a tampering signal; the server total always wins.
    """
    allowed = to_decimal(get_storefront_setting('PRICE_TOLERANCE') if tolerance is None else tolerance)
    proposed = to_decimal(client_total)
    if proposed is None:
        return False
    return abs(proposed - calculation.total) <= allowed


def summarize(calculation: OrderCalculation) -> Dict:
    return {
        "subtotal": str(calculation.subtotal),
        "tax": str(calculation.tax),
        "shippingCost": str(calculation.shipping_cost),
        "total": str(calculation.total),
    }
