"""
Inventory ledger: stock deltas for tracked products.

Decrements are conditional updates (stock >= quantity) so stock can never go
negative, even when two checkouts race. Untracked products are never touched.
"""
import logging
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.catalog.models import Product
from apps.catalog.services import normalize_product_id
from apps.core.cache import CacheAccelerator, cache_accelerator
from apps.core.exceptions import InsufficientStockException

from .models import LineItem

logger = logging.getLogger(__name__)

PRODUCT_CACHE_NAMESPACES = ('products', 'product_detail')


class InventoryLedger:
    """
    Applies stock changes. Does not detect double application; callers
    invoke it once per legal order transition.
    """

    def __init__(self, cache: Optional[CacheAccelerator] = None):
        self.cache = cache or cache_accelerator

    def decrement(self, product_id, quantity: int) -> bool:
        """
        Take quantity units out of stock.

        Returns True when stock changed, False for untracked or missing
        products. Raises InsufficientStockException when a tracked product
        holds fewer than quantity units.
        """
        key = normalize_product_id(product_id)
        if key is None:
            return False

        updated = Product.objects.filter(
            pk=key,
            track_inventory=True,
            stock_quantity__gte=quantity
        ).update(
            stock_quantity=F('stock_quantity') - quantity,
            updated_at=timezone.now()
        )

        if not updated:
            product = Product.objects.filter(pk=key).only('name', 'stock_quantity', 'track_inventory').first()
            if product is None or not product.track_inventory:
                return False
            raise InsufficientStockException(
                product_name=product.name,
                requested=quantity,
                available=product.stock_quantity
            )

        logger.info(f"Stock decremented: product={key} quantity={quantity}")
        self._after_change(key)
        return True

    def restore(self, product_id, quantity: int) -> bool:
        """
        Put quantity units back into stock. No upper bound.
        Returns True when stock changed.
        """
        key = normalize_product_id(product_id)
        if key is None:
            return False

        updated = Product.objects.filter(pk=key, track_inventory=True).update(
            stock_quantity=F('stock_quantity') + quantity,
            updated_at=timezone.now()
        )

        if not updated:
            logger.info(f"Stock not restored for product {key}: missing or untracked")
            return False

        logger.info(f"Stock restored: product={key} quantity={quantity}")
        self._after_change(key)
        return True

    def decrement_items(self, items: Iterable[LineItem]) -> int:
        """Decrement stock for every line. Returns the number of lines that changed stock."""
        return sum(1 for item in items if self.decrement(item.product_id, item.quantity))

    def restore_items(self, items: Iterable[LineItem]) -> int:
        """Restore stock for every line. Returns the number of lines that changed stock."""
        return sum(1 for item in items if self.restore(item.product_id, item.quantity))

    def _after_change(self, product_key: str) -> None:
        low = Product.objects.filter(
            pk=product_key,
            stock_quantity__lte=F('low_stock_threshold')
        ).values_list('name', 'stock_quantity').first()
        if low:
            logger.warning(f"Low stock: {low[0]} has {low[1]} units left")

        # After commit, so readers never re-cache pre-commit stock
        transaction.on_commit(self.invalidate_product_caches)

    def invalidate_product_caches(self) -> None:
        for namespace in PRODUCT_CACHE_NAMESPACES:
            self.cache.invalidate_namespace(namespace)


inventory_ledger = InventoryLedger()
