"""
Read-only access to product rows for pricing and inventory
"""
import logging
import uuid
from typing import Dict, Iterable, Optional

from .models import Product

logger = logging.getLogger(__name__)


def normalize_product_id(product_id) -> Optional[str]:
    """Canonical string form of a product id, or None when it is not a UUID."""
    if product_id is None or product_id == '':
        return None
    try:
        return str(uuid.UUID(str(product_id)))
    except ValueError:
        return None


class ProductCatalog:
    """
    Read-only accessor over the product table.
    """

    def get(self, product_id) -> Optional[Product]:
        key = normalize_product_id(product_id)
        if key is None:
            return None
        return Product.objects.filter(pk=key).first()

    def get_many(self, product_ids: Iterable, for_update: bool = False) -> Dict[str, Product]:
        """
        Fetch every referenced product in one query, keyed by normalized id.
        Malformed ids are treated as missing.

        With for_update=True the rows are locked until the surrounding
        transaction ends; the caller must be inside transaction.atomic().
        """
        keys = [normalize_product_id(pid) for pid in product_ids]
        ids = list(dict.fromkeys(key for key in keys if key))
        if not ids:
            return {}

        queryset = Product.objects.filter(pk__in=ids)
        if for_update:
            # Stable lock order across concurrent checkouts
            queryset = queryset.select_for_update().order_by('pk')

        products = {str(product.pk): product for product in queryset}
        logger.debug(f"Catalog batch lookup: {len(products)}/{len(ids)} products found")
        return products


product_catalog = ProductCatalog()
