"""
Catalog Models - Products sold by the storefront
Tables: Products
"""
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models
from apps.core.models import BaseModel


class Product(BaseModel):
    """
    Product in the catalog.
    Prices and the tracking flag are edited by administrators; stock is
    mutated only through the inventory ledger.
    """
    CATEGORY_CHOICES = [
        ('electronics', 'Electronics'),
        ('clothing', 'Clothing'),
        ('home', 'Home & Kitchen'),
        ('books', 'Books'),
        ('sports', 'Sports & Outdoors'),
        ('beauty', 'Beauty & Personal Care'),
        ('toys', 'Toys & Games'),
        ('accessories', 'Accessories'),
        ('other', 'Other'),
    ]

    name = models.CharField(max_length=255)
    company = models.CharField(max_length=255, blank=True, default='')
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, default='other')
    description = models.TextField(blank=True, null=True)
    image_src = models.CharField(max_length=500, blank=True, default='')
    price_regular = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    price_sale = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Sale price; takes precedence over the regular price when set"
    )
    price_currency = models.CharField(max_length=3, default='USD')
    stock_quantity = models.PositiveIntegerField(default=0)
    track_inventory = models.BooleanField(
        default=True,
        help_text="When disabled, stock is never checked or changed for this product"
    )
    low_stock_threshold = models.PositiveIntegerField(default=5, help_text="Informational only")
    sku = models.CharField(max_length=50, unique=True, blank=True, null=True)

    class Meta:
        db_table = 'catalog_products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} (${self.effective_price})"

    @property
    def effective_price(self):
        """Sale price if set, otherwise the regular price."""
        if self.price_sale is not None:
            return self.price_sale
        return self.price_regular

    @property
    def is_low_stock(self) -> bool:
        return self.track_inventory and self.stock_quantity <= self.low_stock_threshold
