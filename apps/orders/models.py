"""
Order Models - Checkout and order lifecycle
Tables: Orders
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Dict, List

from django.db import models
from apps.core.models import BaseModel

from .state import OrderStatus, PaymentStatus, PaymentMethod


@dataclass(frozen=True)
class LineItem:
    """
    Snapshot of one product+quantity+price at order time.
    Later catalog edits never change a stored line item.
    """
    product_id: str
    product_name: str
    product_image: str
    quantity: int
    price: Decimal
    total: Decimal

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['price'] = str(self.price)
        data['total'] = str(self.total)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'LineItem':
        return cls(
            product_id=str(data['product_id']),
            product_name=data.get('product_name', ''),
            product_image=data.get('product_image', ''),
            quantity=int(data['quantity']),
            price=Decimal(str(data['price'])),
            total=Decimal(str(data['total'])),
        )


class OrderQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(is_deleted=False)

    def for_customer(self, email: str):
        return self.visible().filter(customer_email__iexact=email)


class Order(BaseModel):
    """
    Customer order. Financial fields are always computed server-side.
    Mutated only through OrderLifecycle; never physically deleted.
    """
    order_number = models.CharField(max_length=50, unique=True, db_index=True)

    # Customer information
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(db_index=True)
    customer_phone = models.CharField(max_length=30, blank=True, default='')

    # Shipping address
    shipping_address = models.TextField()
    shipping_city = models.CharField(max_length=100)
    shipping_state = models.CharField(max_length=100)
    shipping_zip = models.CharField(max_length=20)
    shipping_country = models.CharField(max_length=100, default='USA')

    # Line item snapshots (see LineItem)
    items = models.JSONField(default=list)

    # Financial summary
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    shipping_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')

    # Status and management
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices(),
        default=OrderStatus.PENDING.value,
        db_index=True
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices(),
        default=PaymentStatus.UNPAID.value
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices(),
        blank=True,
        null=True
    )

    # Append-only audit trail for refunds
    notes = models.TextField(blank=True, null=True)
    tracking_number = models.CharField(max_length=100, blank=True, null=True)

    is_deleted = models.BooleanField(default=False, help_text="Hidden from admin lists")
    shipped_at = models.DateTimeField(blank=True, null=True)
    delivered_at = models.DateTimeField(blank=True, null=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = 'orders_orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.order_number} - {self.customer_name} - {self.status}"

    @property
    def line_items(self) -> List[LineItem]:
        return [LineItem.from_dict(item) for item in self.items or []]
