"""
Order Lifecycle - checkout, cancellation, refund and admin overrides

This module implements:
1. CreateOrder: server pricing, persistence and stock decrement in one transaction
2. CancelOrder: guarded by status, restores stock for paid orders
3. RefundOrder: guarded by order and payment status, optional stock restore, audit note
4. Admin overrides: free-form status / payment status edits

Flow of CreateOrder:
    price check (rows locked) → insert order → decrement stock → commit → email
"""
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import (
    InvalidRefundAmountException,
    OrderAlreadyExistsException,
    OrderAlreadyRefundedException,
    OrderCannotBeCancelledException,
    OrderCannotBeRefundedException,
    OrderNotFoundException,
    OrderNotPaidException,
    ValidationException,
)
from apps.core.utils import (
    generate_order_number,
    get_storefront_setting,
    round_money,
    to_decimal,
    truncate_for_display,
)

from .inventory import InventoryLedger, inventory_ledger
from .models import Order
from .notifications import OrderNotifier, order_notifier
from .pricing import PriceCalculator, prices_match, summarize
from .state import (
    INITIAL_PAYMENT_STATUSES,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_cancel,
    can_refund,
    is_forward_transition,
)

logger = logging.getLogger(__name__)

REFUND_REASON_MIN_LENGTH = 10
REFUND_REASON_MAX_LENGTH = 500

# Fields an administrator may overwrite directly. Items and financials are
# frozen at checkout.
ADMIN_MUTABLE_FIELDS = frozenset({
    'status',
    'payment_status',
    'payment_method',
    'tracking_number',
    'notes',
    'customer_name',
    'customer_email',
    'customer_phone',
    'shipping_address',
    'shipping_city',
    'shipping_state',
    'shipping_zip',
    'shipping_country',
})


@dataclass(frozen=True)
class CustomerInfo:
    """Contact and shipping details captured at checkout"""
    name: str
    email: str
    address: str
    city: str
    state: str
    zip: str
    phone: str = ''
    country: str = 'USA'

    @classmethod
    def coerce(cls, value) -> 'CustomerInfo':
        if isinstance(value, CustomerInfo):
            return value
        try:
            return cls(**value)
        except TypeError as e:
            raise ValidationException(f"Invalid customer information: {e}", field="customer") from e


@dataclass(frozen=True)
class CancellationResult:
    order: Order
    inventory_restored: bool


@dataclass(frozen=True)
class RefundResult:
    order: Order
    refund_amount: Decimal
    currency: str
    inventory_restored: bool


class OrderLifecycle:
    """
    Owns every order status and payment status transition.
    """

    def __init__(
        self,
        calculator: Optional[PriceCalculator] = None,
        ledger: Optional[InventoryLedger] = None,
        notifier: Optional[OrderNotifier] = None
    ):
        self.calculator = calculator or PriceCalculator()
        self.ledger = ledger or inventory_ledger
        self.notifier = notifier or order_notifier

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_order(self, order_id) -> Order:
        """Fetch a non-deleted order or raise OrderNotFoundException."""
        order = Order.objects.visible().filter(pk=self._order_key(order_id)).first()
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_order(
        self,
        items: Iterable,
        customer,
        payment_status: str = PaymentStatus.UNPAID.value,
        payment_method: Optional[str] = None,
        client_total: Any = None,
        notes: Optional[str] = None
    ) -> Order:
        """
        Place an order from {product_id, quantity} lines.

        Raises ValidationException, ProductNotFoundException,
        InvalidProductPriceException, InsufficientStockException or
        OrderAlreadyExistsException; in every case nothing is persisted
        and no stock moves.
        """
        customer = CustomerInfo.coerce(customer)
        initial_payment = self._initial_payment_status(payment_status)
        method = self._payment_method(payment_method)
        order_number = generate_order_number()

        try:
            with transaction.atomic():
                calculation = self.calculator.calculate(items, lock=True)

                if Order.objects.filter(order_number=order_number).exists():
                    raise OrderAlreadyExistsException(order_number)

                order = Order.objects.create(
                    order_number=order_number,
                    customer_name=customer.name,
                    customer_email=customer.email,
                    customer_phone=customer.phone or '',
                    shipping_address=customer.address,
                    shipping_city=customer.city,
                    shipping_state=customer.state,
                    shipping_zip=customer.zip,
                    shipping_country=customer.country or 'USA',
                    items=[item.to_dict() for item in calculation.items],
                    subtotal=calculation.subtotal,
                    tax=calculation.tax,
                    shipping_cost=calculation.shipping_cost,
                    total=calculation.total,
                    currency=get_storefront_setting('CURRENCY'),
                    status=OrderStatus.PENDING.value,
                    payment_status=initial_payment,
                    payment_method=method,
                    notes=notes or None,
                )

                self.ledger.decrement_items(calculation.items)
        except IntegrityError as e:
            logger.warning(f"Order number collision on insert: {order_number}")
            raise OrderAlreadyExistsException(order_number) from e

        if client_total is not None and not prices_match(client_total, calculation):
            logger.warning(
                f"Price discrepancy on order {order_number}: client total {client_total}, "
                f"server {summarize(calculation)}"
            )

        logger.info(f"Order created: {order.order_number} total={order.total} {order.currency}")

        self.notifier.send_order_confirmation(order)
        return order

    # =========================================================================
    # CANCEL
    # =========================================================================

    def cancel_order(self, order_id) -> CancellationResult:
        """
        Cancel a pending or processing order. Stock is restored only when
        the order was paid; payment status is left as it is.
        """
        with transaction.atomic():
            order = self._lock_order(order_id)

            if not can_cancel(order.status):
                raise OrderCannotBeCancelledException(order.status)

            inventory_restored = order.payment_status == PaymentStatus.PAID.value
            if inventory_restored:
                self.ledger.restore_items(order.line_items)

            order.status = OrderStatus.CANCELLED.value
            order.save(update_fields=['status', 'updated_at'])

        logger.info(f"Order cancelled: {order.order_number} (inventory restored: {inventory_restored})")
        return CancellationResult(order=order, inventory_restored=inventory_restored)

    # =========================================================================
    # REFUND
    # =========================================================================

    def refund_order(
        self,
        order_id,
        reason: str,
        refund_amount: Any = None,
        restore_inventory: bool = True
    ) -> RefundResult:
        """
        Refund a paid order and record the reason in its notes.

        Only the order record changes; moving funds back through a payment
        provider is not part of this operation.
        """
        reason = self._validate_reason(reason)

        with transaction.atomic():
            order = self._lock_order(order_id)

            if order.payment_status == PaymentStatus.REFUNDED.value:
                raise OrderAlreadyRefundedException()
            if not can_refund(order.status):
                raise OrderCannotBeRefundedException(order.status)
            if order.payment_status != PaymentStatus.PAID.value:
                raise OrderNotPaidException(order.payment_status)

            amount = self._refund_amount(refund_amount, order.total)

            if restore_inventory:
                self.ledger.restore_items(order.line_items)

            entry = f"[REFUND] {reason} (Amount: {amount} {order.currency})"
            order.notes = f"{order.notes}\n\n{entry}" if order.notes else entry
            order.status = OrderStatus.REFUNDED.value
            order.payment_status = PaymentStatus.REFUNDED.value
            order.save(update_fields=['status', 'payment_status', 'notes', 'updated_at'])

        logger.info(
            f"Order refunded: {order.order_number} amount={amount} {order.currency} "
            f"reason='{truncate_for_display(reason, 60)}'"
        )
        return RefundResult(
            order=order,
            refund_amount=amount,
            currency=order.currency,
            inventory_restored=bool(restore_inventory),
        )

    # =========================================================================
    # ADMIN
    # =========================================================================

    def admin_update(self, order_id, changes: Dict[str, Any]) -> Order:
        """
        Apply an administrator's edits. No transition guard: any status or
        payment status may be set directly.
        """
        unknown = set(changes) - ADMIN_MUTABLE_FIELDS
        if unknown:
            raise ValidationException(
                "These fields cannot be changed",
                details={"fields": sorted(unknown)}
            )

        with transaction.atomic():
            order = self._lock_order(order_id)
            previous_status = order.status
            previous_payment = order.payment_status

            for name, value in changes.items():
                if name == 'status':
                    value = self._choice(OrderStatus, value, 'status')
                elif name == 'payment_status':
                    value = self._choice(PaymentStatus, value, 'paymentStatus')
                elif name == 'payment_method' and value:
                    value = self._choice(PaymentMethod, value, 'paymentMethod')
                setattr(order, name, value)

            if order.status != previous_status:
                if not is_forward_transition(previous_status, order.status):
                    logger.warning(
                        f"Admin override on {order.order_number}: status {previous_status} -> {order.status}"
                    )
                now = timezone.now()
                if order.status == OrderStatus.SHIPPED.value and order.shipped_at is None:
                    order.shipped_at = now
                if order.status == OrderStatus.DELIVERED.value and order.delivered_at is None:
                    order.delivered_at = now

            if order.payment_status != previous_payment:
                logger.info(
                    f"Admin payment status change on {order.order_number}: "
                    f"{previous_payment} -> {order.payment_status}"
                )

            order.save()

        return order

    def soft_delete(self, order_id) -> Order:
        with transaction.atomic():
            order = self._lock_order(order_id)
            order.is_deleted = True
            order.save(update_fields=['is_deleted', 'updated_at'])
        logger.info(f"Order soft-deleted: {order.order_number}")
        return order

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _choice(self, enum, value, field: str) -> str:
        try:
            return enum(value).value
        except ValueError:
            raise ValidationException(f"Invalid value '{value}'", field=field) from None

    def _order_key(self, order_id) -> str:
        try:
            return str(uuid.UUID(str(order_id)))
        except ValueError:
            raise OrderNotFoundException(order_id) from None

    def _lock_order(self, order_id) -> Order:
        order = Order.objects.visible().select_for_update().filter(pk=self._order_key(order_id)).first()
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    def _initial_payment_status(self, payment_status) -> str:
        value = payment_status or PaymentStatus.UNPAID.value
        try:
            status = PaymentStatus(value)
        except ValueError:
            status = None
        if status not in INITIAL_PAYMENT_STATUSES:
            raise ValidationException(
                f"Orders cannot be created with payment status '{value}'",
                field="paymentStatus"
            )
        return status.value

    def _payment_method(self, payment_method) -> Optional[str]:
        if not payment_method:
            return None
        return self._choice(PaymentMethod, payment_method, 'paymentMethod')

    def _validate_reason(self, reason) -> str:
        if not isinstance(reason, str) or len(reason) < REFUND_REASON_MIN_LENGTH:
            raise ValidationException(
                f"Refund reason must be at least {REFUND_REASON_MIN_LENGTH} characters",
                field="reason"
            )
        if len(reason) > REFUND_REASON_MAX_LENGTH:
            raise ValidationException(
                f"Refund reason must be at most {REFUND_REASON_MAX_LENGTH} characters",
                field="reason"
            )
        return reason

    def _refund_amount(self, refund_amount, order_total) -> Decimal:
        if refund_amount is None:
            return round_money(order_total)

        amount = to_decimal(refund_amount)
        if amount is None or amount <= 0:
            raise InvalidRefundAmountException(
                "Refund amount must be greater than zero",
                requested_amount=refund_amount,
                order_total=order_total
            )
        if amount > order_total:
            raise InvalidRefundAmountException(
                "Refund amount cannot exceed order total",
                requested_amount=amount,
                order_total=order_total
            )
        return round_money(amount)
