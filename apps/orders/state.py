"""
Order State Machine

Order status and payment status are tracked independently:

    pending → processing → shipped → delivered
       ↓           ↓
       └─────→ cancelled

    paid ──────→ refunded   (also forces order status to refunded)

delivered, cancelled and refunded are terminal.
"""
from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    """Fulfilment states of an order"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def choices(cls):
        return [(member.value, member.value.title()) for member in cls]


class PaymentStatus(str, Enum):
    """Payment states of an order"""
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"

    @classmethod
    def choices(cls):
        return [(member.value, member.value.title()) for member in cls]


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    COD = "cod"
    BANK_TRANSFER = "bank_transfer"

    @classmethod
    def choices(cls):
        return [(member.value, member.value.replace('_', ' ').title()) for member in cls]


# Payment states a customer may start an order in
INITIAL_PAYMENT_STATUSES: FrozenSet[PaymentStatus] = frozenset({
    PaymentStatus.UNPAID,
    PaymentStatus.PAID,
})

FORWARD_TRANSITIONS: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}

CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
})

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})


def can_cancel(status: str) -> bool:
    return OrderStatus(status) in CANCELLABLE_STATUSES


def is_terminal(status: str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def can_refund(status: str) -> bool:
    """
    Open orders and delivered orders may be refunded. Cancelled and
    refunded orders are closed; their stock has already been settled.
    """
    return not is_terminal(status) or OrderStatus(status) == OrderStatus.DELIVERED


def is_forward_transition(current: str, target: str) -> bool:
    """
    True when target is the next fulfilment step after current,
    or one of the side branches the dedicated actions allow.
    """
    current_status = OrderStatus(current)
    target_status = OrderStatus(target)

    if FORWARD_TRANSITIONS.get(current_status) == target_status:
        return True
    if target_status == OrderStatus.CANCELLED:
        return current_status in CANCELLABLE_STATUSES
    return False
