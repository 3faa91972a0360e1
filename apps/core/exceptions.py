"""
Custom exceptions for the Storefront order service
"""
from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes returned to API clients"""
    # Authentication & authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_ADMIN_REQUIRED = "AUTH_ADMIN_REQUIRED"
    AUTH_INSUFFICIENT_PERMISSIONS = "AUTH_INSUFFICIENT_PERMISSIONS"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    MALFORMED_JSON = "MALFORMED_JSON"
    BAD_REQUEST = "BAD_REQUEST"

    # Not found
    NOT_FOUND = "NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"

    # Business rules
    INVALID_PRODUCT_PRICE = "INVALID_PRODUCT_PRICE"
    PRODUCT_INSUFFICIENT_STOCK = "PRODUCT_INSUFFICIENT_STOCK"
    ORDER_ALREADY_EXISTS = "ORDER_ALREADY_EXISTS"
    ORDER_CANNOT_BE_CANCELLED = "ORDER_CANNOT_BE_CANCELLED"
    ORDER_ALREADY_REFUNDED = "ORDER_ALREADY_REFUNDED"
    ORDER_CANNOT_BE_REFUNDED = "ORDER_CANNOT_BE_REFUNDED"
    ORDER_NOT_PAID = "ORDER_NOT_PAID"
    INVALID_REFUND_AMOUNT = "INVALID_REFUND_AMOUNT"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server
    SERVER_ERROR = "SERVER_ERROR"


class StorefrontException(Exception):
    """Base exception for all Storefront errors"""
    status_code = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        details: dict = None,
        status_code: int = None
    ):
        self.message = message
        self.code = code
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationException(StorefrontException):
    """Exception raised for validation errors"""
    status_code = 400

    def __init__(self, message: str, field: str = None, details: dict = None):
        self.field = field
        if field and details is None:
            details = {"field": field}
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_FAILED,
            details=details
        )


class ProductNotFoundException(StorefrontException):
    """A cart line references a product that does not exist"""
    status_code = 400

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(
            message="Product not found",
            code=ErrorCode.PRODUCT_NOT_FOUND,
            details={"productId": str(product_id)}
        )


class InvalidProductPriceException(StorefrontException):
    """A product's effective price is missing or negative"""
    status_code = 400

    def __init__(self, product_id, product_name: str):
        self.product_id = product_id
        super().__init__(
            message="Invalid product price",
            code=ErrorCode.INVALID_PRODUCT_PRICE,
            details={"productId": str(product_id), "productName": product_name}
        )


class InsufficientStockException(StorefrontException):
    """Requested quantity exceeds the available stock of a tracked product"""
    status_code = 400

    def __init__(self, product_name: str, requested: int, available: int):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            message="Insufficient stock",
            code=ErrorCode.PRODUCT_INSUFFICIENT_STOCK,
            details={
                "productName": product_name,
                "requested": requested,
                "available": available,
            }
        )


class OrderNotFoundException(StorefrontException):
    status_code = 404

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(
            message="Order not found",
            code=ErrorCode.ORDER_NOT_FOUND,
            details={"orderId": str(order_id)}
        )


class OrderAlreadyExistsException(StorefrontException):
    """Raised when a generated order number collides with a stored one"""
    status_code = 409

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(
            message="An order with this number already exists",
            code=ErrorCode.ORDER_ALREADY_EXISTS,
            details={"orderNumber": order_number}
        )


class OrderCannotBeCancelledException(StorefrontException):
    status_code = 422

    def __init__(self, status: str):
        self.status = status
        super().__init__(
            message=f"Order cannot be cancelled. Current status: {status}",
            code=ErrorCode.ORDER_CANNOT_BE_CANCELLED,
            details={
                "status": status,
                "reason": "Only pending or processing orders can be cancelled",
            }
        )


class OrderAlreadyRefundedException(StorefrontException):
    status_code = 409

    def __init__(self):
        super().__init__(
            message="Order has already been refunded",
            code=ErrorCode.ORDER_ALREADY_REFUNDED
        )


class OrderCannotBeRefundedException(StorefrontException):
    status_code = 422

    def __init__(self, status: str):
        self.status = status
        super().__init__(
            message=f"Order cannot be refunded. Current status: {status}",
            code=ErrorCode.ORDER_CANNOT_BE_REFUNDED,
            details={
                "status": status,
                "reason": "Cancelled orders cannot be refunded",
            }
        )


class OrderNotPaidException(StorefrontException):
    status_code = 422

    def __init__(self, payment_status: str):
        self.payment_status = payment_status
        super().__init__(
            message=f"Order cannot be refunded. Payment status: {payment_status}",
            code=ErrorCode.ORDER_NOT_PAID,
            details={
                "paymentStatus": payment_status,
                "reason": "Only paid orders can be refunded",
            }
        )


class InvalidRefundAmountException(StorefrontException):
    status_code = 400

    def __init__(self, message: str, requested_amount, order_total):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_REFUND_AMOUNT,
            details={
                "requestedAmount": str(requested_amount),
                "orderTotal": str(order_total),
            }
        )
