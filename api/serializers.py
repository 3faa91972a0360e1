"""
API Serializers for Request/Response handling

Wire format uses camelCase keys; `source=` maps them onto model attributes,
so validated_data is keyed by the snake_case names the lifecycle expects.
"""
from decimal import Decimal

from rest_framework import serializers

from apps.orders.state import OrderStatus, PaymentMethod, PaymentStatus

ORDER_STATUS_CHOICES = [status.value for status in OrderStatus]
PAYMENT_STATUS_CHOICES = [status.value for status in PaymentStatus]
PAYMENT_METHOD_CHOICES = [method.value for method in PaymentMethod]


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=10, decimal_places=2, **kwargs)


# =============================================================================
# ORDERS - REQUESTS
# =============================================================================

class OrderItemInputSerializer(serializers.Serializer):
    """
    One cart line. Client price fields (price, total, productName...) are ignored.
    """
    productId = serializers.UUIDField(source='product_id')
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """
    Request serializer for checkout.
    """
    customerName = serializers.CharField(source='name', max_length=255)
    customerEmail = serializers.EmailField(source='email')
    customerPhone = serializers.CharField(source='phone', max_length=30, required=False, allow_blank=True, default='')
    shippingAddress = serializers.CharField(source='address')
    shippingCity = serializers.CharField(source='city', max_length=100)
    shippingState = serializers.CharField(source='state', max_length=100)
    shippingZip = serializers.CharField(source='zip', max_length=20)
    shippingCountry = serializers.CharField(source='country', max_length=100, required=False, default='USA')
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    total = serializers.DecimalField(
        source='client_total',
        max_digits=20,
        decimal_places=6,
        required=False,
        allow_null=True,
        help_text="Client-computed total; compared with the server total for logging only"
    )
    paymentStatus = serializers.ChoiceField(
        source='payment_status',
        choices=[PaymentStatus.UNPAID.value, PaymentStatus.PAID.value],
        required=False,
        default=PaymentStatus.UNPAID.value
    )
    paymentMethod = serializers.ChoiceField(
        source='payment_method',
        choices=PAYMENT_METHOD_CHOICES,
        required=False,
        allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

    CUSTOMER_FIELDS = ('name', 'email', 'phone', 'address', 'city', 'state', 'zip', 'country')

    def to_lifecycle_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "items": [
                {"product_id": item['product_id'], "quantity": item['quantity']}
                for item in data['items']
            ],
            "customer": {name: data[name] for name in self.CUSTOMER_FIELDS if name in data},
            "payment_status": data.get('payment_status'),
            "payment_method": data.get('payment_method'),
            "client_total": data.get('client_total'),
            "notes": data.get('notes'),
        }


class OrderUpdateSerializer(serializers.Serializer):
    """
    Admin patch. Status fields are not checked against the state machine.
    """
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES, required=False)
    paymentStatus = serializers.ChoiceField(source='payment_status', choices=PAYMENT_STATUS_CHOICES, required=False)
    paymentMethod = serializers.ChoiceField(source='payment_method', choices=PAYMENT_METHOD_CHOICES, required=False, allow_null=True)
    trackingNumber = serializers.CharField(source='tracking_number', max_length=100, required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    customerName = serializers.CharField(source='customer_name', max_length=255, required=False)
    customerEmail = serializers.EmailField(source='customer_email', required=False)
    customerPhone = serializers.CharField(source='customer_phone', max_length=30, required=False, allow_blank=True)
    shippingAddress = serializers.CharField(source='shipping_address', required=False)
    shippingCity = serializers.CharField(source='shipping_city', max_length=100, required=False)
    shippingState = serializers.CharField(source='shipping_state', max_length=100, required=False)
    shippingZip = serializers.CharField(source='shipping_zip', max_length=20, required=False)
    shippingCountry = serializers.CharField(source='shipping_country', max_length=100, required=False)

    def validate(self, attrs):
        unknown = set(self.initial_data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError(
                {name: ["This field cannot be changed."] for name in sorted(unknown)}
            )
        if not attrs:
            raise serializers.ValidationError("No changes supplied.")
        return attrs


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(min_length=10, max_length=500)
    refundAmount = serializers.DecimalField(
        source='refund_amount',
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False,
        allow_null=True,
        help_text="Defaults to the full order total"
    )
    restoreInventory = serializers.BooleanField(source='restore_inventory', required=False, default=True)


# =============================================================================
# ORDERS - RESPONSES
# =============================================================================

class OrderLineItemSerializer(serializers.Serializer):
    productId = serializers.CharField(source='product_id')
    productName = serializers.CharField(source='product_name')
    productImage = serializers.CharField(source='product_image', allow_blank=True)
    quantity = serializers.IntegerField()
    price = money_field()
    total = money_field()


class OrderSerializer(serializers.Serializer):
    """
    Response serializer for a persisted order.
    """
    id = serializers.UUIDField(read_only=True)
    orderNumber = serializers.CharField(source='order_number', read_only=True)
    customerName = serializers.CharField(source='customer_name', read_only=True)
    customerEmail = serializers.EmailField(source='customer_email', read_only=True)
    customerPhone = serializers.CharField(source='customer_phone', read_only=True)
    shippingAddress = serializers.CharField(source='shipping_address', read_only=True)
    shippingCity = serializers.CharField(source='shipping_city', read_only=True)
    shippingState = serializers.CharField(source='shipping_state', read_only=True)
    shippingZip = serializers.CharField(source='shipping_zip', read_only=True)
    shippingCountry = serializers.CharField(source='shipping_country', read_only=True)
    items = OrderLineItemSerializer(many=True, read_only=True)
    subtotal = money_field(read_only=True)
    tax = money_field(read_only=True)
    shippingCost = money_field(source='shipping_cost', read_only=True)
    total = money_field(read_only=True)
    currency = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True, allow_null=True)
    notes = serializers.CharField(read_only=True, allow_null=True)
    trackingNumber = serializers.CharField(source='tracking_number', read_only=True, allow_null=True)
    shippedAt = serializers.DateTimeField(source='shipped_at', read_only=True, allow_null=True)
    deliveredAt = serializers.DateTimeField(source='delivered_at', read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)


class OrderListResponseSerializer(serializers.Serializer):
    orders = OrderSerializer(many=True)
    count = serializers.IntegerField()


class CancelResponseSerializer(serializers.Serializer):
    order = OrderSerializer()
    inventoryRestored = serializers.BooleanField()
    message = serializers.CharField()


class RefundResponseSerializer(serializers.Serializer):
    order = OrderSerializer()
    refundAmount = money_field()
    currency = serializers.CharField()
    inventoryRestored = serializers.BooleanField()
    message = serializers.CharField()
    note = serializers.CharField()


# =============================================================================
# CATALOG
# =============================================================================

class ProductSerializer(serializers.Serializer):
    """
    Public, read-only product representation.
    """
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    company = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True, allow_null=True)
    imageSrc = serializers.CharField(source='image_src', read_only=True)
    priceRegular = money_field(source='price_regular', read_only=True)
    priceSale = money_field(source='price_sale', read_only=True, allow_null=True)
    effectivePrice = money_field(source='effective_price', read_only=True)
    priceCurrency = serializers.CharField(source='price_currency', read_only=True)
    stockQuantity = serializers.IntegerField(source='stock_quantity', read_only=True)
    trackInventory = serializers.BooleanField(source='track_inventory', read_only=True)
    inStock = serializers.SerializerMethodField()

    def get_inStock(self, obj) -> bool:
        return not obj.track_inventory or obj.stock_quantity > 0


# =============================================================================
# SYSTEM
# =============================================================================

class HealthCheckSerializer(serializers.Serializer):
    """
    Response serializer for health check.
    """
    status = serializers.CharField()
    version = serializers.CharField()
    database = serializers.CharField()
    cache = serializers.DictField()
    timestamp = serializers.DateTimeField()
