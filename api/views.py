"""
API Views for the Storefront Orders service

This module provides REST API endpoints for:
- Orders: checkout, listing, detail, admin edits, cancellation and refunds
- Products: cached public catalog reads
- Health Check: database and cache status

Domain errors are raised as StorefrontException subclasses and rendered by
api.exceptions.custom_exception_handler.
"""
import logging

from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.catalog.models import Product
from apps.catalog.services import product_catalog
from apps.core.cache import cache_accelerator
from apps.core.exceptions import ValidationException
from apps.orders.lifecycle import OrderLifecycle
from apps.orders.models import Order
from apps.orders.state import OrderStatus

from .permissions import IsAdminRole, IsOrderOwnerOrAdmin
from .serializers import (
    CancelResponseSerializer,
    HealthCheckSerializer,
    OrderCreateSerializer,
    OrderListResponseSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
    ProductSerializer,
    RefundRequestSerializer,
    RefundResponseSerializer,
)
from .throttling import FailOpenScopedRateThrottle

logger = logging.getLogger(__name__)

PRODUCTS_NAMESPACE = 'products'
PRODUCT_DETAIL_NAMESPACE = 'product_detail'


def _order_list_payload(queryset):
    orders = list(queryset)
    return {
        "orders": OrderSerializer(orders, many=True).data,
        "count": len(orders),
    }


# =============================================================================
# ORDERS
# =============================================================================

class OrderListCreateView(APIView):
    """
    Checkout endpoint and admin order listing.

    POST is public: prices, tax and totals sent by the client are ignored
    and recomputed from the catalog.
    """
    throttle_classes = [FailOpenScopedRateThrottle]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return [IsAdminRole()]

    def get_throttles(self):
        self.throttle_scope = 'strict' if self.request.method == 'POST' else 'moderate'
        return super().get_throttles()

    @extend_schema(
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        description="Create an order with server-side pricing and stock reservation",
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "customerName": "Jane Doe",
                    "customerEmail": "jane@example.com",
                    "shippingAddress": "1 Main St",
                    "shippingCity": "Springfield",
                    "shippingState": "IL",
                    "shippingZip": "62701",
                    "items": [{"productId": "7f1c1e0a-8e8b-4a57-9d7e-1f2b3c4d5e6f", "quantity": 2}],
                    "paymentStatus": "unpaid"
                },
                request_only=True
            ),
        ]
    )
    def post(self, request):
        """
        Place an order.
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lifecycle = OrderLifecycle()
        order = lifecycle.create_order(**serializer.to_lifecycle_kwargs())

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[
            OpenApiParameter(name='status', description="Filter by order status", required=False, type=str),
        ],
        responses={200: OrderListResponseSerializer},
        description="List all non-deleted orders (admin only)"
    )
    def get(self, request):
        queryset = Order.objects.visible()

        status_filter = request.query_params.get('status')
        if status_filter:
            if status_filter not in {s.value for s in OrderStatus}:
                raise ValidationException(f"Unknown order status '{status_filter}'", field="status")
            queryset = queryset.filter(status=status_filter)

        return Response(_order_list_payload(queryset.order_by('-created_at')))


class MyOrdersView(APIView):
    """
    Order history of the authenticated customer, matched by email.
    """
    permission_classes = [IsAuthenticated]
    throttle_classes = [FailOpenScopedRateThrottle]
    throttle_scope = 'moderate'

    @extend_schema(
        responses={200: OrderListResponseSerializer},
        description="List the current user's orders"
    )
    def get(self, request):
        email = request.user.email
        if not email:
            return Response(_order_list_payload(Order.objects.none()))

        queryset = Order.objects.for_customer(email).order_by('-created_at')
        return Response(_order_list_payload(queryset))


class OrderDetailView(APIView):
    """
    Single order: owner or admin may read; only admins may edit or delete.
    """
    throttle_classes = [FailOpenScopedRateThrottle]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [IsOrderOwnerOrAdmin()]
        return [IsAdminRole()]

    def get_throttles(self):
        self.throttle_scope = 'moderate' if self.request.method == 'GET' else 'strict'
        return super().get_throttles()

    def get_object(self, lifecycle, order_id):
        order = lifecycle.get_order(order_id)
        self.check_object_permissions(self.request, order)
        return order

    @extend_schema(responses={200: OrderSerializer}, description="Get an order")
    def get(self, request, order_id):
        order = self.get_object(OrderLifecycle(), order_id)
        return Response(OrderSerializer(order).data)

    @extend_schema(
        request=OrderUpdateSerializer,
        responses={200: OrderSerializer},
        description="Admin edit; status and payment status may be set to any value"
    )
    def put(self, request, order_id):
        return self._update(request, order_id)

    @extend_schema(
        request=OrderUpdateSerializer,
        responses={200: OrderSerializer},
        description="Admin edit; status and payment status may be set to any value"
    )
    def patch(self, request, order_id):
        return self._update(request, order_id)

    def _update(self, request, order_id):
        serializer = OrderUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        lifecycle = OrderLifecycle()
        order = lifecycle.admin_update(order_id, dict(serializer.validated_data))

        logger.info(f"Order {order.order_number} updated by user {request.user.pk}")
        return Response(OrderSerializer(order).data)

    @extend_schema(responses={204: None}, description="Soft delete an order (admin only)")
    def delete(self, request, order_id):
        lifecycle = OrderLifecycle()
        lifecycle.soft_delete(order_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderCancelView(APIView):
    """
    Cancel a pending or processing order.
    """
    permission_classes = [IsOrderOwnerOrAdmin]
    throttle_classes = [FailOpenScopedRateThrottle]
    throttle_scope = 'strict'

    @extend_schema(
        request=None,
        responses={200: CancelResponseSerializer},
        description="Cancel an order; stock is restored when it was paid"
    )
    def post(self, request, order_id):
        lifecycle = OrderLifecycle()
        order = lifecycle.get_order(order_id)
        self.check_object_permissions(request, order)

        result = lifecycle.cancel_order(order.pk)

        message = "Order cancelled successfully"
        if result.inventory_restored:
            message += ". Inventory has been restored"

        return Response({
            "order": OrderSerializer(result.order).data,
            "inventoryRestored": result.inventory_restored,
            "message": message,
        })


class OrderRefundView(APIView):
    """
    Refund a paid order (admin only). Records the reason in the order notes.
    """
    permission_classes = [IsAdminRole]
    throttle_classes = [FailOpenScopedRateThrottle]
    throttle_scope = 'strict'

    @extend_schema(
        request=RefundRequestSerializer,
        responses={200: RefundResponseSerializer},
        description="Refund an order",
        examples=[
            OpenApiExample(
                "Partial refund",
                value={"reason": "Item arrived damaged", "refundAmount": "50.00", "restoreInventory": False},
                request_only=True
            ),
        ]
    )
    def post(self, request, order_id):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lifecycle = OrderLifecycle()
        result = lifecycle.refund_order(
            order_id,
            reason=data['reason'],
            refund_amount=data.get('refund_amount'),
            restore_inventory=data.get('restore_inventory', True),
        )

        message = f"Refund of {result.refund_amount} {result.currency} recorded"
        if result.inventory_restored:
            message += ". Inventory has been restored"

        return Response({
            "order": OrderSerializer(result.order).data,
            "refundAmount": str(result.refund_amount),
            "currency": result.currency,
            "inventoryRestored": result.inventory_restored,
            "message": message,
            "note": "Payment provider refunds must be issued separately",
        })


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductListView(APIView):
    """
    Public catalog listing, served through the read cache.
    """
    permission_classes = [AllowAny]
    throttle_classes = [FailOpenScopedRateThrottle]
    throttle_scope = 'relaxed'

    @extend_schema(
        parameters=[
            OpenApiParameter(name='category', description="Filter by category", required=False, type=str),
        ],
        responses={200: ProductSerializer(many=True)},
        description="List products"
    )
    def get(self, request):
        category = request.query_params.get('category') or ''

        def load():
            queryset = Product.objects.all()
            if category:
                queryset = queryset.filter(category=category)
            return [dict(item) for item in ProductSerializer(queryset, many=True).data]

        products = cache_accelerator.get_or_set(PRODUCTS_NAMESPACE, f"list:{category or 'all'}", load)
        return Response(products)


class ProductDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [FailOpenScopedRateThrottle]
    throttle_scope = 'relaxed'

    @extend_schema(responses={200: ProductSerializer}, description="Get a product")
    def get(self, request, product_id):
        def load():
            product = product_catalog.get(product_id)
            if product is None:
                return None
            return dict(ProductSerializer(product).data)

        product = cache_accelerator.get_or_set(PRODUCT_DETAIL_NAMESPACE, str(product_id), load)
        if product is None:
            raise NotFound("Product not found")
        return Response(product)


# =============================================================================
# SYSTEM
# =============================================================================

class HealthCheckView(APIView):
    """
    System health check endpoint.

    Returns the status of the API, database connectivity
    and cache statistics.
    """
    permission_classes = [AllowAny]
    throttle_classes = []

    @extend_schema(
        responses={200: HealthCheckSerializer},
        description="Check system health status"
    )
    def get(self, request):
        """
        Check system health.
        """
        # Check database connectivity
        db_status = "healthy"
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except Exception as e:
            db_status = f"unhealthy: {str(e)}"

        response_data = {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": "1.0.0",
            "database": db_status,
            "cache": cache_accelerator.get_stats(),
            "timestamp": timezone.now().isoformat()
        }

        return Response(response_data, status=status.HTTP_200_OK)
