"""
API URL Configuration
"""
from django.urls import path
from .views import (
    HealthCheckView,
    MyOrdersView,
    OrderCancelView,
    OrderDetailView,
    OrderListCreateView,
    OrderRefundView,
    ProductDetailView,
    ProductListView,
)

app_name = 'api'

urlpatterns = [
    # Orders
    path('orders/', OrderListCreateView.as_view(), name='order-list'),
    path('orders/my-orders/', MyOrdersView.as_view(), name='my-orders'),
    path('orders/<uuid:order_id>/', OrderDetailView.as_view(), name='order-detail'),
    path('orders/<uuid:order_id>/cancel/', OrderCancelView.as_view(), name='order-cancel'),
    path('orders/<uuid:order_id>/refund/', OrderRefundView.as_view(), name='order-refund'),

    # Catalog
    path('products/', ProductListView.as_view(), name='product-list'),
    path('products/<uuid:product_id>/', ProductDetailView.as_view(), name='product-detail'),

    # Health check
    path('health/', HealthCheckView.as_view(), name='health'),
]
