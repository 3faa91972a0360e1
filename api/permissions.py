"""
API permissions built on the role lookup
"""
from rest_framework.permissions import BasePermission

from apps.core.roles import role_lookup


class IsAdminRole(BasePermission):
    """
    Allows access only to users whose storefront role is admin.
    """
    message = "Administrator access is required"

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return role_lookup.is_admin(user.pk)


class IsOrderOwnerOrAdmin(BasePermission):
    """
    Object-level access to an order: its customer (matched by email) or an admin.
    """
    message = "You don't have permission to access this order"

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        email = (getattr(user, 'email', '') or '').lower()
        if email and email == (obj.customer_email or '').lower():
            return True
        return role_lookup.is_admin(user.pk)
