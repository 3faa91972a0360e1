"""
Role lookup for authenticated users.

Admin-only operations depend on `RoleLookup.is_admin()` alone, never on
how the identity provider stores its metadata.
"""
import logging
from enum import Enum
from typing import Optional

from django.contrib.auth import get_user_model

from .models import UserRole

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Capabilities a storefront user can hold"""
    ADMIN = "admin"
    CUSTOMER = "customer"


class RoleLookup:
    """
    Resolves the storefront role of a user.

    Resolution order:
    1. Django superusers and staff are always admins
    2. An explicit UserRole row
    3. Everyone else is a customer
    """

    def role_for(self, user) -> Role:
        if user is None or not getattr(user, 'is_authenticated', False):
            return Role.CUSTOMER

        if user.is_superuser or user.is_staff:
            return Role.ADMIN

        assignment = UserRole.objects.filter(user_id=user.pk).values_list('role', flat=True).first()
        if assignment is None:
            return Role.CUSTOMER

        try:
            return Role(assignment)
        except ValueError:
            logger.warning(f"Unknown role '{assignment}' for user {user.pk}, treating as customer")
            return Role.CUSTOMER

    def is_admin(self, user_id) -> bool:
        user = self._get_user(user_id)
        return self.role_for(user) == Role.ADMIN

    def assign(self, user, role: Role) -> UserRole:
        assignment, _ = UserRole.objects.update_or_create(
            user=user,
            defaults={'role': Role(role).value}
        )
        logger.info(f"Assigned role {assignment.role} to user {user.pk}")
        return assignment

    def _get_user(self, user_id) -> Optional[object]:
        if user_id is None:
            return None
        return get_user_model().objects.filter(pk=user_id).first()


role_lookup = RoleLookup()
