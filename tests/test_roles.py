"""Tests for role lookup and API permissions."""

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from apps.core.models import UserRole
from apps.core.roles import Role, role_lookup

pytestmark = pytest.mark.django_db

User = get_user_model()


class TestRoleLookup:
    def test_default_is_customer(self, other_user):
        assert role_lookup.role_for(other_user) == Role.CUSTOMER
        assert role_lookup.is_admin(other_user.pk) is False

    def test_assigned_admin(self, admin_user):
        assert role_lookup.role_for(admin_user) == Role.ADMIN
        assert role_lookup.is_admin(admin_user.pk) is True

    @pytest.mark.parametrize("flags", [{"is_staff": True}, {"is_superuser": True}])
    def test_staff_and_superusers_are_admins(self, flags):
        user = User.objects.create_user(username="root", password="secret", **flags)
        assert role_lookup.is_admin(user.pk) is True

    def test_unknown_user_is_not_admin(self):
        assert role_lookup.is_admin(987654) is False
        assert role_lookup.is_admin(None) is False

    def test_anonymous_is_customer(self):
        assert role_lookup.role_for(AnonymousUser()) == Role.CUSTOMER

    def test_assign_replaces_role(self, admin_user):
        role_lookup.assign(admin_user, Role.CUSTOMER)

        assert UserRole.objects.get(user=admin_user).role == "customer"
        assert role_lookup.is_admin(admin_user.pk) is False

    def test_unknown_stored_role_falls_back_to_customer(self, other_user):
        UserRole.objects.create(user=other_user, role="superhero")
        assert role_lookup.role_for(other_user) == Role.CUSTOMER
