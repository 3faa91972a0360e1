"""
Abstract base models and shared entities for Storefront applications
"""
import uuid
from django.conf import settings
from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all entities.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return str(self.id)


class TimestampedModel(models.Model):
    """
    Abstract model with just timestamps (for models that use custom PKs)
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UserRole(TimestampedModel):
    """
    Role assignment for an authenticated user.
    Kept apart from the identity provider; see apps.core.roles.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('customer', 'Customer'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='storefront_role'
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='customer')

    class Meta:
        db_table = 'core_user_roles'
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'

    def __str__(self):
        return f"{self.user_id} ({self.role})"
