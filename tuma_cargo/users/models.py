from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any
from typing import ClassVar

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .managers import UserManager


class User(AbstractUser):
    """
    Default custom user model for Tuma-Africa Link Cargo.
    Customers and staff share the table; ``role`` separates them.
    """

    class Role(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")
        SUPER_ADMIN = "super_admin", _("Super Admin")

    class Currency(models.TextChoices):
        RWF = "RWF", "RWF"
        YUAN = "Yuan", "Yuan"
        USD = "USD", "USD"

    ADMIN_ROLES: ClassVar[tuple[str, ...]] = (Role.ADMIN, Role.SUPER_ADMIN)

    # First and last name do not cover name patterns around the globe
    full_name = CharField(_("Full Name"), max_length=100)
    email = EmailField(_("email address"), unique=True)
    username = None  # type: ignore[assignment]
    first_name = None  # type: ignore[assignment]
    last_name = None  # type: ignore[assignment]
    phone = CharField(max_length=30, unique=True, null=True, blank=True)
    role = CharField(max_length=20, choices=Role.choices, default=Role.USER)

    verified = models.BooleanField(default=False)
    email_verification_token = CharField(max_length=128, blank=True, db_index=True)
    email_verification_expires = models.DateTimeField(null=True, blank=True)
    email_verified_at = models.DateTimeField(null=True, blank=True)
    approved = models.BooleanField(default=False)

    profile_image = CharField(max_length=500, blank=True)
    street = CharField(max_length=255, blank=True)
    city = CharField(max_length=100, blank=True)
    state = CharField(max_length=100, blank=True)
    country = CharField(max_length=100, blank=True)
    zip_code = CharField(max_length=20, blank=True)
    currency = CharField(max_length=4, choices=Currency.choices, default=Currency.RWF)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    objects: ClassVar[UserManager] = UserManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>"

    def save(self, *args, **kwargs):
        # Empty phone numbers must not collide on the unique index
        if not self.phone:
            self.phone = None
        # Staff access to the Django admin follows the application role
        self.is_staff = self.is_superuser or self.role in self.ADMIN_ROLES
        super().save(*args, **kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role in self.ADMIN_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.role == self.Role.SUPER_ADMIN

    def get_full_name(self) -> str:
        return self.full_name

    def get_short_name(self) -> str:
        return self.full_name.split(" ")[0] if self.full_name else self.email

    def address_snapshot(self) -> dict[str, Any]:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "zip_code": self.zip_code,
        }

    def issue_email_verification_token(self) -> str:
        """Generate a fresh verification token; the caller saves the user."""
        self.email_verification_token = secrets.token_hex(32)
        self.email_verification_expires = timezone.now() + timedelta(
            hours=settings.EMAIL_VERIFICATION_TTL_HOURS,
        )
        return self.email_verification_token

    def mark_email_verified(self) -> None:
        self.verified = True
        self.email_verified_at = timezone.now()
        self.email_verification_token = ""
        self.email_verification_expires = None
        self.save(
            update_fields=[
                "verified",
                "email_verified_at",
                "email_verification_token",
                "email_verification_expires",
                "updated_at",
            ],
        )
