from __future__ import annotations

import secrets
import string
import time
from decimal import Decimal
from typing import ClassVar

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

ORDER_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_id() -> str:
    """Human-facing reference such as ``TMA-1718000000000-K3F9Q``."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(5))
    return f"TMA-{millis}-{suffix}"


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PROCESSING = "processing", _("Processing")
        APPROVED = "approved", _("Approved")
        PURCHASED = "purchased", _("Purchased")
        WAREHOUSE = "warehouse", _("Warehouse")
        SHIPPED = "shipped", _("Shipped")
        DELIVERED = "delivered", _("Delivered")
        CANCELLED = "cancelled", _("Cancelled")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        NORMAL = "normal", _("Normal")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PARTIAL = "partial", _("Partial")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")

    ACTIVE_STATUSES: ClassVar[tuple[str, ...]] = (
        Status.PROCESSING,
        Status.APPROVED,
        Status.PURCHASED,
        Status.WAREHOUSE,
        Status.SHIPPED,
    )
    REVENUE_STATUSES: ClassVar[tuple[str, ...]] = (Status.SHIPPED, Status.DELIVERED)

    order_id = models.CharField(
        max_length=40,
        unique=True,
        default=generate_order_id,
        editable=False,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orders",
    )
    product_name = models.CharField(max_length=200)
    product_link = models.URLField(max_length=1000, blank=True)
    product_image = models.CharField(max_length=1000, blank=True)
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(10000)],
    )
    unit_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    total_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    shipping_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    final_amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=10, default="USD")

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.NORMAL,
    )
    description = models.CharField(max_length=1000, blank=True)
    specifications = models.JSONField(default=dict, blank=True)
    shipping_address = models.JSONField(default=dict, blank=True)
    tracking_info = models.JSONField(default=dict, blank=True)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_orders",
    )
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_method = models.CharField(max_length=50, blank=True)
    is_urgent = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.order_id} ({self.status})"

    def save(self, *args, **kwargs):
        if self.total_price is None:
            self.total_price = Decimal(self.quantity) * Decimal(self.unit_price)
        self.final_amount = Decimal(self.total_price) + Decimal(
            self.shipping_cost or 0,
        )
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and (
            {"total_price", "shipping_cost"} & set(update_fields)
        ):
            kwargs["update_fields"] = {*update_fields, "final_amount"}
        super().save(*args, **kwargs)

    @property
    def is_cancellable(self) -> bool:
        return self.status == self.Status.PENDING


class OrderStage(models.Model):
    """One entry of an order's stage history."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="stage_history",
    )
    stage = models.CharField(max_length=20, choices=Order.Status.choices)
    timestamp = models.DateTimeField(auto_now_add=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["timestamp", "id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.order_id}:{self.stage}"


class OrderNote(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="notes")
    text = models.CharField(max_length=1000)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Note({self.order_id})"
