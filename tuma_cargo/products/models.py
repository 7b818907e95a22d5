from __future__ import annotations

from typing import Any

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F
from django.utils.translation import gettext_lazy as _


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Product(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        PUBLISHED = "published", _("Published")

    class Platform(models.TextChoices):
        ALIBABA = "alibaba", "Alibaba"
        PLATFORM_1688 = "1688", "1688"
        TAOBAO = "taobao", "Taobao"
        OTHER = "other", _("Other")

    name = models.CharField(max_length=200)
    description = models.CharField(max_length=1000)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    original_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    currency = models.CharField(max_length=10, default="USD")
    image_url = models.CharField(max_length=1000, blank=True)
    images = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=100, db_index=True)
    subcategory = models.CharField(max_length=100, blank=True)
    tags = models.JSONField(default=list, blank=True)

    # Semi-structured details
    specifications = models.JSONField(default=dict, blank=True)
    supplier = models.JSONField(default=dict, blank=True)
    stock = models.JSONField(default=dict, blank=True)
    shipping = models.JSONField(default=dict, blank=True)

    # Popularity counters
    views = models.PositiveIntegerField(default=0)
    orders_count = models.PositiveIntegerField(default=0)
    rating = models.FloatField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)

    featured = models.BooleanField(default=False, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PUBLISHED,
    )
    # Mirrors status; kept as a column for cheap filtering
    is_active = models.BooleanField(default=True, db_index=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products_created",
    )
    last_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products_updated",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["-featured", "-orders_count", "-created_at"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        self.is_active = self.status == self.Status.PUBLISHED
        if not self.image_url and self.images:
            self.image_url = self.images[0]
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "status" in update_fields:
            kwargs["update_fields"] = {*update_fields, "is_active"}
        super().save(*args, **kwargs)

    @property
    def discount_percentage(self) -> int:
        if self.original_price and self.original_price > self.price:
            ratio = (self.original_price - self.price) / self.original_price
            return round(ratio * 100)
        return 0

    @property
    def popularity(self) -> dict[str, Any]:
        return {
            "views": self.views,
            "orders": self.orders_count,
            "rating": self.rating,
            "review_count": self.review_count,
        }

    def record_view(self) -> None:
        Product.objects.filter(pk=self.pk).update(views=F("views") + 1)
        self.views += 1
