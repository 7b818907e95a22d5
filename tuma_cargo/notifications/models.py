from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class NotificationQuerySet(models.QuerySet):
    def visible(self):
        """Notifications that have not expired yet."""
        return self.filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now()),
        )

    def unread(self):
        return self.filter(is_read=False)


class Notification(models.Model):
    class Type(models.TextChoices):
        ORDER_UPDATE = "order_update", _("Order Update")
        ORDER_CREATED = "order_created", _("Order Created")
        ORDER_CANCELLED = "order_cancelled", _("Order Cancelled")
        MESSAGE_RECEIVED = "message_received", _("Message Received")
        MESSAGE_SENT = "message_sent", _("Message Sent")
        ADMIN_ACTION = "admin_action", _("Admin Action")
        SYSTEM_ANNOUNCEMENT = "system_announcement", _("System Announcement")
        ACCOUNT_APPROVED = "account_approved", _("Account Approved")
        ACCOUNT_REJECTED = "account_rejected", _("Account Rejected")
        PAYMENT_RECEIVED = "payment_received", _("Payment Received")
        SHIPMENT_UPDATE = "shipment_update", _("Shipment Update")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    data = models.JSONField(default=dict, blank=True)
    link = models.CharField(max_length=500, blank=True, default="")
    icon = models.CharField(max_length=50, default="bell")
    priority = models.CharField(
        max_length=10, choices=Priority.choices, default=Priority.MEDIUM
    )
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self):
        return f"{self.title} - {self.recipient}"

    def mark_read(self) -> bool:
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True
