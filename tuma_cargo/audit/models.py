from django.conf import settings
from django.db import models


class AuditLogQuerySet(models.QuerySet):
    def for_record(self, model_name: str, record_id) -> "AuditLogQuerySet":
        return self.filter(model_name=model_name, record_id=record_id)

    def by_actor(self, user) -> "AuditLogQuerySet":
        return self.filter(actor=user)


class AuditLog(models.Model):
    """Append-only trail of account, order, product and settings changes."""

    action = models.CharField(max_length=100, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    message = models.TextField(blank=True)
    # "orders.Order", "users.User", "cms.AdminSettings", ...
    model_name = models.CharField(max_length=150, blank=True)
    record_id = models.BigIntegerField(null=True, blank=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    ip_address = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["model_name", "record_id"], name="audit_record_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        actor = self.actor_id or "system"
        target = f" {self.model_name}#{self.record_id}" if self.record_id else ""
        return f"[{self.created_at:%Y-%m-%d %H:%M}] {actor}: {self.action}{target}"
