from django.conf import settings
from django.db import models


class AdminSettings(models.Model):
    """Singleton row holding the site's CMS document."""

    SINGLETON_ID = 1

    document = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=1)
    last_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "admin settings"
        verbose_name_plural = "admin settings"

    def __str__(self):
        return f"Admin settings v{self.version}"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "AdminSettings":
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return obj
