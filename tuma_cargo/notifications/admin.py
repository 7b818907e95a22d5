from django.contrib import admin

from tuma_cargo.notifications import models


@admin.register(models.Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "recipient", "title", "notification_type", "priority", "is_read"]
    search_fields = ["title", "message", "recipient__email"]
    list_filter = ["notification_type", "priority", "is_read", "created_at"]
    raw_id_fields = ["recipient"]
