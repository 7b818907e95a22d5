from django.contrib import admin

from .models import AdminSettings


@admin.register(AdminSettings)
class AdminSettingsAdmin(admin.ModelAdmin):
    list_display = ["id", "version", "last_updated_by", "updated_at"]
    readonly_fields = ["version", "created_at", "updated_at"]
    raw_id_fields = ["last_updated_by"]

    def has_add_permission(self, request):
        return not AdminSettings.objects.exists()
