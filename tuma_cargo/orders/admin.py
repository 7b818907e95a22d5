from django.contrib import admin

from .models import Order
from .models import OrderNote
from .models import OrderStage


class OrderStageInline(admin.TabularInline):
    model = OrderStage
    extra = 0
    readonly_fields = ("timestamp",)


class OrderNoteInline(admin.TabularInline):
    model = OrderNote
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_id",
        "user",
        "product_name",
        "status",
        "priority",
        "final_amount",
        "currency",
        "created_at",
    )
    list_filter = ("status", "priority", "payment_status", "is_urgent")
    search_fields = ("order_id", "product_name", "user__email")
    raw_id_fields = ("user", "assigned_to")
    readonly_fields = ("order_id", "final_amount", "created_at", "updated_at")
    inlines = [OrderStageInline, OrderNoteInline]
