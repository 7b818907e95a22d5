from django.contrib import admin

from tuma_cargo.products import models


@admin.register(models.Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "category", "price", "currency", "status", "featured"]
    search_fields = ["name", "description", "category", "subcategory"]
    list_filter = ["status", "featured", "category", "created_at"]
    readonly_fields = ["is_active", "views", "orders_count", "created_at", "updated_at"]
