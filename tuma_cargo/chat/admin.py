from django.contrib import admin

from .models import Chat
from .models import Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ("sender", "message_type", "text", "file_name", "is_read", "created_at")
    readonly_fields = ("created_at",)
    raw_id_fields = ("sender",)


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "chat_type", "customer", "status", "priority", "last_message_at"]
    list_filter = ["chat_type", "status", "priority", "is_active"]
    search_fields = ["title", "customer__email", "customer__full_name"]
    raw_id_fields = ["customer", "order", "assigned_to", "last_message_sender"]
    filter_horizontal = ["participants"]
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "chat", "sender", "message_type", "is_read", "created_at"]
    list_filter = ["message_type", "is_read"]
    search_fields = ["text", "file_name", "sender__email"]
    raw_id_fields = ["chat", "sender"]
