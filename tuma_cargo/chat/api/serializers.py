from __future__ import annotations

from pathlib import Path

from django.conf import settings
from rest_framework import serializers

from tuma_cargo.chat.models import MAX_MESSAGE_LENGTH
from tuma_cargo.chat.models import Chat
from tuma_cargo.chat.models import Message
from tuma_cargo.users.models import User

ATTACHMENT_EXTENSIONS = {
    "jpeg",
    "jpg",
    "png",
    "gif",
    "pdf",
    "doc",
    "docx",
    "txt",
    "zip",
    "rar",
}
IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif"}


class ChatUserSerializer(serializers.ModelSerializer[User]):
    class Meta:
        model = User
        fields = ["id", "full_name", "email", "role", "profile_image"]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer[Message]):
    sender = ChatUserSerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "chat",
            "sender",
            "message_type",
            "text",
            "file_url",
            "file_name",
            "file_size",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class ChatSerializer(serializers.ModelSerializer[Chat]):
    participants = ChatUserSerializer(many=True, read_only=True)
    customer = ChatUserSerializer(read_only=True)
    assigned_to = ChatUserSerializer(read_only=True)
    order = serializers.SlugRelatedField(slug_field="order_id", read_only=True)
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            "id",
            "chat_type",
            "title",
            "order",
            "customer",
            "participants",
            "last_message_text",
            "last_message_at",
            "last_message_sender",
            "is_active",
            "priority",
            "status",
            "assigned_to",
            "tags",
            "metadata",
            "unread_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_unread_count(self, obj: Chat) -> int:
        return getattr(obj, "unread_count", 0) or 0


class MessageCreateSerializer(serializers.Serializer):
    chat_id = serializers.IntegerField(required=False, allow_null=True)
    content = serializers.CharField(
        max_length=MAX_MESSAGE_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        trim_whitespace=True,
    )
    message_type = serializers.ChoiceField(
        choices=[Message.Type.TEXT, Message.Type.FILE, Message.Type.IMAGE],
        required=False,
        default=Message.Type.TEXT,
    )
    file_url = serializers.CharField(
        max_length=1000,
        required=False,
        allow_blank=True,
        default="",
    )
    file_name = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        default="",
    )
    file_size = serializers.IntegerField(required=False, allow_null=True, min_value=0)

    def validate(self, attrs):
        if not attrs.get("content") and not attrs.get("file_url"):
            raise serializers.ValidationError(
                {"content": "Message content or file is required"},
            )
        return attrs


class ChatAttachmentSerializer(serializers.Serializer):
    """Text and/or an uploaded file posted to a chat as multipart form data."""

    content = serializers.CharField(
        max_length=MAX_MESSAGE_LENGTH,
        required=False,
        allow_blank=True,
        default="",
    )
    file = serializers.FileField(required=False)

    def validate_file(self, value):
        extension = Path(value.name).suffix.lower().lstrip(".")
        if extension not in ATTACHMENT_EXTENSIONS:
            msg = (
                "Unsupported file type. Allowed: "
                + ", ".join(sorted(ATTACHMENT_EXTENSIONS))
            )
            raise serializers.ValidationError(msg)
        max_bytes = settings.CHAT_MAX_ATTACHMENT_MB * 1024 * 1024
        if value.size > max_bytes:
            msg = f"File too large. Maximum size is {settings.CHAT_MAX_ATTACHMENT_MB}MB"
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs):
        if not attrs.get("content", "").strip() and not attrs.get("file"):
            raise serializers.ValidationError(
                {"content": "Message content or file is required"},
            )
        return attrs


class ChatCreateSerializer(serializers.Serializer):
    order_id = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)


class ChatStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Chat.Status.choices)
    priority = serializers.ChoiceField(choices=Chat.Priority.choices, required=False)
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role__in=["admin", "super_admin"]),
        required=False,
        allow_null=True,
    )
