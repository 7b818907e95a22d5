from __future__ import annotations

from rest_framework import serializers

from tuma_cargo.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read serializer for notifications."""

    class Meta:
        model = Notification
        fields = (
            "id",
            "recipient",
            "notification_type",
            "title",
            "message",
            "is_read",
            "read_at",
            "data",
            "link",
            "icon",
            "priority",
            "expires_at",
            "created_at",
        )
        read_only_fields = fields


class NotificationCreateSerializer(serializers.Serializer):
    """Create serializer.

    ``user_id`` targets another user and is only honoured for admins; everyone
    else can only notify themselves.
    """

    user_id = serializers.IntegerField(required=False, min_value=1)
    notification_type = serializers.ChoiceField(choices=Notification.Type.choices)
    title = serializers.CharField(max_length=100)
    message = serializers.CharField(max_length=500)
    data = serializers.JSONField(required=False, default=dict)
    link = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        default="",
    )
    icon = serializers.CharField(max_length=50, required=False, default="bell")
    priority = serializers.ChoiceField(
        choices=Notification.Priority.choices,
        required=False,
        default=Notification.Priority.MEDIUM,
    )
    expires_at = serializers.DateTimeField(required=False, allow_null=True)

    def validate_data(self, value):
        if not isinstance(value, dict):
            msg = "Must be an object."
            raise serializers.ValidationError(msg)
        return value
