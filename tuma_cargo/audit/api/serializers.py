from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from tuma_cargo.audit.models import AuditLog

User = get_user_model()


class AuditActorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "full_name", "role"]
        read_only_fields = fields


class AuditLogSerializer(serializers.ModelSerializer):
    actor = AuditActorSerializer(allow_null=True, read_only=True)
    target = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "action",
            "message",
            "actor",
            "target",
            "model_name",
            "record_id",
            "before",
            "after",
            "ip_address",
            "created_at",
        ]
        read_only_fields = fields

    def get_target(self, obj: AuditLog) -> str | None:
        if not obj.model_name:
            return None
        if obj.record_id is None:
            return obj.model_name
        return f"{obj.model_name}#{obj.record_id}"
