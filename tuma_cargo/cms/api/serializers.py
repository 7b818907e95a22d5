from rest_framework import serializers

from tuma_cargo.cms.models import AdminSettings


class SettingsEditorSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(read_only=True)
    full_name = serializers.CharField(read_only=True)


class AdminSettingsSerializer(serializers.ModelSerializer):
    """Settings document plus its version metadata."""

    settings = serializers.SerializerMethodField()
    last_updated_by = SettingsEditorSerializer(read_only=True)

    class Meta:
        model = AdminSettings
        fields = ["settings", "version", "last_updated_by", "updated_at"]
        read_only_fields = fields

    def get_settings(self, obj) -> dict:
        return self.context["document"]
