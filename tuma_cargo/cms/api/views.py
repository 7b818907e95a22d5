from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from tuma_cargo.cms.models import AdminSettings
from tuma_cargo.cms.services import InvalidSettingsError
from tuma_cargo.cms.services import get_settings_document
from tuma_cargo.cms.services import get_settings_row
from tuma_cargo.cms.services import update_settings
from tuma_cargo.users.api.permissions import IsAdmin
from tuma_cargo.users.api.permissions import IsSuperAdmin

from .serializers import AdminSettingsSerializer


def _settings_response(row: AdminSettings | None) -> Response:
    document = get_settings_document(row)
    if row is None:
        return Response(
            {
                "settings": document,
                "version": 1,
                "last_updated_by": None,
                "updated_at": None,
            },
        )
    serializer = AdminSettingsSerializer(row, context={"document": document})
    return Response(serializer.data)


@extend_schema(tags=["Admin • Settings"])
class AdminSettingsView(APIView):
    """Read (admins) and update (super admins) the site settings document."""

    def get_permissions(self):
        if self.request.method in {"POST", "PUT"}:
            return [IsSuperAdmin()]
        return [IsAdmin()]

    @extend_schema(responses=AdminSettingsSerializer)
    def get(self, request):
        return _settings_response(get_settings_row())

    @extend_schema(request=OpenApiTypes.OBJECT, responses=AdminSettingsSerializer)
    def put(self, request):
        try:
            row = update_settings(request.data, request.user)
        except InvalidSettingsError as exc:
            return Response({"detail": str(exc)}, status=400)
        response = _settings_response(row)
        response.data["detail"] = "Settings updated successfully"
        return response

    @extend_schema(request=OpenApiTypes.OBJECT, responses=AdminSettingsSerializer)
    def post(self, request):
        return self.put(request)


@extend_schema(tags=["Public"], responses=OpenApiTypes.OBJECT)
class PublicSettingsView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request):
        return Response(get_settings_document())
