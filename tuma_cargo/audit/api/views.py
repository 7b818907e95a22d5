from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from tuma_cargo.audit.api.serializers import AuditLogSerializer
from tuma_cargo.audit.models import AuditLog
from tuma_cargo.users.api.permissions import IsAdmin

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _parse_limit(raw) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


@extend_schema(
    tags=["Audit"],
    parameters=[
        OpenApiParameter("limit", int, description=f"1-{MAX_LIMIT}, default {DEFAULT_LIMIT}"),
        OpenApiParameter("action", str),
        OpenApiParameter("model", str, description='e.g. "orders.Order"'),
        OpenApiParameter("record_id", int),
    ],
    responses=AuditLogSerializer(many=True),
)
class RecentAuditView(APIView):
    """Latest audit entries, optionally narrowed to one action or record."""

    permission_classes = [IsAdmin]

    def get(self, request):
        params = request.query_params
        limit = _parse_limit(params.get("limit", DEFAULT_LIMIT))

        qs = AuditLog.objects.select_related("actor")
        if params.get("action"):
            qs = qs.filter(action=params["action"])
        if params.get("model"):
            record_id = params.get("record_id")
            if record_id and record_id.isdigit():
                qs = qs.for_record(params["model"], int(record_id))
            else:
                qs = qs.filter(model_name=params["model"])

        data = AuditLogSerializer(qs[:limit], many=True).data
        return Response({"results": data, "limit": limit})
