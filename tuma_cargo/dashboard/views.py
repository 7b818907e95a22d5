from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from tuma_cargo.orders.api.serializers import OrderListSerializer
from tuma_cargo.users.api.permissions import IsAdmin

from .services import ANALYTICS_PERIODS
from .services import DEFAULT_PERIOD
from .services import analytics
from .services import dashboard_summary


@extend_schema(tags=["Admin • Dashboard"], responses=OpenApiTypes.OBJECT)
class AdminDashboardView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        data = dashboard_summary()
        data["recent_orders"] = OrderListSerializer(
            data["recent_orders"],
            many=True,
            context={"request": request},
        ).data
        return Response(data)


@extend_schema(
    tags=["Admin • Dashboard"],
    parameters=[
        OpenApiParameter(
            "period",
            str,
            enum=list(ANALYTICS_PERIODS),
            default=DEFAULT_PERIOD,
        ),
    ],
    responses=OpenApiTypes.OBJECT,
)
class AnalyticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(analytics(request.query_params.get("period", DEFAULT_PERIOD)))
