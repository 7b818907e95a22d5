from __future__ import annotations

from django.db.models import Count
from django.db.models import Q
from django.db.models import Sum
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from tuma_cargo.audit.utils import log_action
from tuma_cargo.orders import services
from tuma_cargo.orders.models import Order
from tuma_cargo.users.api.permissions import IsAdmin
from tuma_cargo.users.api.permissions import is_admin_user

from .filters import OrderFilter
from .serializers import OrderCreateSerializer
from .serializers import OrderDetailSerializer
from .serializers import OrderListSerializer
from .serializers import OrderNoteSerializer
from .serializers import OrderStatusSerializer
from .serializers import OrderUpdateSerializer

ADMIN_ACTIONS = {"update", "partial_update", "set_status", "add_note"}


@extend_schema_view(
    list=extend_schema(
        tags=["Orders"],
        parameters=[
            OpenApiParameter(
                "assigned",
                bool,
                description="Admins only: restrict to orders assigned to me",
            ),
        ],
    ),
    retrieve=extend_schema(tags=["Orders"]),
    create=extend_schema(
        tags=["Orders"],
        request=OrderCreateSerializer,
        responses=OrderDetailSerializer,
    ),
    update=extend_schema(tags=["Orders"], request=OrderUpdateSerializer),
    partial_update=extend_schema(tags=["Orders"], request=OrderUpdateSerializer),
    destroy=extend_schema(tags=["Orders"]),
)
class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """Orders: customers see their own, admins see everything."""

    serializer_class = OrderDetailSerializer
    filterset_class = OrderFilter
    queryset = Order.objects.all()

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        user = self.request.user
        qs = Order.objects.select_related("user", "assigned_to")
        if not is_admin_user(user):
            return qs.filter(user=user)
        assigned = self.request.query_params.get("assigned", "").lower()
        if self.action == "list" and assigned in {"1", "true", "yes"}:
            qs = qs.filter(assigned_to=user)
        return qs

    def get_object(self):
        # Accepts the numeric primary key or the public order reference
        lookup = str(self.kwargs[self.lookup_url_kwarg or self.lookup_field])
        field = "pk" if lookup.isdigit() else "order_id"
        queryset = self.get_queryset()
        if self.action == "retrieve":
            queryset = queryset.prefetch_related(
                "stage_history__updated_by",
                "notes__created_by",
            )
        obj = get_object_or_404(queryset, **{field: lookup})
        self.check_object_permissions(self.request, obj)
        return obj

    def _detail(self, order: Order) -> dict:
        return OrderDetailSerializer(order, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.create_order(request.user, serializer.validated_data)
        return Response(
            {"detail": "Order created successfully", "order": self._detail(order)},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        order = self.get_object()
        serializer = OrderUpdateSerializer(
            order,
            data=request.data,
            partial=kwargs.pop("partial", False),
        )
        serializer.is_valid(raise_exception=True)
        order = services.update_order(order, serializer.validated_data, request.user)
        return Response(
            {"detail": "Order updated successfully", "order": self._detail(order)},
        )

    def partial_update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        order = self.get_object()
        if is_admin_user(request.user):
            log_action(
                "order_deleted",
                request=request,
                target=order,
                message=f"order_id={order.order_id}",
            )
            order.delete()
            return Response({"detail": "Order deleted successfully"})

        if not order.is_cancellable:
            return Response(
                {"detail": "Only pending orders can be cancelled"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        services.cancel_order(order, request.user)
        return Response(
            {"detail": "Order cancelled successfully", "order": self._detail(order)},
        )

    @extend_schema(tags=["Orders"], request=OrderStatusSerializer)
    @action(detail=True, methods=["put"], url_path="status")
    def set_status(self, request, pk=None):
        order = self.get_object()
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changed = services.change_status(
            order,
            serializer.validated_data["status"],
            request.user,
            notes=serializer.validated_data.get("notes", ""),
        )
        if order.assigned_to_id is None:
            order.assigned_to = request.user
            order.save(update_fields=["assigned_to", "updated_at"])
        detail = "Order status updated" if changed else "Order status unchanged"
        return Response({"detail": detail, "order": self._detail(order)})

    @extend_schema(
        tags=["Orders"],
        request=OrderNoteSerializer,
        responses=OrderNoteSerializer,
    )
    @action(detail=True, methods=["post"], url_path="notes")
    def add_note(self, request, pk=None):
        order = self.get_object()
        serializer = OrderNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = services.add_note(
            order,
            serializer.validated_data["text"],
            request.user,
        )
        return Response(
            OrderNoteSerializer(note).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Orders"])
    @action(detail=False, methods=["get"], url_path="stats/dashboard")
    def stats(self, request):
        orders = self.get_queryset()
        by_status = {
            row["status"]: row["count"]
            for row in orders.values("status").annotate(count=Count("id"))
        }
        totals = orders.aggregate(
            total=Count("id"),
            total_value=Sum("final_amount", filter=~Q(status=Order.Status.CANCELLED)),
            revenue=Sum("final_amount", filter=Q(status__in=Order.REVENUE_STATUSES)),
        )
        return Response(
            {
                "total_orders": totals["total"],
                "total_value": totals["total_value"] or 0,
                "revenue": totals["revenue"] or 0,
                "active_orders": sum(
                    by_status.get(s, 0) for s in Order.ACTIVE_STATUSES
                ),
                "by_status": {
                    choice: by_status.get(choice, 0) for choice in Order.Status.values
                },
            },
        )
