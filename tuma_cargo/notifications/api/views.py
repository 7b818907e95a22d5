from __future__ import annotations

from django.contrib.auth import get_user_model
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from tuma_cargo.notifications.models import Notification
from tuma_cargo.users.api.permissions import is_admin_user

from .serializers import NotificationCreateSerializer
from .serializers import NotificationSerializer

User = get_user_model()

TRUTHY = {"1", "true", "yes"}


def _flag(request, name: str) -> bool:
    return str(request.query_params.get(name, "")).lower() in TRUTHY


@extend_schema_view(
    list=extend_schema(
        tags=["Notifications"],
        parameters=[OpenApiParameter("unread_only", bool)],
    ),
    create=extend_schema(
        tags=["Notifications"],
        request=NotificationCreateSerializer,
        responses=NotificationSerializer,
    ),
    destroy=extend_schema(tags=["Notifications"]),
)
class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Notifications for the authenticated user.

    - list: request.user's unexpired notifications plus the unread count
    - create: notify yourself, or any user when admin
    - destroy / clear: delete one, or all (optionally read only)
    - read / read_all: mark as read
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        return Notification.objects.visible().filter(recipient=self.request.user)

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset()
        if _flag(request, "unread_only"):
            qs = qs.unread()
        page = self.paginate_queryset(qs)
        response = self.get_paginated_response(
            self.get_serializer(page, many=True).data,
        )
        response.data["unread_count"] = self.get_queryset().unread().count()
        return response

    def create(self, request, *args, **kwargs):
        serializer = NotificationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        recipient = request.user
        user_id = data.pop("user_id", None)
        if user_id is not None and user_id != request.user.pk:
            if not is_admin_user(request.user):
                msg = "Only administrators can notify other users."
                raise PermissionDenied(msg)
            recipient = User.objects.filter(pk=user_id).first()
            if recipient is None:
                return Response(
                    {"detail": "User not found"},
                    status=status.HTTP_404_NOT_FOUND,
                )

        notification = Notification.objects.create(recipient=recipient, **data)
        return Response(
            NotificationSerializer(notification).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Notifications"], request=None)
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"unread_count": self.get_queryset().unread().count()})

    @extend_schema(tags=["Notifications"], request=None)
    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_read()
        return Response(NotificationSerializer(notification).data)

    @extend_schema(tags=["Notifications"], request=None)
    @action(detail=False, methods=["put"], url_path="read-all")
    def read_all(self, request):
        updated = (
            Notification.objects.filter(recipient=request.user, is_read=False)
            .update(is_read=True, read_at=timezone.now())
        )
        return Response({"updated_count": updated})

    @extend_schema(
        tags=["Notifications"],
        parameters=[OpenApiParameter("read_only", bool)],
    )
    def clear(self, request):
        qs = Notification.objects.filter(recipient=request.user)
        if _flag(request, "read_only"):
            qs = qs.filter(is_read=True)
        deleted, _ = qs.delete()
        return Response({"deleted_count": deleted})
