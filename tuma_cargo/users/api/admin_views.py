from __future__ import annotations

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from tuma_cargo.audit.utils import log_action
from tuma_cargo.notifications.services import notify_account_review
from tuma_cargo.orders.api.serializers import OrderListSerializer
from tuma_cargo.users.models import User
from tuma_cargo.users.services import revoke_refresh_tokens

from .filters import AdminUserFilter
from .permissions import IsAdmin
from .serializers import AdminUserSerializer
from .serializers import ApprovalSerializer
from .serializers import RoleChangeSerializer


def _forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


@extend_schema_view(
    list=extend_schema(tags=["Admin • Users"]),
    retrieve=extend_schema(tags=["Admin • Users"]),
    approve=extend_schema(tags=["Admin • Users"], request=ApprovalSerializer),
    change_role=extend_schema(tags=["Admin • Users"], request=RoleChangeSerializer),
    deactivate=extend_schema(tags=["Admin • Users"], request=None),
    activate=extend_schema(tags=["Admin • Users"], request=None),
)
class AdminUserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """User management for admins and super admins."""

    queryset = User.objects.all().order_by("-created_at")
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdmin]
    filterset_class = AdminUserFilter

    def retrieve(self, request, *args, **kwargs):
        user = self.get_object()
        recent_orders = user.orders.order_by("-created_at")[:10]
        return Response(
            {
                "user": self.get_serializer(user).data,
                "recent_orders": OrderListSerializer(
                    recent_orders,
                    many=True,
                    context={"request": request},
                ).data,
            },
        )

    @action(detail=True, methods=["put"])
    def approve(self, request, pk=None):
        user = self.get_object()
        serializer = ApprovalSerializer(data=request.data or {"approved": True})
        serializer.is_valid(raise_exception=True)
        approved = serializer.validated_data["approved"]

        user.approved = approved
        user.save(update_fields=["approved", "updated_at"])
        notify_account_review(user, approved=approved)
        log_action(
            "user_approved" if approved else "user_rejected",
            actor=request.user,
            message=f"email={user.email}",
            target=user,
            request=request,
        )
        return Response(
            {
                "detail": f"User {'approved' if approved else 'rejected'} successfully",
                "user": self.get_serializer(user).data,
            },
        )

    @action(detail=True, methods=["put"], url_path="role")
    def change_role(self, request, pk=None):
        user = self.get_object()
        serializer = RoleChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_role = serializer.validated_data["role"]
        actor: User = request.user

        if user.pk == actor.pk:
            return _forbidden("You cannot change your own role")
        touches_super_admin = User.Role.SUPER_ADMIN in (new_role, user.role)
        if touches_super_admin and not actor.is_super_admin:
            return _forbidden("Only super admins can manage super admin accounts")

        before = {"role": user.role}
        user.role = new_role
        user.save(update_fields=["role", "is_staff", "updated_at"])
        log_action(
            "user_role_changed",
            actor=actor,
            message=f"email={user.email} role={new_role}",
            target=user,
            request=request,
            before=before,
            after={"role": new_role},
        )
        return Response(
            {
                "detail": "User role updated successfully",
                "user": self.get_serializer(user).data,
            },
        )

    @action(detail=True, methods=["put"])
    def deactivate(self, request, pk=None):
        user = self.get_object()
        actor: User = request.user
        if user.pk == actor.pk:
            return _forbidden("You cannot deactivate your own account")
        if user.is_super_admin and not actor.is_super_admin:
            return _forbidden("Only super admins can deactivate super admin accounts")

        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        revoke_refresh_tokens(user)
        log_action(
            "user_deactivated",
            actor=actor,
            message=f"email={user.email}",
            target=user,
            request=request,
        )
        return Response(
            {
                "detail": "User deactivated successfully",
                "user": self.get_serializer(user).data,
            },
        )

    @action(detail=True, methods=["put"])
    def activate(self, request, pk=None):
        user = self.get_object()
        actor: User = request.user
        if user.is_super_admin and not actor.is_super_admin:
            return _forbidden("Only super admins can activate super admin accounts")

        user.is_active = True
        user.save(update_fields=["is_active", "updated_at"])
        log_action(
            "user_activated",
            actor=actor,
            message=f"email={user.email}",
            target=user,
            request=request,
        )
        return Response(
            {
                "detail": "User activated successfully",
                "user": self.get_serializer(user).data,
            },
        )
