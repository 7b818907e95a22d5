from django.db.models import Count
from django.db.models import Q
from django.db.models import Sum
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from tuma_cargo.audit.utils import log_action
from tuma_cargo.notifications.models import Notification
from tuma_cargo.orders.api.serializers import OrderListSerializer
from tuma_cargo.orders.models import Order
from tuma_cargo.users.models import User
from tuma_cargo.users.services import issue_tokens
from tuma_cargo.users.services import queue_verification_email
from tuma_cargo.users.services import revoke_refresh_tokens

from .serializers import AccountDeleteSerializer
from .serializers import PasswordChangeSerializer
from .serializers import UserSerializer


@extend_schema_view(
    profile=extend_schema(tags=["Users"]),
    change_password=extend_schema(tags=["Users"], request=PasswordChangeSerializer),
    account=extend_schema(tags=["Users"], request=AccountDeleteSerializer),
    dashboard_stats=extend_schema(tags=["Users"]),
    resend_verification=extend_schema(tags=["Users"], request=None),
    verify_email=extend_schema(tags=["Users"]),
)
class UserViewSet(GenericViewSet):
    """Self-service endpoints for the authenticated user."""

    serializer_class = UserSerializer
    queryset = User.objects.all()
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=["get", "put", "patch"])
    def profile(self, request):
        if request.method == "GET":
            serializer = UserSerializer(request.user, context={"request": request})
            return Response({"user": serializer.data})

        serializer = UserSerializer(
            request.user,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        instance = serializer.save()
        log_action(
            "profile_updated",
            actor=request.user,
            message=f"email={instance.email}",
            target=instance,
            request=request,
        )
        return Response(
            {"detail": "Profile updated successfully", "user": serializer.data},
        )

    @action(detail=False, methods=["put"], url_path="change-password")
    def change_password(self, request):
        serializer = PasswordChangeSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        user: User = request.user
        user.set_password(serializer.validated_data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        # Other sessions are signed out; this one continues with new tokens
        revoke_refresh_tokens(user)
        log_action("password_changed", actor=user, target=user, request=request)
        return Response(
            {"detail": "Password changed successfully", **issue_tokens(user)},
        )

    @action(detail=False, methods=["delete"])
    def account(self, request):
        serializer = AccountDeleteSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        user: User = request.user
        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        revoke_refresh_tokens(user)
        log_action("account_deactivated", actor=user, target=user, request=request)
        return Response({"detail": "Account deactivated successfully"})

    @action(detail=False, methods=["get"], url_path="dashboard-stats")
    def dashboard_stats(self, request):
        orders = Order.objects.filter(user=request.user)
        by_status = {
            row["status"]: row["count"]
            for row in orders.values("status").annotate(count=Count("id"))
        }
        totals = orders.aggregate(
            total=Count("id"),
            spent=Sum("final_amount", filter=~Q(status=Order.Status.CANCELLED)),
        )
        unread = (
            Notification.objects.visible()
            .filter(recipient=request.user, is_read=False)
            .count()
        )
        recent = orders.order_by("-created_at")[:5]
        return Response(
            {
                "stats": {
                    "total_orders": totals["total"],
                    "pending_orders": by_status.get(Order.Status.PENDING, 0),
                    "active_orders": sum(
                        by_status.get(s, 0) for s in Order.ACTIVE_STATUSES
                    ),
                    "delivered_orders": by_status.get(Order.Status.DELIVERED, 0),
                    "cancelled_orders": by_status.get(Order.Status.CANCELLED, 0),
                    "total_spent": totals["spent"] or 0,
                    "unread_notifications": unread,
                },
                "orders_by_status": by_status,
                "recent_orders": OrderListSerializer(
                    recent,
                    many=True,
                    context={"request": request},
                ).data,
            },
        )

    @action(detail=False, methods=["post"], url_path="verify-email")
    def resend_verification(self, request):
        user: User = request.user
        if user.verified:
            return Response(
                {"detail": "Email is already verified"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user.issue_email_verification_token()
        user.save(
            update_fields=[
                "email_verification_token",
                "email_verification_expires",
                "updated_at",
            ],
        )
        queue_verification_email(user)
        return Response({"detail": "Verification email sent"})

    @action(
        detail=False,
        methods=["get"],
        url_path=r"verify-email/(?P<token>[0-9a-f]+)",
        permission_classes=[AllowAny],
        authentication_classes=[],
    )
    def verify_email(self, request, token=None):
        user = User.objects.filter(email_verification_token=token).first()
        expired = (
            user is not None
            and user.email_verification_expires is not None
            and user.email_verification_expires < timezone.now()
        )
        if user is None or expired:
            return Response(
                {"detail": "Invalid or expired verification token"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user.mark_email_verified()
        log_action("email_verified", actor=user, target=user, request=request)
        return Response({"detail": "Email verified successfully"})
