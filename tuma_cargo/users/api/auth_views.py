from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth.signals import user_logged_in
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenRefreshView

from tuma_cargo.cms.services import feature_enabled
from tuma_cargo.users.models import User
from tuma_cargo.users.services import issue_tokens
from tuma_cargo.users.services import queue_verification_email
from tuma_cargo.users.services import revoke_refresh_tokens
from tuma_cargo.users.tasks import send_password_reset_email

from .serializers import LoginSerializer
from .serializers import PasswordResetConfirmSerializer
from .serializers import PasswordResetRequestSerializer
from .serializers import RegisterSerializer
from .serializers import UserSerializer

if TYPE_CHECKING:  # pragma: no cover - typing only
    from datetime import timedelta

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


def _set_cookie(
    response: Response,
    name: str,
    value: str,
    max_age: int | None,
) -> None:
    if not value:
        return
    cookie_kwargs = {
        "httponly": True,
        "secure": getattr(settings, "JWT_AUTH_COOKIE_SECURE", not settings.DEBUG),
        "samesite": getattr(settings, "JWT_AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }
    if max_age is not None:
        cookie_kwargs["max_age"] = max_age
    response.set_cookie(name, value, **cookie_kwargs)


def _set_refresh_cookie(response: Response, refresh: str | None) -> None:
    refresh_lifetime: timedelta = settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]
    refresh_cookie = getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token")
    if refresh:
        _set_cookie(
            response, refresh_cookie, refresh, int(refresh_lifetime.total_seconds())
        )


def _session_response(request, user: User, http_status: int) -> Response:
    tokens = issue_tokens(user)
    data = {
        "user": UserSerializer(user, context={"request": request}).data,
        **tokens,
    }
    response = Response(data, status=http_status)
    _set_refresh_cookie(response, tokens["refresh"])
    return response


class _AuthThrottleMixin:
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"


@extend_schema(tags=["Authentication"], request=RegisterSerializer)
class RegisterView(_AuthThrottleMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):
        if not feature_enabled("registrationEnabled"):
            return Response(
                {"detail": "Registration is currently disabled"},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        queue_verification_email(user)
        return _session_response(request, user, status.HTTP_201_CREATED)


@extend_schema(tags=["Authentication"], request=LoginSerializer)
class LoginView(_AuthThrottleMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user: User = serializer.validated_data["user"]
        # Updates last_login and writes the audit entry
        user_logged_in.send(sender=user.__class__, request=request, user=user)
        return _session_response(request, user, status.HTTP_200_OK)


@extend_schema(tags=["Authentication"])
class RefreshView(TokenRefreshView):
    """Rotate a refresh token taken from the body or the HttpOnly cookie."""

    def post(self, request, *args, **kwargs):
        refresh_cookie = getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token")
        data = request.data.copy()
        if not data.get("refresh") and request.COOKIES.get(refresh_cookie):
            data["refresh"] = request.COOKIES[refresh_cookie]

        serializer = self.get_serializer(data=data)
        serializer.is_valid(raise_exception=True)
        response = Response(serializer.validated_data, status=status.HTTP_200_OK)
        _set_refresh_cookie(response, serializer.validated_data.get("refresh"))
        return response


@extend_schema(tags=["Authentication"], request=None)
class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        revoke_refresh_tokens(request.user)
        response = Response({"detail": "Logged out successfully"})
        response.delete_cookie(
            getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token"),
            path="/",
        )
        return response


@extend_schema(tags=["Authentication"], responses=UserSerializer)
class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = UserSerializer(request.user, context={"request": request})
        return Response({"user": serializer.data})


@extend_schema(tags=["Authentication"], request=PasswordResetRequestSerializer)
class ForgotPasswordView(_AuthThrottleMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = User.objects.filter(
            email__iexact=serializer.validated_data["email"],
            is_active=True,
        ).first()
        if user is not None:
            send_password_reset_email.delay(user.pk)
        # Same answer whether or not the account exists
        return Response({"detail": FORGOT_PASSWORD_MESSAGE})


@extend_schema(tags=["Authentication"], request=PasswordResetConfirmSerializer)
class ResetPasswordView(_AuthThrottleMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user: User = serializer.validated_data["user"]
        user.set_password(serializer.validated_data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        revoke_refresh_tokens(user)
        return Response({"detail": "Password has been reset successfully"})
