from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate
from django.contrib.auth import password_validation
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from tuma_cargo.users.auth_backends import find_user_by_identifier
from tuma_cargo.users.models import User
from tuma_cargo.users.validators import validate_full_name


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True)


class UserSerializer(serializers.ModelSerializer[User]):
    id = serializers.IntegerField(read_only=True)
    address = AddressSerializer(source="*", required=False)
    is_admin = serializers.BooleanField(read_only=True)

    # Identity and privileges are managed through dedicated endpoints
    email = serializers.EmailField(read_only=True)
    role = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "full_name",
            "email",
            "phone",
            "role",
            "is_admin",
            "verified",
            "approved",
            "profile_image",
            "address",
            "currency",
            "is_active",
            "last_login",
            "created_at",
        ]
        read_only_fields = [
            "verified",
            "approved",
            "is_active",
            "last_login",
            "created_at",
        ]

    def validate_full_name(self, value: str) -> str:
        return validate_full_name(value)

    def validate_phone(self, value: str | None) -> str | None:
        value = (value or "").strip() or None
        if value is None:
            return None
        qs = User.objects.filter(phone=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            msg = "Phone number already in use"
            raise serializers.ValidationError(msg)
        return value

    def update(self, instance, validated_data):
        forbidden = {k for k in ("email", "role") if k in self.initial_data}
        if forbidden:
            errors = {f: "This field cannot be changed here." for f in forbidden}
            raise serializers.ValidationError(errors)
        return super().update(instance, validated_data)


class AdminUserSerializer(UserSerializer):
    class Meta(UserSerializer.Meta):
        fields = [
            *UserSerializer.Meta.fields,
            "email_verified_at",
            "updated_at",
        ]


class RegisterSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_full_name(self, value: str) -> str:
        return validate_full_name(value)

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            msg = "User with this email already exists"
            raise serializers.ValidationError(msg)
        return value

    def validate_phone(self, value: str) -> str | None:
        value = value.strip() or None
        if value and User.objects.filter(phone=value).exists():
            msg = "User with this phone number already exists"
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        candidate = User(email=attrs["email"], full_name=attrs["full_name"])
        try:
            password_validation.validate_password(attrs["password"], candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"password": list(exc.messages)}) from exc
        return attrs

    def create(self, validated_data: dict[str, Any]) -> User:
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.issue_email_verification_token()
        user.save()
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(help_text="Email address or phone number")
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        request = self.context.get("request")
        identifier = attrs["email"].strip()
        user = authenticate(request, username=identifier, password=attrs["password"])
        if user is None:
            candidate = find_user_by_identifier(identifier)
            if (
                candidate is not None
                and not candidate.is_active
                and candidate.check_password(attrs["password"])
            ):
                msg = "Account has been deactivated"
                raise AuthenticationFailed(msg)
            msg = "Invalid credentials"
            raise AuthenticationFailed(msg)
        attrs["user"] = user
        return attrs


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value: str) -> str:
        user = self.context["request"].user
        if not user.check_password(value):
            msg = "Current password is incorrect"
            raise serializers.ValidationError(msg)
        return value

    def validate_new_password(self, value: str) -> str:
        password_validation.validate_password(value, self.context["request"].user)
        return value


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        invalid = serializers.ValidationError(
            {"token": "Invalid or expired reset token"},
        )
        try:
            user_pk = force_str(urlsafe_base64_decode(attrs["uid"]))
            user = User.objects.get(pk=user_pk, is_active=True)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist) as exc:
            raise invalid from exc
        if not default_token_generator.check_token(user, attrs["token"]):
            raise invalid
        try:
            password_validation.validate_password(attrs["new_password"], user)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(
                {"new_password": list(exc.messages)},
            ) from exc
        attrs["user"] = user
        return attrs


class AccountDeleteSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_password(self, value: str) -> str:
        if not self.context["request"].user.check_password(value):
            msg = "Password is incorrect"
            raise serializers.ValidationError(msg)
        return value


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)


class ApprovalSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
