from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.validators import URLValidator
from rest_framework import serializers

from tuma_cargo.orders.models import Order
from tuma_cargo.orders.models import OrderNote
from tuma_cargo.orders.models import OrderStage
from tuma_cargo.users.api.permissions import is_admin_user
from tuma_cargo.users.models import User


class OrderUserSerializer(serializers.ModelSerializer[User]):
    class Meta:
        model = User
        fields = ["id", "full_name", "email", "phone"]
        read_only_fields = fields


class OrderStageSerializer(serializers.ModelSerializer[OrderStage]):
    updated_by = OrderUserSerializer(read_only=True)

    class Meta:
        model = OrderStage
        fields = ["id", "stage", "timestamp", "updated_by", "notes", "attachments"]
        read_only_fields = fields


class OrderNoteSerializer(serializers.ModelSerializer[OrderNote]):
    created_by = OrderUserSerializer(read_only=True)

    class Meta:
        model = OrderNote
        fields = ["id", "text", "created_by", "created_at"]
        read_only_fields = ["id", "created_by", "created_at"]

    def validate_text(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Note text is required"
            raise serializers.ValidationError(msg)
        return value


class OrderListSerializer(serializers.ModelSerializer[Order]):
    user = OrderUserSerializer(read_only=True)
    assigned_to = OrderUserSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "user",
            "product_name",
            "product_image",
            "quantity",
            "unit_price",
            "total_price",
            "shipping_cost",
            "final_amount",
            "currency",
            "status",
            "priority",
            "payment_status",
            "is_urgent",
            "assigned_to",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderListSerializer):
    stage_history = OrderStageSerializer(many=True, read_only=True)
    notes = serializers.SerializerMethodField()

    class Meta(OrderListSerializer.Meta):
        fields = [
            *OrderListSerializer.Meta.fields,
            "product_link",
            "description",
            "specifications",
            "shipping_address",
            "tracking_info",
            "payment_method",
            "stage_history",
            "notes",
        ]
        read_only_fields = fields

    def get_notes(self, obj: Order) -> list[dict[str, Any]]:
        # Internal notes are for staff only
        request = self.context.get("request")
        if request is None or not is_admin_user(request.user):
            return []
        return OrderNoteSerializer(obj.notes.all(), many=True).data


class OrderCreateSerializer(serializers.ModelSerializer[Order]):
    product_link = serializers.CharField(
        max_length=1000,
        required=False,
        allow_blank=True,
        validators=[URLValidator(schemes=["http", "https"])],
    )
    total_price = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal(0),
        required=False,
    )

    class Meta:
        model = Order
        fields = [
            "product_name",
            "product_link",
            "product_image",
            "quantity",
            "unit_price",
            "total_price",
            "shipping_cost",
            "currency",
            "priority",
            "description",
            "specifications",
            "is_urgent",
        ]

    def validate_product_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Product name is required"
            raise serializers.ValidationError(msg)
        return value

    def validate_quantity(self, value: int) -> int:
        if not 1 <= value <= 10000:  # noqa: PLR2004
            msg = "Quantity must be between 1 and 10000"
            raise serializers.ValidationError(msg)
        return value

    def validate_specifications(self, value: Any) -> dict:
        if not isinstance(value, dict):
            msg = "Specifications must be an object"
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get("total_price") is None:
            attrs["total_price"] = attrs["quantity"] * attrs["unit_price"]
        return attrs


class OrderUpdateSerializer(serializers.ModelSerializer[Order]):
    """Admin edit of an order; ``stage_notes`` annotates a status change."""

    stage_notes = serializers.CharField(
        max_length=1000,
        required=False,
        allow_blank=True,
        write_only=True,
    )
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role__in=["admin", "super_admin"]),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Order
        fields = [
            "product_name",
            "product_image",
            "quantity",
            "unit_price",
            "total_price",
            "shipping_cost",
            "currency",
            "status",
            "priority",
            "description",
            "specifications",
            "tracking_info",
            "payment_status",
            "payment_method",
            "assigned_to",
            "is_urgent",
            "stage_notes",
        ]

    def validate_quantity(self, value: int) -> int:
        if not 1 <= value <= 10000:  # noqa: PLR2004
            msg = "Quantity must be between 1 and 10000"
            raise serializers.ValidationError(msg)
        return value


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
