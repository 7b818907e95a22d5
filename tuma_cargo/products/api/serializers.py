from __future__ import annotations

from typing import Any

from rest_framework import serializers

from tuma_cargo.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    discount_percentage = serializers.IntegerField(read_only=True)
    popularity = serializers.DictField(read_only=True)
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)
    last_updated_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "original_price",
            "discount_percentage",
            "currency",
            "image_url",
            "images",
            "category",
            "subcategory",
            "tags",
            "specifications",
            "supplier",
            "stock",
            "shipping",
            "popularity",
            "rating",
            "review_count",
            "featured",
            "status",
            "is_active",
            "created_by",
            "last_updated_by",
            "created_at",
            "updated_at",
        ]
        # Publication state only changes through the status endpoint
        read_only_fields = ["status", "is_active", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if len(value) < 2:  # noqa: PLR2004
            msg = "Product name must be between 2 and 200 characters"
            raise serializers.ValidationError(msg)
        return value

    def validate_description(self, value: str) -> str:
        value = value.strip()
        if len(value) < 10:  # noqa: PLR2004
            msg = "Description must be between 10 and 1000 characters"
            raise serializers.ValidationError(msg)
        return value

    def validate_category(self, value: str) -> str:
        value = value.strip()
        if not 2 <= len(value) <= 50:  # noqa: PLR2004
            msg = "Category must be between 2 and 50 characters"
            raise serializers.ValidationError(msg)
        return value

    def validate_images(self, value: Any) -> list[str]:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            msg = "Images must be a list of URLs"
            raise serializers.ValidationError(msg)
        return [v for v in value if v.strip()]

    def validate_tags(self, value: Any) -> list[str]:
        if not isinstance(value, list):
            msg = "Tags must be a list"
            raise serializers.ValidationError(msg)
        return [str(v).strip() for v in value if str(v).strip()]

    def validate_supplier(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            msg = "Supplier must be an object"
            raise serializers.ValidationError(msg)
        platform = value.get("platform")
        if platform is not None and platform not in Product.Platform.values:
            msg = f"Unknown supplier platform '{platform}'"
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if self.instance is None:
            images = attrs.get("images") or []
            if not attrs.get("image_url") and not images:
                raise serializers.ValidationError(
                    {"image_url": "At least one image is required"},
                )
        return attrs


class ProductCreateSerializer(ProductSerializer):
    status = serializers.ChoiceField(
        choices=Product.Status.choices,
        default=Product.Status.PUBLISHED,
    )

    class Meta(ProductSerializer.Meta):
        read_only_fields = ["is_active", "created_at", "updated_at"]


class ProductStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Product.Status.choices)


class ProductIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
        max_length=100,
    )
