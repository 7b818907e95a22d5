from __future__ import annotations

from django.db.models import Count
from django.http import Http404
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from tuma_cargo.audit.utils import log_action
from tuma_cargo.products.models import Product
from tuma_cargo.users.api.permissions import IsAdmin
from tuma_cargo.users.api.permissions import IsSuperAdmin
from tuma_cargo.users.api.permissions import is_admin_user

from .filters import DEFAULT_ORDERING
from .filters import ProductFilter
from .serializers import ProductCreateSerializer
from .serializers import ProductIdsSerializer
from .serializers import ProductSerializer
from .serializers import ProductStatusSerializer

PUBLIC_ACTIONS = {"list", "retrieve", "featured", "by_ids"}
SUPER_ADMIN_ACTIONS = {"create", "destroy"}


@extend_schema_view(
    list=extend_schema(
        tags=["Products"],
        parameters=[
            OpenApiParameter("q", str, description="Search name, description, tags"),
            OpenApiParameter(
                "sort_by",
                str,
                enum=["price_asc", "price_desc", "popular", "rating", "newest"],
            ),
        ],
    ),
    retrieve=extend_schema(tags=["Products"]),
    create=extend_schema(tags=["Products"], request=ProductCreateSerializer),
    update=extend_schema(tags=["Products"]),
    partial_update=extend_schema(tags=["Products"]),
    destroy=extend_schema(tags=["Products"]),
)
class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    queryset = Product.objects.all()

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        if self.action in SUPER_ADMIN_ACTIONS:
            return [IsSuperAdmin()]
        return [IsAdmin()]

    def get_serializer_class(self):
        if self.action == "create":
            return ProductCreateSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        qs = Product.objects.all()
        if self.action in {"list", "featured", "by_ids"}:
            qs = qs.active()
        return qs.order_by(*DEFAULT_ORDERING)

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["categories"] = list(
            Product.objects.active()
            .order_by("category")
            .values_list("category", flat=True)
            .distinct(),
        )
        return response

    def retrieve(self, request, *args, **kwargs):
        product = self.get_object()
        if not product.is_active and not is_admin_user(request.user):
            raise Http404
        product.record_view()
        return Response(self.get_serializer(product).data)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user, last_updated_by=self.request.user)

    def perform_update(self, serializer):
        serializer.save(last_updated_by=self.request.user)

    def perform_destroy(self, instance):
        log_action(
            "product_deleted",
            request=self.request,
            target=instance,
            message=f"name={instance.name}",
        )
        instance.delete()

    @extend_schema(
        tags=["Products"],
        parameters=[OpenApiParameter("limit", int)],
        responses=ProductSerializer(many=True),
    )
    @action(detail=False, methods=["get"])
    def featured(self, request):
        try:
            limit = int(request.query_params.get("limit", "8"))
        except (TypeError, ValueError):
            limit = 8
        limit = max(1, min(limit, 50))
        products = self.get_queryset().filter(featured=True)[:limit]
        return Response(
            {"results": self.get_serializer(products, many=True).data},
        )

    @extend_schema(
        tags=["Products"],
        request=ProductIdsSerializer,
        responses=ProductSerializer(many=True),
    )
    @action(detail=False, methods=["post"], url_path="by-ids")
    def by_ids(self, request):
        serializer = ProductIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids: list[int] = serializer.validated_data["ids"]
        found = self.get_queryset().in_bulk(ids)
        # Preserve the caller's ordering, skipping unknown or inactive ids
        ordered = [found[pk] for pk in dict.fromkeys(ids) if pk in found]
        return Response(
            {"results": self.get_serializer(ordered, many=True).data},
        )

    @extend_schema(tags=["Products"], request=ProductStatusSerializer)
    @action(detail=True, methods=["put"], url_path="status")
    def set_status(self, request, pk=None):
        product = self.get_object()
        serializer = ProductStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product.status = serializer.validated_data["status"]
        product.last_updated_by = request.user
        product.save(update_fields=["status", "last_updated_by", "updated_at"])
        return Response(
            {
                "detail": f"Product {product.status} successfully",
                "product": self.get_serializer(product).data,
            },
        )

    @extend_schema(tags=["Products"], request=None)
    @action(detail=True, methods=["put"], url_path="toggle-featured")
    def toggle_featured(self, request, pk=None):
        product = self.get_object()
        product.featured = not product.featured
        product.last_updated_by = request.user
        product.save(update_fields=["featured", "last_updated_by", "updated_at"])
        return Response(
            {
                "detail": "Product featured status updated",
                "product": self.get_serializer(product).data,
            },
        )

    @extend_schema(tags=["Products"], responses=ProductSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="admin/all")
    def admin_all(self, request):
        qs = self.filter_queryset(Product.objects.all().order_by("-created_at"))
        counts = {
            row["status"]: row["count"]
            for row in Product.objects.values("status").annotate(count=Count("id"))
        }
        stats = {
            "total": sum(counts.values()),
            "published": counts.get(Product.Status.PUBLISHED, 0),
            "draft": counts.get(Product.Status.DRAFT, 0),
            "featured": Product.objects.filter(featured=True).count(),
        }
        page = self.paginate_queryset(qs)
        response = self.get_paginated_response(
            self.get_serializer(page, many=True).data,
        )
        response.data["stats"] = stats
        return response
