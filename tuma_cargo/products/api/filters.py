import django_filters
from django.db.models import Q

from tuma_cargo.products.models import Product

SORT_ORDERINGS = {
    "price_asc": ["price"],
    "price_desc": ["-price"],
    "popular": ["-orders_count", "-views"],
    "rating": ["-rating", "-review_count"],
    "newest": ["-created_at"],
}
DEFAULT_ORDERING = ["-featured", "-orders_count", "-created_at"]


class ProductFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(lookup_expr="icontains")
    subcategory = django_filters.CharFilter(lookup_expr="icontains")
    featured = django_filters.BooleanFilter()
    status = django_filters.ChoiceFilter(choices=Product.Status.choices)
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_search")
    sort_by = django_filters.CharFilter(method="filter_sort")

    class Meta:
        model = Product
        fields = [
            "category",
            "subcategory",
            "featured",
            "status",
            "min_price",
            "max_price",
            "q",
            "sort_by",
        ]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(category__icontains=value)
            | Q(tags__icontains=value),
        )

    def filter_sort(self, queryset, name, value):
        return queryset.order_by(*SORT_ORDERINGS.get(value, DEFAULT_ORDERING))
