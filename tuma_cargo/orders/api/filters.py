import django_filters
from django.db.models import Q

from tuma_cargo.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Order.Status.choices)
    priority = django_filters.ChoiceFilter(choices=Order.Priority.choices)
    payment_status = django_filters.ChoiceFilter(choices=Order.PaymentStatus.choices)
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = ["status", "priority", "payment_status", "is_urgent", "search"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(order_id__icontains=value) | Q(product_name__icontains=value),
        )
