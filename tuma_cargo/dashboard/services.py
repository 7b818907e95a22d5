"""Aggregates behind the admin dashboard and analytics screens."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any

from django.contrib.auth import get_user_model
from django.db.models import Avg
from django.db.models import Count
from django.db.models import Q
from django.db.models import Sum
from django.db.models.functions import TruncDate
from django.db.models.functions import TruncMonth
from django.utils import timezone

from tuma_cargo.orders.models import Order
from tuma_cargo.products.models import Product

ANALYTICS_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}
DEFAULT_PERIOD = "30d"
ACTIVE_USER_WINDOW = timedelta(days=30)


def _month_start(value, months_back: int = 0):
    year, month = value.year, value.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return value.replace(
        year=year,
        month=month,
        day=1,
        hour=0,
        minute=0,
        second=0,
        microsecond=0,
    )


def _money(value) -> Decimal:
    return value if value is not None else Decimal("0.00")


def monthly_growth(now=None) -> float:
    """Percent change of orders created this month versus last month."""
    now = now or timezone.localtime()
    this_month = _month_start(now)
    last_month = _month_start(now, 1)
    this_count = Order.objects.filter(created_at__gte=this_month).count()
    last_count = Order.objects.filter(
        created_at__gte=last_month,
        created_at__lt=this_month,
    ).count()
    if last_count == 0:
        return 0.0
    return round((this_count - last_count) / last_count * 100, 1)


def order_status_breakdown(orders) -> list[dict[str, Any]]:
    return [
        {
            "status": row["status"],
            "count": row["count"],
            "total_value": _money(row["total_value"]),
            "avg_value": round(_money(row["avg_value"]), 2),
        }
        for row in orders.order_by()
        .values("status")
        .annotate(
            count=Count("id"),
            total_value=Sum("final_amount"),
            avg_value=Avg("final_amount"),
        )
        .order_by("status")
    ]


def dashboard_summary() -> dict[str, Any]:
    User = get_user_model()  # noqa: N806
    now = timezone.localtime()
    revenue_orders = Order.objects.filter(status__in=Order.REVENUE_STATUSES)

    monthly_revenue = [
        {
            "month": row["month"].strftime("%Y-%m"),
            "revenue": _money(row["revenue"]),
            "orders": row["orders"],
        }
        for row in revenue_orders.filter(created_at__gte=_month_start(now, 11))
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(revenue=Sum("final_amount"), orders=Count("id"))
        .order_by("month")
    ]
    registrations = [
        {"date": row["day"].isoformat(), "count": row["count"]}
        for row in User.objects.filter(created_at__gte=now - timedelta(days=30))
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(count=Count("id"))
        .order_by("day")
    ]
    top_products = [
        {"id": p.pk, "name": p.name, "orders": p.orders_count, "views": p.views}
        for p in Product.objects.active().order_by("-orders_count", "-views")[:5]
    ]

    return {
        "stats": {
            "total_users": User.objects.filter(role="user").count(),
            "total_orders": Order.objects.count(),
            "pending_orders": Order.objects.filter(status=Order.Status.PENDING).count(),
            "total_products": Product.objects.active().count(),
            "total_revenue": _money(
                revenue_orders.aggregate(total=Sum("final_amount"))["total"],
            ),
            "monthly_growth": monthly_growth(now),
        },
        "order_stats": order_status_breakdown(Order.objects.all()),
        "recent_orders": Order.objects.select_related("user", "assigned_to")
        .order_by("-created_at")[:10],
        "monthly_revenue": monthly_revenue,
        "top_products": top_products,
        "user_registrations": registrations,
    }


def analytics(period: str) -> dict[str, Any]:
    User = get_user_model()  # noqa: N806
    if period not in ANALYTICS_PERIODS:
        period = DEFAULT_PERIOD
    now = timezone.now()
    since = now - ANALYTICS_PERIODS[period]
    orders = Order.objects.filter(created_at__gte=since)

    daily_trends = [
        {
            "date": row["day"].isoformat(),
            "orders": row["orders"],
            "revenue": _money(row["revenue"]),
        }
        for row in orders.order_by()
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(orders=Count("id"), revenue=Sum("final_amount"))
        .order_by("day")
    ]
    product_performance = [
        {
            "id": p.pk,
            "name": p.name,
            "category": p.category,
            "orders": p.orders_count,
            "views": p.views,
            "conversion_rate": round(p.orders_count / p.views, 4) if p.views else 0,
        }
        for p in Product.objects.active().order_by("-orders_count", "-views")[:10]
    ]
    engagement = [
        {"role": row["role"], "count": row["count"], "active": row["active"]}
        for row in User.objects.order_by()
        .values("role")
        .annotate(
            count=Count("id"),
            active=Count("id", filter=Q(last_login__gte=now - ACTIVE_USER_WINDOW)),
        )
        .order_by("role")
    ]
    return {
        "period": period,
        "order_analytics": order_status_breakdown(orders),
        "daily_trends": daily_trends,
        "product_performance": product_performance,
        "user_engagement": engagement,
    }
