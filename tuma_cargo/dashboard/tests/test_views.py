from decimal import Decimal
from http import HTTPStatus

import pytest

from tuma_cargo.orders.models import Order
from tuma_cargo.orders.tests.factories import OrderFactory
from tuma_cargo.products.tests.factories import ProductFactory

DASHBOARD_URL = "/api/v1/admin/dashboard/"
ANALYTICS_URL = "/api/v1/admin/analytics/"


@pytest.mark.django_db
class TestAdminDashboard:
    def setup_method(self):
        self.delivered = OrderFactory(status=Order.Status.DELIVERED)
        self.pending = OrderFactory()
        ProductFactory(orders_count=4, views=10, name="Phone case")
        ProductFactory(status="draft")

    def test_summary_stats(self, admin_api_client):
        res = admin_api_client.get(DASHBOARD_URL)
        assert res.status_code == HTTPStatus.OK
        stats = res.data["stats"]
        assert stats["total_users"] == 2  # noqa: PLR2004
        assert stats["total_orders"] == 2  # noqa: PLR2004
        assert stats["pending_orders"] == 1
        assert stats["total_products"] == 1
        assert stats["total_revenue"] == self.delivered.final_amount
        assert stats["monthly_growth"] == 0.0

    def test_recent_orders_and_breakdown(self, admin_api_client):
        res = admin_api_client.get(DASHBOARD_URL)
        assert {o["order_id"] for o in res.data["recent_orders"]} == {
            self.delivered.order_id,
            self.pending.order_id,
        }
        statuses = {row["status"]: row["count"] for row in res.data["order_stats"]}
        assert statuses == {"delivered": 1, "pending": 1}
        assert res.data["top_products"][0]["name"] == "Phone case"
        assert len(res.data["monthly_revenue"]) == 1

    def test_customer_is_forbidden(self, user_client):
        assert user_client.get(DASHBOARD_URL).status_code == HTTPStatus.FORBIDDEN


@pytest.mark.django_db
class TestAnalytics:
    def test_default_period(self, admin_api_client):
        OrderFactory()
        res = admin_api_client.get(ANALYTICS_URL)
        assert res.status_code == HTTPStatus.OK
        assert res.data["period"] == "30d"
        assert res.data["daily_trends"][0]["orders"] == 1
        assert res.data["daily_trends"][0]["revenue"] == Decimal("20.00")

    def test_unknown_period_falls_back(self, admin_api_client):
        res = admin_api_client.get(ANALYTICS_URL, {"period": "5y"})
        assert res.data["period"] == "30d"

    def test_conversion_rate_and_engagement(self, admin_api_client):
        ProductFactory(orders_count=1, views=4)
        res = admin_api_client.get(ANALYTICS_URL, {"period": "7d"})
        assert res.data["period"] == "7d"
        assert res.data["product_performance"][0]["conversion_rate"] == 0.25  # noqa: PLR2004
        roles = {row["role"]: row["count"] for row in res.data["user_engagement"]}
        assert roles["admin"] == 1
