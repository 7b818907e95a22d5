from decimal import Decimal
from http import HTTPStatus

import pytest
from rest_framework.test import APIClient

from tuma_cargo.audit.models import AuditLog
from tuma_cargo.products.models import Product
from tuma_cargo.products.tests.factories import ProductFactory
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import SuperAdminFactory
from tuma_cargo.users.tests.factories import UserFactory

BASE_URL = "/api/v1/products/"


def product_payload(**overrides):
    data = {
        "name": "Smart Watch",
        "description": "Waterproof smart watch with heart rate sensor.",
        "price": "35.00",
        "original_price": "50.00",
        "category": "Electronics",
        "images": ["https://cdn.example.com/watch.webp"],
        "tags": ["wearable"],
        "supplier": {"name": "Dongguan Wearables", "platform": "1688"},
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestPublicCatalog:
    def setup_method(self):
        self.client = APIClient()

    def test_list_hides_drafts_and_lists_categories(self):
        visible = ProductFactory(category="Fashion")
        ProductFactory(status=Product.Status.DRAFT, category="Hidden")
        res = self.client.get(BASE_URL)
        assert res.status_code == HTTPStatus.OK
        assert [p["id"] for p in res.data["results"]] == [visible.pk]
        assert res.data["categories"] == ["Fashion"]

    def test_search_and_price_filters(self):
        cheap = ProductFactory(name="Cheap earbuds", price=Decimal("5.00"))
        ProductFactory(name="Premium earbuds", price=Decimal("80.00"))
        ProductFactory(name="Desk lamp", price=Decimal("6.00"))
        res = self.client.get(BASE_URL, {"q": "earbuds", "max_price": "10"})
        assert [p["id"] for p in res.data["results"]] == [cheap.pk]

    def test_sort_by_price(self):
        high = ProductFactory(price=Decimal("30.00"))
        low = ProductFactory(price=Decimal("3.00"))
        res = self.client.get(BASE_URL, {"sort_by": "price_asc"})
        assert [p["id"] for p in res.data["results"]] == [low.pk, high.pk]

    def test_retrieve_counts_view(self):
        product = ProductFactory()
        res = self.client.get(f"{BASE_URL}{product.pk}/")
        assert res.status_code == HTTPStatus.OK
        assert res.data["popularity"]["views"] == 1
        product.refresh_from_db()
        assert product.views == 1

    def test_retrieve_draft_is_hidden(self):
        product = ProductFactory(status=Product.Status.DRAFT)
        res = self.client.get(f"{BASE_URL}{product.pk}/")
        assert res.status_code == HTTPStatus.NOT_FOUND

    def test_featured(self):
        featured = ProductFactory(featured=True)
        ProductFactory()
        res = self.client.get(f"{BASE_URL}featured/", {"limit": 5})
        assert [p["id"] for p in res.data["results"]] == [featured.pk]

    def test_by_ids_preserves_order_and_skips_unknown(self):
        first = ProductFactory()
        second = ProductFactory()
        res = self.client.post(
            f"{BASE_URL}by-ids/",
            {"ids": [second.pk, 9999, first.pk]},
            format="json",
        )
        assert res.status_code == HTTPStatus.OK
        assert [p["id"] for p in res.data["results"]] == [second.pk, first.pk]


@pytest.mark.django_db
class TestProductManagement:
    def setup_method(self):
        self.client = APIClient()
        self.admin = AdminFactory()
        self.super_admin = SuperAdminFactory()

    def test_only_super_admin_creates(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.post(BASE_URL, product_payload(), format="json")
        assert res.status_code == HTTPStatus.FORBIDDEN

        self.client.force_authenticate(user=self.super_admin)
        res = self.client.post(BASE_URL, product_payload(), format="json")
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["discount_percentage"] == 30  # noqa: PLR2004
        assert res.data["image_url"] == "https://cdn.example.com/watch.webp"
        assert res.data["created_by"] == self.super_admin.pk

    def test_create_requires_an_image(self):
        self.client.force_authenticate(user=self.super_admin)
        res = self.client.post(
            BASE_URL,
            product_payload(images=[]),
            format="json",
        )
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert "image_url" in res.data

    def test_create_rejects_unknown_platform(self):
        self.client.force_authenticate(user=self.super_admin)
        res = self.client.post(
            BASE_URL,
            product_payload(supplier={"platform": "ebay"}),
            format="json",
        )
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert "supplier" in res.data

    def test_customer_cannot_update(self):
        product = ProductFactory()
        self.client.force_authenticate(user=UserFactory())
        res = self.client.patch(f"{BASE_URL}{product.pk}/", {"price": "1.00"})
        assert res.status_code == HTTPStatus.FORBIDDEN

    def test_admin_updates_price(self):
        product = ProductFactory()
        self.client.force_authenticate(user=self.admin)
        res = self.client.patch(
            f"{BASE_URL}{product.pk}/",
            {"price": "12.00"},
            format="json",
        )
        assert res.status_code == HTTPStatus.OK
        product.refresh_from_db()
        assert product.price == Decimal("12.00")
        assert product.last_updated_by == self.admin

    def test_status_toggles_visibility(self):
        product = ProductFactory()
        self.client.force_authenticate(user=self.admin)
        res = self.client.put(
            f"{BASE_URL}{product.pk}/status/",
            {"status": Product.Status.DRAFT},
            format="json",
        )
        assert res.status_code == HTTPStatus.OK
        product.refresh_from_db()
        assert product.is_active is False

    def test_toggle_featured(self):
        product = ProductFactory(featured=False)
        self.client.force_authenticate(user=self.admin)
        res = self.client.put(f"{BASE_URL}{product.pk}/toggle-featured/")
        assert res.status_code == HTTPStatus.OK
        assert res.data["product"]["featured"] is True

    def test_admin_all_includes_drafts_and_stats(self):
        ProductFactory()
        ProductFactory(status=Product.Status.DRAFT)
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(f"{BASE_URL}admin/all/")
        assert res.status_code == HTTPStatus.OK
        assert res.data["pagination"]["total"] == 2  # noqa: PLR2004
        assert res.data["stats"]["draft"] == 1
        assert res.data["stats"]["published"] == 1

    def test_delete_is_audited(self):
        product = ProductFactory()
        self.client.force_authenticate(user=self.super_admin)
        res = self.client.delete(f"{BASE_URL}{product.pk}/")
        assert res.status_code == HTTPStatus.NO_CONTENT
        assert AuditLog.objects.filter(action="product_deleted").exists()
