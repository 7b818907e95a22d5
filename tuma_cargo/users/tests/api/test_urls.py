from django.urls import resolve
from django.urls import reverse


def test_user_profile():
    assert reverse("api_v1:users-profile") == "/api/v1/users/profile/"
    assert resolve("/api/v1/users/profile/").view_name == "api_v1:users-profile"


def test_unversioned_alias():
    assert reverse("api:orders-list") == "/api/orders/"
    assert resolve("/api/orders/").view_name == "api:orders-list"


def test_auth_routes():
    assert reverse("api_v1:auth:login") == "/api/v1/auth/login/"
    assert reverse("api_v1:auth:reset-password") == "/api/v1/auth/reset-password/"


def test_resource_routes():
    assert reverse("api_v1:products-featured") == "/api/v1/products/featured/"
    assert reverse("api_v1:orders-detail", kwargs={"pk": 5}) == "/api/v1/orders/5/"
    assert reverse("api_v1:chat-support-messages") == "/api/v1/chat/messages/"
    assert reverse("api_v1:admin-users-list") == "/api/v1/admin/users/"
    assert reverse("api_v1:notifications-collection") == "/api/v1/notifications/"
    assert reverse("api_v1:socket:active-users") == "/api/v1/socket/active-users/"
    assert reverse("api_v1:upload:image") == "/api/v1/upload/image/"


def test_schema_docs_available_under_v1():
    assert resolve("/api/v1/schema/").view_name == "api-schema-v1"
    assert resolve("/api/v1/docs/").view_name == "api-docs-v1"
