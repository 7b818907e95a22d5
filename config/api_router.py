from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from tuma_cargo.chat.api.views import ChatViewSet
from tuma_cargo.cms.api.views import AdminSettingsView
from tuma_cargo.cms.api.views import PublicSettingsView
from tuma_cargo.dashboard.views import AdminDashboardView
from tuma_cargo.dashboard.views import AnalyticsView
from tuma_cargo.notifications.api.views import NotificationViewSet
from tuma_cargo.orders.api.views import OrderViewSet
from tuma_cargo.products.api.views import ProductViewSet
from tuma_cargo.users.api.admin_views import AdminUserViewSet
from tuma_cargo.users.api.views import UserViewSet

from .health import health as health_view

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet, basename="users")
router.register("admin/users", AdminUserViewSet, basename="admin-users")
router.register("products", ProductViewSet, basename="products")
router.register("orders", OrderViewSet, basename="orders")
router.register("chat", ChatViewSet, basename="chat")
router.register("notifications", NotificationViewSet, basename="notifications")

# The router has no DELETE on collections; clearing notifications is wired here
notification_collection = NotificationViewSet.as_view(
    {"get": "list", "post": "create", "delete": "clear"},
)


app_name = "api"
# Prepend includes to ensure they take precedence over router routes
urlpatterns = [
    path("health/", health_view, name="health"),
    path("auth/", include("tuma_cargo.users.api.auth_urls")),
    path(
        "audit/",
        include(("tuma_cargo.audit.api.urls", "audit"), namespace="audit"),
    ),
    path("admin/settings/", AdminSettingsView.as_view(), name="admin-settings"),
    path("admin/dashboard/", AdminDashboardView.as_view(), name="admin-dashboard"),
    path("admin/analytics/", AnalyticsView.as_view(), name="admin-analytics"),
    path("public/settings/", PublicSettingsView.as_view(), name="public-settings"),
    path("socket/", include("tuma_cargo.realtime.api.urls")),
    path("upload/", include("tuma_cargo.uploads.urls")),
    path(
        "notifications/",
        notification_collection,
        name="notifications-collection",
    ),
    *router.urls,
]
