from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include
from django.urls import path
from drf_spectacular.views import SpectacularAPIView
from drf_spectacular.views import SpectacularSwaggerView

from .health import health as health_view

# The web client calls /api/...; integrations pin /api/v1/... Both share one router.
api_routes = "config.api_router"

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path("health/", health_view, name="health"),
    path("api/", include((api_routes, "api"), namespace="api")),
    path("api/v1/", include((api_routes, "api"), namespace="api_v1")),
    path("api/v1/schema/", SpectacularAPIView.as_view(), name="api-schema-v1"),
    path(
        "api/v1/docs/",
        SpectacularSwaggerView.as_view(url_name="api-schema-v1"),
        name="api-docs-v1",
    ),
    # Uploaded product images, videos and chat attachments
    *static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT),
]

if settings.DEBUG:
    urlpatterns += staticfiles_urlpatterns()
