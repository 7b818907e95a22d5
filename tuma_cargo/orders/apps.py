from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tuma_cargo.orders"
    verbose_name = _("Orders")

    def ready(self):
        import tuma_cargo.orders.signals  # noqa: F401, PLC0415
