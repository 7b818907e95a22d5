from celery import Celery
from celery.signals import setup_logging

from config.settings import use_default_settings

# Workers default to production; pytest and manage.py pick their own module.
use_default_settings()

app = Celery("tuma_cargo")

# Every CELERY_* setting (broker, eager mode, beat schedule) configures the app.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    """Route worker logs through the same handlers as the web process."""
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up users.tasks and notifications.tasks.
app.autodiscover_tasks()
