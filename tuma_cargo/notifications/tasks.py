import logging

from celery import shared_task
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.purge_expired")
def purge_expired_notifications() -> int:
    deleted, _ = Notification.objects.filter(expires_at__lte=timezone.now()).delete()
    if deleted:
        logger.info("Purged %s expired notifications", deleted)
    return deleted
