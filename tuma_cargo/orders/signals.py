import logging

from django.db.models.signals import post_save
from django.db.models.signals import pre_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from tuma_cargo.notifications.services import notify_order_event
from tuma_cargo.realtime.events.orders import publish_order_created

from .models import Order

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Order)
def store_old_status(sender, instance, **kwargs):
    if instance.pk:
        instance._old_status = (  # noqa: SLF001
            Order.objects.filter(pk=instance.pk)
            .values_list("status", flat=True)
            .first()
        )
    else:
        instance._old_status = None  # noqa: SLF001


@receiver(post_save, sender=Order)
def order_notifications(sender, instance, created, **kwargs):
    if created:
        notify_order_event(instance, "created")
        on_commit(lambda: publish_order_created(instance), robust=True)
        return

    old_status = getattr(instance, "_old_status", None)
    if old_status is None or old_status == instance.status:
        return
    instance._old_status = instance.status  # noqa: SLF001
    if instance.status == Order.Status.CANCELLED:
        notify_order_event(instance, "cancelled")
    else:
        notify_order_event(instance, "status_changed")
