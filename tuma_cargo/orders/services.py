from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from django.db import transaction

from .models import Order
from .models import OrderNote
from .models import OrderStage

if TYPE_CHECKING:  # pragma: no cover - typing only
    from tuma_cargo.users.models import User

logger = logging.getLogger(__name__)

ORDER_CREATED_NOTE = "Order created by customer"


@transaction.atomic
def create_order(user: User, data: dict[str, Any]) -> Order:
    """Create an order for ``user`` with a snapshot of their shipping address."""
    order = Order.objects.create(
        user=user,
        shipping_address=user.address_snapshot(),
        **data,
    )
    OrderStage.objects.create(
        order=order,
        stage=order.status,
        updated_by=user,
        notes=ORDER_CREATED_NOTE,
    )
    logger.info("Order %s created by user %s", order.order_id, user.pk)
    return order


@transaction.atomic
def change_status(
    order: Order,
    new_status: str,
    actor: User,
    notes: str = "",
    attachments: list | None = None,
) -> bool:
    """Move ``order`` to ``new_status`` and append a stage row.

    Returns False when the order already has that status.
    """
    if order.status == new_status:
        return False
    order.status = new_status
    order.save(update_fields=["status", "updated_at"])
    OrderStage.objects.create(
        order=order,
        stage=new_status,
        updated_by=actor,
        notes=notes,
        attachments=attachments or [],
    )
    logger.info(
        "Order %s moved to %s by user %s", order.order_id, new_status, actor.pk
    )
    return True


@transaction.atomic
def update_order(order: Order, data: dict[str, Any], actor: User) -> Order:
    """Apply an admin edit; a status change goes through ``change_status``."""
    data = dict(data)
    new_status = data.pop("status", None)
    notes = data.pop("stage_notes", "")
    for field, value in data.items():
        setattr(order, field, value)
    if order.assigned_to_id is None:
        order.assigned_to = actor
    order.save()
    if new_status is not None:
        change_status(order, new_status, actor, notes=notes)
    return order


def cancel_order(order: Order, actor: User) -> Order:
    change_status(order, Order.Status.CANCELLED, actor, notes="Cancelled by customer")
    return order


def add_note(order: Order, text: str, actor: User) -> OrderNote:
    return OrderNote.objects.create(order=order, text=text, created_by=actor)
