"""Builders for the notifications raised by orders, chat and account review.

Notification creation is a side effect of the operation that triggers it: a
failure is logged and swallowed so the order, message or review still
completes. Each insert runs in its own savepoint for that reason.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from django.db import DatabaseError
from django.db import transaction

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover - typing only
    from datetime import datetime

    from tuma_cargo.chat.models import Message
    from tuma_cargo.orders.models import Order
    from tuma_cargo.users.models import User

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 100


def create_notification(  # noqa: PLR0913
    recipient: User | int,
    notification_type: str,
    title: str,
    message: str,
    *,
    data: dict[str, Any] | None = None,
    link: str = "",
    icon: str = "bell",
    priority: str = Notification.Priority.MEDIUM,
    expires_at: datetime | None = None,
) -> Notification | None:
    recipient_id = recipient if isinstance(recipient, int) else recipient.pk
    try:
        with transaction.atomic():
            return Notification.objects.create(
                recipient_id=recipient_id,
                notification_type=notification_type,
                title=title[:100],
                message=message[:500],
                data=data or {},
                link=link,
                icon=icon,
                priority=priority,
                expires_at=expires_at,
            )
    except DatabaseError:
        logger.warning(
            "Failed to create %s notification for user %s",
            notification_type,
            recipient_id,
            exc_info=True,
        )
        return None


def notify_order_event(order: Order, action: str) -> Notification | None:
    """Tell the order owner about ``action`` (created, status_changed, cancelled)."""
    product = order.product_name
    ref = order.order_id
    if action == "created":
        notification_type = Notification.Type.ORDER_CREATED
        title = "Order Created"
        message = f'Your order "{product}" has been created successfully. Order ID: {ref}'
        priority = Notification.Priority.HIGH
    elif action == "status_changed":
        notification_type = Notification.Type.ORDER_UPDATE
        title = "Order Status Updated"
        message = f'Your order "{product}" ({ref}) status changed to {order.status}'
        priority = Notification.Priority.HIGH
    elif action == "cancelled":
        notification_type = Notification.Type.ORDER_CANCELLED
        title = "Order Cancelled"
        message = f'Your order "{product}" ({ref}) has been cancelled'
        priority = Notification.Priority.URGENT
    else:
        logger.warning("Unknown order notification action %r", action)
        return None

    return create_notification(
        order.user_id,
        notification_type,
        title,
        message,
        data={
            "order_id": ref,
            "order_pk": order.pk,
            "status": order.status,
            "product_name": product,
        },
        link=f"/orders/{order.pk}",
        icon="package",
        priority=priority,
    )


def message_preview(message: Message) -> str:
    text = (message.text or "").strip()
    if not text and message.file_url:
        text = f"Sent {message.file_name}" if message.file_name else "Sent a file"
    if not text:
        return "You have a new message"
    if len(text) > MESSAGE_PREVIEW_LENGTH:
        return text[:MESSAGE_PREVIEW_LENGTH] + "..."
    return text


def notify_new_message(message: Message) -> list[Notification]:
    """Notify every participant of the message's chat except its sender."""
    sender = message.sender
    sender_name = sender.full_name or sender.email or "User"
    preview = message_preview(message)
    recipient_ids = (
        message.chat.participants.exclude(pk=sender.pk)
        .values_list("pk", flat=True)
        .order_by("pk")
    )
    created = []
    for recipient_id in recipient_ids:
        notification = create_notification(
            recipient_id,
            Notification.Type.MESSAGE_RECEIVED,
            f"New message from {sender_name}",
            preview,
            data={
                "chat_id": message.chat_id,
                "message_id": message.pk,
                "sender_id": sender.pk,
                "sender_name": sender_name,
            },
            link=f"/messages?chat={message.chat_id}",
            icon="message-circle",
            priority=Notification.Priority.HIGH,
        )
        if notification is not None:
            created.append(notification)
    return created


def notify_account_review(user: User, *, approved: bool) -> Notification | None:
    if approved:
        return create_notification(
            user,
            Notification.Type.ACCOUNT_APPROVED,
            "Account Approved",
            "Your account has been approved. You can now place orders and "
            "access all features.",
            data={"user_id": user.pk, "approved": True},
            link="/dashboard",
            icon="check-circle",
            priority=Notification.Priority.HIGH,
        )
    return create_notification(
        user,
        Notification.Type.ACCOUNT_REJECTED,
        "Account Rejected",
        "Your account registration has been rejected. Please contact support "
        "for more information.",
        data={"user_id": user.pk, "approved": False},
        link="/profile",
        icon="x-circle",
        priority=Notification.Priority.HIGH,
    )
