from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from tuma_cargo.notifications.models import Notification
from tuma_cargo.realtime.socketio import emit_event_to_user

NOTIFICATION_EVENT = "notification:new"


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "userId": notification.recipient_id,
        "type": notification.notification_type,
        "title": notification.title,
        "message": notification.message,
        "read": notification.is_read,
        "data": notification.data,
        "link": notification.link,
        "icon": notification.icon,
        "priority": notification.priority,
        "expiresAt": (
            notification.expires_at.isoformat() if notification.expires_at else None
        ),
        "createdAt": notification.created_at.isoformat(),
    }


def publish_notification_created(notification: Notification) -> None:
    """Publish a newly created Notification to the recipient in realtime."""

    payload = build_notification_payload(notification)
    emit_event_to_user(notification.recipient_id, NOTIFICATION_EVENT, payload)
