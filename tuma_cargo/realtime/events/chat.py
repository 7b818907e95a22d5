from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from tuma_cargo.realtime.socketio import ROOM_ADMINS
from tuma_cargo.realtime.socketio import emit_event_to_rooms
from tuma_cargo.realtime.socketio import room_for_user
from tuma_cargo.users.api.permissions import is_admin_user

if TYPE_CHECKING:  # import for type checking only
    from tuma_cargo.chat.models import Message

MESSAGE_EVENT = "message:new"


def build_message_payload(message: Message) -> dict[str, Any]:
    sender = message.sender
    return {
        "chatId": message.chat_id,
        "message": {
            "id": message.pk,
            "senderId": sender.pk,
            "senderName": sender.full_name or sender.email,
            "senderRole": sender.role,
            "content": message.text,
            "type": message.message_type,
            "fileUrl": message.file_url or None,
            "fileName": message.file_name or None,
            "fileSize": message.file_size,
            "timestamp": message.created_at.isoformat(),
            "status": "sent",
        },
    }


def rooms_for_message(message: Message) -> list[str]:
    """Rooms of every participant except the sender, plus admins for customers."""

    recipient_ids = (
        message.chat.participants.exclude(pk=message.sender_id)
        .order_by("pk")
        .values_list("pk", flat=True)
    )
    rooms = [room_for_user(pk) for pk in recipient_ids]
    if not is_admin_user(message.sender):
        rooms.append(ROOM_ADMINS)
    return rooms


def publish_new_message(message: Message, skip_sid: str | None = None) -> None:
    rooms = rooms_for_message(message)
    if not rooms:
        return
    emit_event_to_rooms(
        rooms,
        MESSAGE_EVENT,
        build_message_payload(message),
        skip_sid=skip_sid,
    )
