"""Chat operations shared by the REST views and the Socket.IO handlers.

Writes happen under a row lock on the chat so that concurrent senders cannot
overwrite each other's last-message summary. Live delivery and message
notifications run after the write and never undo it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from tuma_cargo.notifications.services import notify_new_message
from tuma_cargo.realtime.events.chat import publish_new_message
from tuma_cargo.users.api.permissions import ADMIN_ROLES
from tuma_cargo.users.api.permissions import is_admin_user

from .models import MAX_MESSAGE_LENGTH
from .models import Chat
from .models import Message

if TYPE_CHECKING:  # pragma: no cover - typing only
    from tuma_cargo.orders.models import Order
    from tuma_cargo.users.models import User

logger = logging.getLogger(__name__)

CONTENT_REQUIRED_MESSAGE = "Message content or file is required"


def can_access_chat(user_id: int, role: str, chat: Chat) -> bool:
    """Admins can see every chat, everybody else only chats they take part in."""
    if role in ADMIN_ROLES:
        return True
    if chat.customer_id == user_id:
        return True
    return chat.participants.filter(pk=user_id).exists()


def first_available_admin() -> User | None:
    return get_user_model().objects.active_admins().order_by("date_joined", "pk").first()


@transaction.atomic
def open_support_chat(user: User) -> tuple[Chat, bool]:
    """Return the user's active support chat and whether it was just created."""
    # Lock the user row so two first messages cannot open two support chats
    get_user_model().objects.select_for_update().filter(pk=user.pk).first()
    chat = (
        Chat.objects.filter(
            chat_type=Chat.Type.SUPPORT,
            customer=user,
            is_active=True,
        )
        .order_by("-updated_at")
        .first()
    )
    if chat is not None:
        return chat, False

    chat = Chat.objects.create(
        chat_type=Chat.Type.SUPPORT,
        customer=user,
        title=f"Support Chat - {user.full_name}",
    )
    participants = [user]
    admin = first_available_admin()
    if admin is not None and admin.pk != user.pk:
        participants.append(admin)
    chat.participants.add(*participants)
    logger.info("Opened support chat %s for user %s", chat.pk, user.pk)
    return chat, True


def get_or_create_support_chat(user: User) -> Chat:
    return open_support_chat(user)[0]


@transaction.atomic
def get_or_create_order_chat(user: User, order: Order, title: str = "") -> tuple[Chat, bool]:
    existing = (
        Chat.objects.filter(order=order, is_active=True, customer=order.user)
        .order_by("-updated_at")
        .first()
    )
    if existing is not None:
        if not existing.participants.filter(pk=user.pk).exists():
            existing.participants.add(user)
        return existing, False

    chat = Chat.objects.create(
        chat_type=Chat.Type.SUPPORT,
        customer=order.user,
        order=order,
        title=title or f"Support for Order {order.order_id}",
    )
    participants = {order.user, user}
    admin = first_available_admin()
    if admin is not None:
        participants.add(admin)
    chat.participants.add(*participants)
    return chat, True


def _resolve_chat_id(chat_id: Any) -> int | None:
    if chat_id in (None, ""):
        return None
    try:
        return int(chat_id)
    except (TypeError, ValueError) as exc:
        msg = "Chat not found"
        raise NotFound(msg) from exc


def send_message(  # noqa: PLR0913
    sender: User,
    *,
    chat_id: Any = None,
    content: str = "",
    message_type: str = Message.Type.TEXT,
    file_url: str = "",
    file_name: str = "",
    file_size: int | None = None,
    system: bool = False,
) -> Message:
    """Store a message and update the chat summary in one transaction.

    Without ``chat_id`` the message goes to the sender's support chat.
    Only ``system=True`` callers may store system messages; those never
    reopen a closed chat.
    """
    content = (content or "").strip()
    if not content and not file_url:
        raise ValidationError({"content": CONTENT_REQUIRED_MESSAGE})
    if len(content) > MAX_MESSAGE_LENGTH:
        msg = f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters"
        raise ValidationError({"content": msg})
    if message_type == Message.Type.SYSTEM and not system:
        raise ValidationError({"type": "System messages cannot be sent by users"})
    if message_type not in Message.Type.values:
        raise ValidationError({"type": f'"{message_type}" is not a valid choice.'})
    if file_url and message_type == Message.Type.TEXT:
        message_type = Message.Type.FILE

    pk = _resolve_chat_id(chat_id)
    with transaction.atomic():
        if pk is None:
            pk = get_or_create_support_chat(sender).pk
        chat = Chat.objects.select_for_update().filter(pk=pk).first()
        if chat is None:
            msg = "Chat not found"
            raise NotFound(msg)

        if not chat.participants.filter(pk=sender.pk).exists():
            if not (is_admin_user(sender) or chat.customer_id == sender.pk):
                msg = "You do not have access to this chat"
                raise PermissionDenied(msg)
            chat.participants.add(sender)

        message = Message.objects.create(
            chat=chat,
            sender=sender,
            message_type=message_type,
            text=content,
            file_url=file_url or "",
            file_name=file_name or "",
            file_size=file_size,
        )
        chat.last_message_text = message.summary
        chat.last_message_at = message.created_at
        chat.last_message_sender = sender
        update_fields = [
            "last_message_text",
            "last_message_at",
            "last_message_sender",
            "updated_at",
        ]
        if chat.status == Chat.Status.CLOSED and not system:
            chat.status = Chat.Status.OPEN
            update_fields.append("status")
        chat.save(update_fields=update_fields)

    logger.debug("Stored message %s in chat %s", message.pk, chat.pk)
    return message


def deliver_message(message: Message, skip_sid: str | None = None) -> None:
    """Notify the other participants and fan the message out once committed.

    Outside an atomic block the live emit happens immediately.
    """

    def publish() -> None:
        try:
            publish_new_message(message, skip_sid=skip_sid)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Message %s was stored but could not be delivered live",
                message.pk,
                exc_info=True,
            )

    notify_new_message(message)
    transaction.on_commit(publish, robust=True)


def post_system_message(chat: Chat, actor: User, text: str) -> Message:
    return send_message(
        actor,
        chat_id=chat.pk,
        content=text,
        message_type=Message.Type.SYSTEM,
        system=True,
    )


def mark_chat_read(chat: Chat, reader: User) -> int:
    """Mark every message in ``chat`` not sent by ``reader`` as read."""
    return (
        chat.messages.filter(is_read=False)
        .exclude(sender=reader)
        .update(is_read=True, read_at=timezone.now())
    )


def support_messages_for(user: User):
    """Messages of the support conversation(s) visible to ``user``."""
    qs = Message.objects.select_related("sender", "chat").filter(
        chat__chat_type=Chat.Type.SUPPORT,
    )
    if is_admin_user(user):
        return qs
    return qs.filter(Q(chat__customer=user) | Q(chat__participants=user)).distinct()
