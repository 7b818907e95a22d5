"""Global Socket.IO server shared by chat, notifications and order alerts.

Frontend convention:
- Socket.IO path: ``settings.SOCKETIO_PATH`` (``/socket.io/`` by default)
- Auth: ``auth.token`` in the handshake, or ``?token=`` (JWT access token)

Every socket joins its per-user room ``user_<id>`` and one role room,
``admins`` or ``users``. Django code emits through the sync helpers at the
bottom of this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import APIException
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

from tuma_cargo.users.api.permissions import ADMIN_ROLES

from .presence import registry

logger = logging.getLogger(__name__)

ROOM_ADMINS = "admins"
ROOM_USERS = "users"
SEND_FAILED_MESSAGE = "Failed to send message. Please try again."
NO_CHAT_ACCESS_MESSAGE = "You do not have access to this chat"


def _client_manager() -> socketio.AsyncManager:
    # A Redis queue lets several ASGI workers and Celery share the same rooms
    if settings.SOCKETIO_MESSAGE_QUEUE:
        return socketio.AsyncRedisManager(settings.SOCKETIO_MESSAGE_QUEUE)
    return socketio.AsyncManager()


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=list(settings.CORS_ALLOWED_ORIGINS) or "*",
    client_manager=_client_manager(),
    logger=False,
    engineio_logger=False,
)


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    user_name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_role(role: str) -> str:
    return ROOM_ADMINS if role in ADMIN_ROLES else ROOM_USERS


@database_sync_to_async
def _get_user_context_from_access_token(token: str) -> UserRealtimeContext:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    # Raises AuthenticationFailed for unknown or inactive users
    user = jwt_auth.get_user(validated)
    return UserRealtimeContext(
        user_id=int(user.id),
        user_name=user.full_name or user.email,
        role=user.role,
    )


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract the JWT from the handshake ``auth`` payload or the query string.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token.removeprefix("Bearer ").strip() or None

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


def _is_expired(exc: Exception) -> bool:
    detail = getattr(exc, "detail", None) or exc
    return "expired" in str(detail).lower()


def _error_text(exc: APIException) -> str:
    detail: Any = exc.detail
    if isinstance(detail, dict):
        detail = next(iter(detail.values()), "")
    if isinstance(detail, list):
        detail = detail[0] if detail else ""
    return str(detail)


async def _get_session(sid: str) -> dict[str, Any] | None:
    try:
        session = await sio.get_session(sid)
    except KeyError:
        return None
    if not isinstance(session, dict) or "user_id" not in session:
        return None
    return session


async def _emit_error(sid: str, message: str, error: str = "") -> None:
    await sio.emit("error", {"message": message, "error": error or message}, to=sid)


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        ctx = await _get_user_context_from_access_token(token)
    except (TokenError, AuthenticationFailed) as exc:
        # InvalidToken subclasses AuthenticationFailed and carries the reason
        msg = "jwt_expired" if _is_expired(exc) else "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(
        sid,
        {
            "user_id": ctx.user_id,
            "user_name": ctx.user_name,
            "role": ctx.role,
        },
    )
    await sio.enter_room(sid, room_for_user(ctx.user_id))
    await sio.enter_room(sid, room_for_role(ctx.role))
    registry.add(sid, ctx.user_id, ctx.user_name, ctx.role)
    logger.info("Socket %s connected for user %s (%s)", sid, ctx.user_id, ctx.role)


@sio.event
async def disconnect(sid: str, reason: Any = None):
    user_id, went_offline = registry.remove(sid)
    logger.info("Socket %s disconnected (user %s, reason %s)", sid, user_id, reason)
    if user_id is not None and went_offline:
        await sio.emit(
            "user:status",
            {"userId": user_id, "status": "offline"},
            skip_sid=sid,
        )


@sio.on("user:online")
async def user_online(sid: str, data: Any = None):
    session = await _get_session(sid)
    if session is None:
        return
    await sio.emit(
        "user:status",
        {
            "userId": session["user_id"],
            "status": "online",
            "userName": session["user_name"],
        },
        skip_sid=sid,
    )


@database_sync_to_async
def _send_message(user_id: int, chat_id: Any, body: dict[str, Any]):
    from django.contrib.auth import get_user_model  # noqa: PLC0415

    from tuma_cargo.chat import services as chat_services  # noqa: PLC0415
    from tuma_cargo.realtime.events.chat import build_message_payload  # noqa: PLC0415

    sender = get_user_model().objects.get(pk=user_id)
    message = chat_services.send_message(
        sender,
        chat_id=chat_id,
        content=body.get("content") or "",
        message_type=body.get("type") or "text",
        file_url=body.get("fileUrl") or "",
        file_name=body.get("fileName") or "",
        file_size=body.get("fileSize"),
    )
    return message, build_message_payload(message)


@database_sync_to_async
def _deliver_message(message, skip_sid: str) -> None:
    from tuma_cargo.chat import services as chat_services  # noqa: PLC0415

    chat_services.deliver_message(message, skip_sid=skip_sid)


@sio.on("message:send")
async def message_send(sid: str, data: Any = None):
    session = await _get_session(sid)
    if session is None:
        await _emit_error(sid, "unauthorized")
        return
    data = data if isinstance(data, dict) else {}
    body = data.get("message")
    if not isinstance(body, dict):
        body = {}

    try:
        message, payload = await _send_message(
            session["user_id"],
            data.get("chatId"),
            body,
        )
    except APIException as exc:
        await _emit_error(sid, _error_text(exc))
        return
    except Exception as exc:
        logger.exception("message:send failed for user %s", session["user_id"])
        await _emit_error(sid, SEND_FAILED_MESSAGE, str(exc))
        return

    # The sender sees its own message before anybody else
    await sio.emit("message:new", payload, to=sid)
    try:
        await _deliver_message(message, sid)
    except Exception:
        logger.warning(
            "Message %s was stored but could not be delivered live",
            message.pk,
            exc_info=True,
        )


@database_sync_to_async
def _typing_rooms(user_id: int, role: str, chat_id: Any) -> list[str] | None:
    """Rooms to notify about typing in ``chat_id``; None when not allowed."""
    from tuma_cargo.chat.models import Chat  # noqa: PLC0415
    from tuma_cargo.chat.services import can_access_chat  # noqa: PLC0415

    try:
        chat = Chat.objects.filter(pk=int(chat_id)).first()
    except (TypeError, ValueError):
        return None
    if chat is None or not can_access_chat(user_id, role, chat):
        return None
    recipients = set(chat.participants.values_list("pk", flat=True))
    if chat.customer_id is not None:
        recipients.add(chat.customer_id)
    recipients.discard(user_id)
    rooms = [room_for_user(pk) for pk in sorted(recipients)]
    if role not in ADMIN_ROLES:
        rooms.append(ROOM_ADMINS)
    return rooms


async def _typing(sid: str, data: Any, *, is_typing: bool) -> None:
    session = await _get_session(sid)
    if session is None:
        return
    chat_id = data.get("chatId") if isinstance(data, dict) else None
    try:
        rooms = await _typing_rooms(session["user_id"], session["role"], chat_id)
    except Exception:
        logger.exception("Typing indicator failed for chat %s", chat_id)
        return
    if rooms is None:
        await _emit_error(sid, NO_CHAT_ACCESS_MESSAGE)
        return
    if not rooms:
        return
    await sio.emit(
        "user:typing",
        {
            "chatId": chat_id,
            "userId": session["user_id"],
            "userName": session["user_name"],
            "isTyping": is_typing,
        },
        to=rooms,
        skip_sid=sid,
    )


@sio.on("user:typing:start")
async def typing_start(sid: str, data: Any = None):
    await _typing(sid, data, is_typing=True)


@sio.on("user:typing:stop")
async def typing_stop(sid: str, data: Any = None):
    await _typing(sid, data, is_typing=False)


@database_sync_to_async
def _mark_read(user_id: int, role: str, chat_id: Any, message_id: Any):
    from tuma_cargo.chat.models import Message  # noqa: PLC0415
    from tuma_cargo.chat.services import can_access_chat  # noqa: PLC0415

    try:
        message = (
            Message.objects.select_related("chat")
            .filter(pk=int(message_id), chat_id=int(chat_id))
            .first()
        )
    except (TypeError, ValueError):
        return None
    if message is None:
        return None
    if not can_access_chat(user_id, role, message.chat):
        return None
    if message.sender_id != user_id:
        message.mark_read()
    return message


@sio.on("message:read")
async def message_read(sid: str, data: Any = None):
    session = await _get_session(sid)
    if session is None:
        return
    data = data if isinstance(data, dict) else {}
    chat_id, message_id = data.get("chatId"), data.get("messageId")
    try:
        message = await _mark_read(
            session["user_id"],
            session["role"],
            chat_id,
            message_id,
        )
    except Exception:
        logger.exception("message:read failed for message %s", message_id)
        return
    if message is None:
        await _emit_error(sid, "Message not found")
        return
    await sio.emit(
        "message:read",
        {
            "chatId": message.chat_id,
            "messageId": message.pk,
            "readBy": session["user_id"],
            "readAt": message.read_at.isoformat() if message.read_at else None,
        },
        to=room_for_user(message.sender_id),
    )


def emit_event_to_room(
    room: str,
    event: str,
    payload: dict[str, Any],
    skip_sid: str | None = None,
) -> None:
    """Emit an event to a room from sync Django code."""

    async_to_sync(sio.emit)(event, payload, to=room, skip_sid=skip_sid)


def emit_event_to_rooms(
    rooms: list[str],
    event: str,
    payload: dict[str, Any],
    skip_sid: str | None = None,
) -> None:
    """Emit once to several rooms; a socket in more than one gets it once."""

    rooms = list(dict.fromkeys(rooms))
    if not rooms:
        return
    async_to_sync(sio.emit)(event, payload, to=rooms, skip_sid=skip_sid)


def emit_event_to_user(user_id: int, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_user(user_id), event, payload)


def emit_event_to_role(role: str, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_role(role), event, payload)
