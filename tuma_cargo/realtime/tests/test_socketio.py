from unittest import mock

import pytest
from asgiref.sync import async_to_sync

from tuma_cargo.chat.models import Message
from tuma_cargo.chat.tests.factories import ChatFactory
from tuma_cargo.chat.tests.factories import MessageFactory
from tuma_cargo.realtime import socketio as rt
from tuma_cargo.realtime.presence import registry
from tuma_cargo.users.services import issue_tokens
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import UserFactory


@pytest.fixture
def sio_calls():
    with (
        mock.patch.object(rt.sio, "emit", new_callable=mock.AsyncMock) as emit,
        mock.patch.object(rt.sio, "save_session", new_callable=mock.AsyncMock) as save,
        mock.patch.object(rt.sio, "enter_room", new_callable=mock.AsyncMock) as enter,
        mock.patch.object(rt.sio, "get_session", new_callable=mock.AsyncMock) as get,
    ):
        yield mock.Mock(emit=emit, save_session=save, enter_room=enter, get_session=get)


def _session_for(user):
    return {"user_id": user.pk, "user_name": user.full_name, "role": user.role}


class TestExtractToken:
    def test_from_auth_payload(self):
        assert rt._extract_token({}, {"token": "Bearer abc"}) == "abc"

    def test_from_asgi_scope(self):
        environ = {"asgi.scope": {"query_string": b"EIO=4&token=xyz"}}
        assert rt._extract_token(environ, None) == "xyz"

    def test_from_wsgi_environ(self):
        assert rt._extract_token({"QUERY_STRING": "token=qs"}, None) == "qs"

    def test_missing(self):
        assert rt._extract_token({"QUERY_STRING": "EIO=4"}, {"token": ""}) is None


@pytest.mark.django_db(transaction=True)
class TestConnect:
    def test_without_token_is_refused(self, sio_calls):
        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(rt.connect)("sid-1", {}, None)
        sio_calls.save_session.assert_not_called()

    def test_bad_token_is_refused(self, sio_calls):
        with pytest.raises(ConnectionRefusedError):
            async_to_sync(rt.connect)("sid-1", {}, {"token": "not-a-jwt"})

    def test_joins_user_and_role_rooms(self, sio_calls):
        admin = AdminFactory()
        token = issue_tokens(admin)["access"]
        async_to_sync(rt.connect)("sid-1", {}, {"token": token})
        sio_calls.save_session.assert_awaited_once_with(
            "sid-1",
            {"user_id": admin.pk, "user_name": admin.full_name, "role": "admin"},
        )
        rooms = [c.args[1] for c in sio_calls.enter_room.await_args_list]
        assert rooms == [f"user_{admin.pk}", rt.ROOM_ADMINS]
        assert registry.is_online(admin.pk)

    def test_inactive_user_is_refused(self, sio_calls):
        user = UserFactory()
        token = issue_tokens(user)["access"]
        user.is_active = False
        user.save(update_fields=["is_active"])
        with pytest.raises(ConnectionRefusedError):
            async_to_sync(rt.connect)("sid-1", {}, {"token": token})


class TestPresenceEvents:
    def test_disconnect_broadcasts_offline_once(self, sio_calls):
        registry.add("sid-1", 5, "Alice", "user")
        registry.add("sid-2", 5, "Alice", "user")
        async_to_sync(rt.disconnect)("sid-1")
        sio_calls.emit.assert_not_called()
        async_to_sync(rt.disconnect)("sid-2")
        sio_calls.emit.assert_awaited_once_with(
            "user:status",
            {"userId": 5, "status": "offline"},
            skip_sid="sid-2",
        )

    def test_user_online(self, sio_calls):
        sio_calls.get_session.return_value = {
            "user_id": 5,
            "user_name": "Alice",
            "role": "user",
        }
        async_to_sync(rt.user_online)("sid-1")
        sio_calls.emit.assert_awaited_once_with(
            "user:status",
            {"userId": 5, "status": "online", "userName": "Alice"},
            skip_sid="sid-1",
        )

    def test_user_online_without_session_is_ignored(self, sio_calls):
        sio_calls.get_session.side_effect = KeyError("sid-1")
        async_to_sync(rt.user_online)("sid-1")
        sio_calls.emit.assert_not_called()


@pytest.mark.django_db(transaction=True)
class TestMessageEvents:
    def test_send_stores_and_echoes(self, sio_calls):
        admin = AdminFactory()
        customer = UserFactory()
        sio_calls.get_session.return_value = _session_for(customer)
        with (
            mock.patch("tuma_cargo.chat.services.publish_new_message") as publish,
            mock.patch("tuma_cargo.notifications.signals.publish_notification_created"),
        ):
            async_to_sync(rt.message_send)(
                "sid-1",
                {"message": {"content": "Where is my parcel?"}},
            )
        message = Message.objects.get()
        assert message.sender == customer
        assert message.chat.participants.filter(pk=admin.pk).exists()
        event, payload = sio_calls.emit.await_args.args
        assert event == "message:new"
        assert payload["message"]["content"] == "Where is my parcel?"
        assert sio_calls.emit.await_args.kwargs == {"to": "sid-1"}
        publish.assert_called_once_with(message, skip_sid="sid-1")

    def test_send_empty_reports_error(self, sio_calls):
        customer = UserFactory()
        sio_calls.get_session.return_value = _session_for(customer)
        async_to_sync(rt.message_send)("sid-1", {"message": {"content": "  "}})
        sio_calls.emit.assert_awaited_once_with(
            "error",
            {
                "message": "Message content or file is required",
                "error": "Message content or file is required",
            },
            to="sid-1",
        )
        assert not Message.objects.exists()

    def test_customer_cannot_send_system_messages(self, sio_calls):
        customer = UserFactory()
        chat = ChatFactory(customer=customer, participants=[customer])
        sio_calls.get_session.return_value = _session_for(customer)
        with mock.patch("tuma_cargo.chat.services.publish_new_message") as publish:
            async_to_sync(rt.message_send)(
                "sid-1",
                {
                    "chatId": chat.pk,
                    "message": {"content": "Chat status changed to Resolved", "type": "system"},
                },
            )
        sio_calls.emit.assert_awaited_once_with(
            "error",
            {
                "message": "System messages cannot be sent by users",
                "error": "System messages cannot be sent by users",
            },
            to="sid-1",
        )
        assert not Message.objects.exists()
        publish.assert_not_called()

    def test_send_without_session(self, sio_calls):
        sio_calls.get_session.side_effect = KeyError("sid-1")
        async_to_sync(rt.message_send)("sid-1", {"message": {"content": "hi"}})
        assert sio_calls.emit.await_args.args[0] == "error"

    def test_typing_reaches_other_participants_and_admins(self, sio_calls):
        customer = UserFactory()
        agent = AdminFactory()
        chat = ChatFactory(customer=customer, participants=[customer, agent])
        sio_calls.get_session.return_value = _session_for(customer)
        async_to_sync(rt.typing_start)("sid-1", {"chatId": chat.pk})
        payload = sio_calls.emit.await_args.args[1]
        assert payload["isTyping"] is True
        assert sio_calls.emit.await_args.kwargs == {
            "to": [f"user_{agent.pk}", rt.ROOM_ADMINS],
            "skip_sid": "sid-1",
        }

    def test_chat_owner_may_type_without_being_a_participant(self, sio_calls):
        customer = UserFactory()
        agent = AdminFactory()
        chat = ChatFactory(customer=customer, participants=[agent])
        sio_calls.get_session.return_value = _session_for(customer)
        async_to_sync(rt.typing_start)("sid-1", {"chatId": chat.pk})
        assert sio_calls.emit.await_args.args[0] != "error"
        assert sio_calls.emit.await_args.kwargs == {
            "to": [f"user_{agent.pk}", rt.ROOM_ADMINS],
            "skip_sid": "sid-1",
        }

    def test_admin_typing_reaches_the_chat_owner(self, sio_calls):
        customer = UserFactory()
        agent = AdminFactory()
        chat = ChatFactory(customer=customer, participants=[agent])
        sio_calls.get_session.return_value = _session_for(agent)
        async_to_sync(rt.typing_start)("sid-2", {"chatId": chat.pk})
        assert sio_calls.emit.await_args.kwargs == {
            "to": [f"user_{customer.pk}"],
            "skip_sid": "sid-2",
        }

    def test_typing_in_foreign_chat(self, sio_calls):
        chat = ChatFactory(participants=[UserFactory()])
        sio_calls.get_session.return_value = _session_for(UserFactory())
        async_to_sync(rt.typing_stop)("sid-1", {"chatId": chat.pk})
        assert sio_calls.emit.await_args.args[0] == "error"
        assert sio_calls.emit.await_args.args[1]["message"] == rt.NO_CHAT_ACCESS_MESSAGE

    def test_read_receipt_goes_to_sender(self, sio_calls):
        customer = UserFactory()
        agent = AdminFactory()
        chat = ChatFactory(customer=customer, participants=[customer, agent])
        message = MessageFactory(chat=chat, sender=agent)
        sio_calls.get_session.return_value = _session_for(customer)
        async_to_sync(rt.message_read)(
            "sid-1",
            {"chatId": chat.pk, "messageId": message.pk},
        )
        message.refresh_from_db()
        assert message.is_read
        event, payload = sio_calls.emit.await_args.args
        assert event == "message:read"
        assert payload["readBy"] == customer.pk
        assert sio_calls.emit.await_args.kwargs == {"to": f"user_{agent.pk}"}

    def test_read_unknown_message(self, sio_calls):
        sio_calls.get_session.return_value = _session_for(UserFactory())
        async_to_sync(rt.message_read)("sid-1", {"chatId": 1, "messageId": 999})
        assert sio_calls.emit.await_args.args[1]["message"] == "Message not found"


class TestSyncEmitters:
    def test_rooms_are_deduplicated(self, sio_calls):
        rt.emit_event_to_rooms(["user_1", "admins", "user_1"], "ping", {"a": 1})
        sio_calls.emit.assert_awaited_once_with(
            "ping",
            {"a": 1},
            to=["user_1", "admins"],
            skip_sid=None,
        )

    def test_no_rooms_no_emit(self, sio_calls):
        rt.emit_event_to_rooms([], "ping", {})
        sio_calls.emit.assert_not_called()

    def test_emit_to_role(self, sio_calls):
        rt.emit_event_to_role("super_admin", "ping", {})
        assert sio_calls.emit.await_args.kwargs["to"] == rt.ROOM_ADMINS
