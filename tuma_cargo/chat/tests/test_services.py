from unittest import mock

import pytest
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from tuma_cargo.chat import services
from tuma_cargo.chat.models import Chat
from tuma_cargo.chat.models import Message
from tuma_cargo.chat.tests.factories import ChatFactory
from tuma_cargo.chat.tests.factories import MessageFactory
from tuma_cargo.orders.tests.factories import OrderFactory
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import UserFactory


@pytest.mark.django_db
class TestSupportChat:
    def test_first_call_creates_chat_with_an_admin(self):
        admin = AdminFactory()
        customer = UserFactory(full_name="Claire Ingabire")
        chat, created = services.open_support_chat(customer)
        assert created is True
        assert chat.customer == customer
        assert chat.title == "Support Chat - Claire Ingabire"
        assert set(chat.participants.all()) == {customer, admin}

    def test_second_call_reuses_chat(self):
        customer = UserFactory()
        first, _ = services.open_support_chat(customer)
        second, created = services.open_support_chat(customer)
        assert created is False
        assert first.pk == second.pk
        assert Chat.objects.filter(customer=customer).count() == 1

    def test_order_chat_is_shared_per_order(self):
        customer = UserFactory()
        order = OrderFactory(user=customer)
        admin = AdminFactory()
        chat, created = services.get_or_create_order_chat(customer, order)
        assert created is True
        assert chat.title == f"Support for Order {order.order_id}"
        again, created = services.get_or_create_order_chat(admin, order)
        assert created is False
        assert again.pk == chat.pk
        assert chat.participants.filter(pk=admin.pk).exists()


@pytest.mark.django_db
class TestSendMessage:
    def setup_method(self):
        self.customer = UserFactory()
        self.chat = ChatFactory(customer=self.customer, participants=[self.customer])

    def test_updates_chat_summary(self):
        message = services.send_message(
            self.customer,
            chat_id=self.chat.pk,
            content="  Where is my parcel?  ",
        )
        self.chat.refresh_from_db()
        assert message.text == "Where is my parcel?"
        assert self.chat.last_message_text == "Where is my parcel?"
        assert self.chat.last_message_sender == self.customer
        assert self.chat.last_message_at == message.created_at

    def test_file_message_summary(self):
        services.send_message(
            self.customer,
            chat_id=self.chat.pk,
            file_url="/media/uploads/chat/a.pdf",
            file_name="invoice.pdf",
        )
        self.chat.refresh_from_db()
        assert self.chat.last_message_text == "Sent a file: invoice.pdf"
        assert self.chat.messages.get().message_type == Message.Type.FILE

    def test_without_chat_id_uses_support_chat(self):
        message = services.send_message(UserFactory(), content="Hi")
        assert message.chat.chat_type == Chat.Type.SUPPORT
        assert message.chat.customer == message.sender

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError):
            services.send_message(self.customer, chat_id=self.chat.pk, content="   ")

    def test_too_long_message_rejected(self):
        with pytest.raises(ValidationError):
            services.send_message(
                self.customer,
                chat_id=self.chat.pk,
                content="x" * 2001,
            )

    def test_unknown_chat(self):
        with pytest.raises(NotFound):
            services.send_message(self.customer, chat_id=999999, content="Hi")

    def test_stranger_cannot_post(self):
        with pytest.raises(PermissionDenied):
            services.send_message(UserFactory(), chat_id=self.chat.pk, content="Hi")

    def test_admin_joins_on_first_message(self):
        admin = AdminFactory()
        services.send_message(admin, chat_id=self.chat.pk, content="Hello")
        assert self.chat.participants.filter(pk=admin.pk).exists()

    def test_closed_chat_reopens(self):
        self.chat.status = Chat.Status.CLOSED
        self.chat.save()
        services.send_message(self.customer, chat_id=self.chat.pk, content="Again")
        self.chat.refresh_from_db()
        assert self.chat.status == Chat.Status.OPEN


@pytest.mark.django_db
def test_mark_chat_read_skips_own_messages():
    customer = UserFactory()
    admin = AdminFactory()
    chat = ChatFactory(customer=customer, participants=[customer, admin])
    own = MessageFactory(chat=chat, sender=customer)
    theirs = MessageFactory(chat=chat, sender=admin)
    assert services.mark_chat_read(chat, customer) == 1
    own.refresh_from_db()
    theirs.refresh_from_db()
    assert own.is_read is False
    assert theirs.is_read is True


@pytest.mark.django_db
def test_deliver_message_survives_emit_failure(monkeypatch, django_capture_on_commit_callbacks):
    customer = UserFactory()
    admin = AdminFactory()
    chat = ChatFactory(customer=customer, participants=[customer, admin])
    message = MessageFactory(chat=chat, sender=customer)

    def broken(*args, **kwargs):
        raise ConnectionError

    monkeypatch.setattr(services, "publish_new_message", broken)
    with (
        mock.patch("tuma_cargo.notifications.signals.publish_notification_created"),
        django_capture_on_commit_callbacks(execute=True) as callbacks,
    ):
        services.deliver_message(message)
    assert callbacks
    assert admin.notifications.filter(data__message_id=message.pk).exists()


@pytest.mark.django_db
def test_system_messages_need_the_internal_flag():
    customer = UserFactory()
    chat = ChatFactory(customer=customer, participants=[customer])
    with pytest.raises(ValidationError):
        services.send_message(
            customer,
            chat_id=chat.pk,
            content="Chat status changed to Resolved",
            message_type=Message.Type.SYSTEM,
        )
    assert not chat.messages.exists()


@pytest.mark.django_db
def test_system_message_keeps_a_closed_chat_closed():
    admin = AdminFactory()
    chat = ChatFactory(customer=UserFactory(), status=Chat.Status.CLOSED)
    message = services.post_system_message(chat, admin, "Chat status changed to Closed")
    chat.refresh_from_db()
    assert chat.status == Chat.Status.CLOSED
    assert message.message_type == Message.Type.SYSTEM
    assert chat.last_message_text == "Chat status changed to Closed"
