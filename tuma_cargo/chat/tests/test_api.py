from http import HTTPStatus
from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from tuma_cargo.audit.models import AuditLog
from tuma_cargo.chat.models import Chat
from tuma_cargo.chat.models import Message
from tuma_cargo.chat.tests.factories import ChatFactory
from tuma_cargo.chat.tests.factories import MessageFactory
from tuma_cargo.notifications.models import Notification
from tuma_cargo.orders.tests.factories import OrderFactory
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import UserFactory

BASE_URL = "/api/v1/chat/"


@pytest.fixture(autouse=True)
def publish():
    with (
        mock.patch("tuma_cargo.chat.services.publish_new_message") as publish,
        mock.patch("tuma_cargo.notifications.signals.publish_notification_created"),
    ):
        yield publish


@pytest.mark.django_db
class TestCustomerChat:
    def setup_method(self):
        self.client = APIClient()
        self.admin = AdminFactory()
        self.customer = UserFactory()
        self.client.force_authenticate(user=self.customer)

    def test_create_support_chat_is_idempotent(self):
        res = self.client.post(BASE_URL, {}, format="json")
        assert res.status_code == HTTPStatus.CREATED
        again = self.client.post(BASE_URL, {}, format="json")
        assert again.status_code == HTTPStatus.OK
        assert again.data["id"] == res.data["id"]

    def test_create_order_chat(self):
        order = OrderFactory(user=self.customer)
        res = self.client.post(BASE_URL, {"order_id": order.order_id}, format="json")
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["order"] == order.order_id

    def test_create_chat_for_foreign_order(self):
        order = OrderFactory()
        res = self.client.post(BASE_URL, {"order_id": order.order_id}, format="json")
        assert res.status_code == HTTPStatus.NOT_FOUND

    def test_list_shows_unread_counts(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer, self.admin])
        MessageFactory(chat=chat, sender=self.admin)
        MessageFactory(chat=chat, sender=self.customer)
        ChatFactory(participants=[UserFactory()])
        res = self.client.get(BASE_URL)
        assert res.status_code == HTTPStatus.OK
        assert [c["id"] for c in res.data["results"]] == [chat.pk]
        assert res.data["results"][0]["unread_count"] == 1

    def test_retrieve_marks_read_and_orders_messages(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer, self.admin])
        first = MessageFactory(chat=chat, sender=self.admin, text="first")
        second = MessageFactory(chat=chat, sender=self.admin, text="second")
        res = self.client.get(f"{BASE_URL}{chat.pk}/")
        assert res.status_code == HTTPStatus.OK
        assert [m["id"] for m in res.data["results"]] == [first.pk, second.pk]
        assert res.data["chat"]["id"] == chat.pk
        assert not chat.messages.filter(is_read=False).exists()

    def test_retrieve_foreign_chat(self):
        chat = ChatFactory(participants=[UserFactory()])
        res = self.client.get(f"{BASE_URL}{chat.pk}/")
        assert res.status_code == HTTPStatus.NOT_FOUND

    def test_send_support_message(self, publish, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            res = self.client.post(
                f"{BASE_URL}messages/",
                {"content": "Hello support"},
                format="json",
            )
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["text"] == "Hello support"
        publish.assert_called_once()
        assert Notification.objects.filter(
            recipient=self.admin,
            notification_type=Notification.Type.MESSAGE_RECEIVED,
        ).exists()

    def test_live_delivery_waits_for_commit(self, publish, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            res = self.client.post(
                f"{BASE_URL}messages/",
                {"content": "Is my parcel in Kigali yet?"},
                format="json",
            )
            assert res.status_code == HTTPStatus.CREATED
            publish.assert_not_called()
        for callback in callbacks:
            callback()
        publish.assert_called_once()
        assert publish.call_args.args[0].pk == res.data["id"]

    def test_system_message_type_is_rejected(self):
        res = self.client.post(
            f"{BASE_URL}messages/",
            {"content": "Chat status changed to Resolved", "message_type": "system"},
            format="json",
        )
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert not Message.objects.filter(message_type=Message.Type.SYSTEM).exists()

    def test_send_empty_support_message(self):
        res = self.client.post(f"{BASE_URL}messages/", {"content": ""}, format="json")
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert "content" in res.data

    def test_support_message_history(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer])
        MessageFactory(chat=chat, sender=self.customer)
        other = ChatFactory(customer=UserFactory())
        MessageFactory(chat=other)
        res = self.client.get(f"{BASE_URL}messages/")
        assert res.data["pagination"]["total"] == 1

    def test_read_all_support_messages(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer, self.admin])
        MessageFactory.create_batch(2, chat=chat, sender=self.admin)
        res = self.client.put(f"{BASE_URL}messages/read-all/")
        assert res.data == {"updated_count": 2}

    def test_read_single_message(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer, self.admin])
        message = MessageFactory(chat=chat, sender=self.admin)
        res = self.client.put(f"{BASE_URL}messages/{message.pk}/read/")
        assert res.status_code == HTTPStatus.OK
        assert res.data["is_read"] is True

    def test_cannot_read_foreign_message(self):
        message = MessageFactory(chat=ChatFactory(participants=[UserFactory()]))
        res = self.client.put(f"{BASE_URL}messages/{message.pk}/read/")
        assert res.status_code == HTTPStatus.FORBIDDEN

    def test_post_attachment(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer, self.admin])
        upload = SimpleUploadedFile("invoice.pdf", b"%PDF-1.4", content_type="application/pdf")
        res = self.client.post(
            f"{BASE_URL}{chat.pk}/messages/",
            {"content": "Here is the invoice", "file": upload},
            format="multipart",
        )
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["message_type"] == Message.Type.FILE
        assert res.data["file_name"] == "invoice.pdf"
        assert res.data["file_url"]

    def test_post_attachment_rejects_executables(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer])
        upload = SimpleUploadedFile("run.exe", b"MZ", content_type="application/octet-stream")
        res = self.client.post(
            f"{BASE_URL}{chat.pk}/messages/",
            {"file": upload},
            format="multipart",
        )
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert "file" in res.data

    def test_customer_cannot_change_status(self):
        chat = ChatFactory(customer=self.customer, participants=[self.customer])
        res = self.client.put(
            f"{BASE_URL}{chat.pk}/status/",
            {"status": Chat.Status.CLOSED},
            format="json",
        )
        assert res.status_code == HTTPStatus.FORBIDDEN


@pytest.mark.django_db
class TestAdminChat:
    def setup_method(self):
        self.client = APIClient()
        self.admin = AdminFactory()
        self.customer = UserFactory(full_name="Brian Mugisha")
        self.chat = ChatFactory(
            customer=self.customer,
            participants=[self.customer],
            title="Support Chat - Brian Mugisha",
        )
        self.client.force_authenticate(user=self.admin)

    def test_admin_can_open_any_chat(self):
        res = self.client.get(f"{BASE_URL}{self.chat.pk}/")
        assert res.status_code == HTTPStatus.OK

    def test_status_change_posts_system_message(self, publish, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            res = self.client.put(
                f"{BASE_URL}{self.chat.pk}/status/",
                {"status": Chat.Status.RESOLVED, "priority": Chat.Priority.HIGH},
                format="json",
            )
        assert res.status_code == HTTPStatus.OK
        assert res.data["status"] == Chat.Status.RESOLVED
        assert res.data["priority"] == Chat.Priority.HIGH
        system = self.chat.messages.get(message_type=Message.Type.SYSTEM)
        assert system.text == "Chat status changed to Resolved"
        publish.assert_called_once()

    def test_admin_can_close_a_chat(self):
        res = self.client.put(
            f"{BASE_URL}{self.chat.pk}/status/",
            {"status": Chat.Status.CLOSED},
            format="json",
        )
        assert res.status_code == HTTPStatus.OK
        assert res.data["status"] == Chat.Status.CLOSED
        self.chat.refresh_from_db()
        assert self.chat.status == Chat.Status.CLOSED
        system = self.chat.messages.get(message_type=Message.Type.SYSTEM)
        assert system.text == "Chat status changed to Closed"

    def test_customer_message_reopens_closed_chat(self):
        self.chat.status = Chat.Status.CLOSED
        self.chat.save(update_fields=["status"])
        customer_client = APIClient()
        customer_client.force_authenticate(user=self.customer)
        res = customer_client.post(
            f"{BASE_URL}{self.chat.pk}/messages/",
            {"content": "One more question"},
        )
        assert res.status_code == HTTPStatus.CREATED
        self.chat.refresh_from_db()
        assert self.chat.status == Chat.Status.OPEN

    def test_export(self):
        MessageFactory(chat=self.chat, sender=self.customer, text="Need help")
        res = self.client.get(f"{BASE_URL}{self.chat.pk}/export/")
        assert res.status_code == HTTPStatus.OK
        assert [m["text"] for m in res.data["messages"]] == ["Need help"]
        assert res.data["exported_by"] == self.admin.pk

    def test_admin_all_filters_and_stats(self):
        ChatFactory(customer=UserFactory(), status=Chat.Status.CLOSED)
        res = self.client.get(f"{BASE_URL}admin/all/", {"search": "mugisha"})
        assert res.status_code == HTTPStatus.OK
        assert [c["id"] for c in res.data["results"]] == [self.chat.pk]
        assert res.data["stats"]["total"] == 2  # noqa: PLR2004
        assert res.data["stats"][Chat.Status.CLOSED] == 1

    def test_admin_sessions_count_unread_customer_messages(self):
        MessageFactory.create_batch(2, chat=self.chat, sender=self.customer)
        MessageFactory(chat=self.chat, sender=self.admin)
        res = self.client.get(f"{BASE_URL}admin/sessions/")
        assert res.status_code == HTTPStatus.OK
        row = res.data["results"][0]
        assert row["chat_id"] == self.chat.pk
        assert row["unread_count"] == 2  # noqa: PLR2004
        assert row["message_count"] == 3  # noqa: PLR2004

    def test_delete_is_audited(self):
        res = self.client.delete(f"{BASE_URL}{self.chat.pk}/")
        assert res.status_code == HTTPStatus.NO_CONTENT
        assert AuditLog.objects.filter(action="chat_deleted").exists()
