from datetime import timedelta
from http import HTTPStatus

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from tuma_cargo.notifications.models import Notification
from tuma_cargo.notifications.tests.factories import NotificationFactory
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import UserFactory

BASE_URL = "/api/v1/notifications/"


@pytest.mark.django_db
class TestNotificationAPI:
    def setup_method(self):
        self.client = APIClient()
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_list_excludes_expired_and_foreign(self):
        mine = NotificationFactory(recipient=self.user)
        NotificationFactory(
            recipient=self.user,
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        NotificationFactory()
        res = self.client.get(BASE_URL)
        assert res.status_code == HTTPStatus.OK
        assert [n["id"] for n in res.data["results"]] == [mine.pk]
        assert res.data["unread_count"] == 1

    def test_unread_only(self):
        NotificationFactory(recipient=self.user, is_read=True)
        unread = NotificationFactory(recipient=self.user)
        res = self.client.get(BASE_URL, {"unread_only": "true"})
        assert [n["id"] for n in res.data["results"]] == [unread.pk]

    def test_unread_count(self):
        NotificationFactory.create_batch(3, recipient=self.user)
        res = self.client.get(f"{BASE_URL}unread-count/")
        assert res.data == {"unread_count": 3}

    def test_mark_read(self):
        notification = NotificationFactory(recipient=self.user)
        res = self.client.put(f"{BASE_URL}{notification.pk}/read/")
        assert res.status_code == HTTPStatus.OK
        assert res.data["is_read"] is True
        notification.refresh_from_db()
        assert notification.read_at is not None

    def test_cannot_mark_someone_elses(self):
        notification = NotificationFactory()
        res = self.client.put(f"{BASE_URL}{notification.pk}/read/")
        assert res.status_code == HTTPStatus.NOT_FOUND

    def test_read_all(self):
        NotificationFactory.create_batch(2, recipient=self.user)
        NotificationFactory()
        res = self.client.put(f"{BASE_URL}read-all/")
        assert res.data == {"updated_count": 2}
        assert not Notification.objects.filter(recipient=self.user, is_read=False).exists()

    def test_delete_one(self):
        notification = NotificationFactory(recipient=self.user)
        res = self.client.delete(f"{BASE_URL}{notification.pk}/")
        assert res.status_code == HTTPStatus.NO_CONTENT
        assert not Notification.objects.filter(pk=notification.pk).exists()

    def test_clear_read_only(self):
        NotificationFactory(recipient=self.user, is_read=True)
        keep = NotificationFactory(recipient=self.user)
        res = self.client.delete(f"{BASE_URL}?read_only=true")
        assert res.status_code == HTTPStatus.OK
        assert res.data == {"deleted_count": 1}
        assert list(Notification.objects.filter(recipient=self.user)) == [keep]

    def test_clear_all(self):
        NotificationFactory.create_batch(2, recipient=self.user)
        res = self.client.delete(BASE_URL)
        assert res.data == {"deleted_count": 2}

    def test_create_for_self(self):
        res = self.client.post(
            BASE_URL,
            {
                "notification_type": Notification.Type.SYSTEM_ANNOUNCEMENT,
                "title": "Reminder",
                "message": "Pay your invoice",
            },
            format="json",
        )
        assert res.status_code == HTTPStatus.CREATED
        assert Notification.objects.filter(recipient=self.user).count() == 1

    def test_customer_cannot_notify_others(self):
        other = UserFactory()
        res = self.client.post(
            BASE_URL,
            {
                "user_id": other.pk,
                "notification_type": Notification.Type.ADMIN_ACTION,
                "title": "Hi",
                "message": "Hello",
            },
            format="json",
        )
        assert res.status_code == HTTPStatus.FORBIDDEN


@pytest.mark.django_db
class TestAdminNotifications:
    def setup_method(self):
        self.client = APIClient()
        self.client.force_authenticate(user=AdminFactory())

    def test_admin_notifies_user(self):
        target = UserFactory()
        res = self.client.post(
            BASE_URL,
            {
                "user_id": target.pk,
                "notification_type": Notification.Type.PAYMENT_RECEIVED,
                "title": "Payment received",
                "message": "We received your payment",
                "priority": Notification.Priority.HIGH,
                "data": {"amount": "10.00"},
            },
            format="json",
        )
        assert res.status_code == HTTPStatus.CREATED
        notification = Notification.objects.get(recipient=target)
        assert notification.priority == Notification.Priority.HIGH
        assert notification.data == {"amount": "10.00"}

    def test_unknown_user(self):
        res = self.client.post(
            BASE_URL,
            {
                "user_id": 999999,
                "notification_type": Notification.Type.ADMIN_ACTION,
                "title": "Hi",
                "message": "Hello",
            },
            format="json",
        )
        assert res.status_code == HTTPStatus.NOT_FOUND
