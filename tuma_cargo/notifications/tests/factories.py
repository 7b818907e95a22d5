from factory import SubFactory
from factory.django import DjangoModelFactory

from tuma_cargo.notifications.models import Notification
from tuma_cargo.users.tests.factories import UserFactory


class NotificationFactory(DjangoModelFactory[Notification]):
    recipient = SubFactory(UserFactory)
    notification_type = Notification.Type.SYSTEM_ANNOUNCEMENT
    title = "Announcement"
    message = "Warehouse closed on Sunday"

    class Meta:
        model = Notification
