from factory import SubFactory
from factory import post_generation
from factory.django import DjangoModelFactory

from tuma_cargo.chat.models import Chat
from tuma_cargo.chat.models import Message
from tuma_cargo.users.tests.factories import UserFactory


class ChatFactory(DjangoModelFactory[Chat]):
    chat_type = Chat.Type.SUPPORT
    title = "Support Chat"

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    @post_generation
    def participants(self, create, extracted, **kwargs):
        if create and extracted:
            self.participants.add(*extracted)


class MessageFactory(DjangoModelFactory[Message]):
    chat = SubFactory(ChatFactory)
    sender = SubFactory(UserFactory)
    text = "Hello"

    class Meta:
        model = Message
