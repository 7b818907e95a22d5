from collections.abc import Sequence
from typing import Any

from factory import Faker
from factory import Sequence as FactorySequence
from factory import post_generation
from factory.django import DjangoModelFactory

from tuma_cargo.users.models import User

DEFAULT_PASSWORD = "TestPass123!"  # noqa: S105


class UserFactory(DjangoModelFactory[User]):
    email = FactorySequence(lambda n: f"user{n}@example.com")
    full_name = Faker("name")
    phone = FactorySequence(lambda n: f"+2507880{n:05d}")
    role = User.Role.USER
    verified = True
    approved = True
    city = "Kigali"
    country = "Rwanda"

    @post_generation
    def password(self, create: bool, extracted: Sequence[Any], **kwargs):  # noqa: FBT001
        password = extracted if extracted else DEFAULT_PASSWORD
        self.set_password(password)
        if create:
            self.save(update_fields=["password"])

    class Meta:
        model = User
        django_get_or_create = ["email"]
        skip_postgeneration_save = True


class AdminFactory(UserFactory):
    role = User.Role.ADMIN


class SuperAdminFactory(UserFactory):
    role = User.Role.SUPER_ADMIN
    is_superuser = True
