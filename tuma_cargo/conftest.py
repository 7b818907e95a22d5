import pytest
from rest_framework.test import APIClient

from tuma_cargo.realtime.presence import registry
from tuma_cargo.users.models import User
from tuma_cargo.users.tests.factories import AdminFactory
from tuma_cargo.users.tests.factories import SuperAdminFactory
from tuma_cargo.users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture(autouse=True)
def _reset_presence():
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def admin_user(db) -> User:
    return AdminFactory()


@pytest.fixture
def super_admin(db) -> User:
    return SuperAdminFactory()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def user_client(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_api_client(admin_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def super_admin_client(super_admin) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=super_admin)
    return client
