from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from tests.permissions.factories import RoleContext
from tests.permissions.factories import create_user_with_role

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = [ROLE_SUPER_ADMIN, ROLE_ADMIN, ROLE_USER]
ADMIN_ROLES = [ROLE_SUPER_ADMIN, ROLE_ADMIN]

ALLOWED_STATUSES = (
    status.HTTP_200_OK,
    status.HTTP_201_CREATED,
    status.HTTP_204_NO_CONTENT,
)


class RoleAPITestCase(APITestCase):
    """One account (with one order) per role, plus a second customer.

    Request helpers take a URL name and the role to act as; ``role=None``
    sends the request anonymously.
    """

    def setUp(self):
        super().setUp()
        self.roles: dict[str, RoleContext] = {
            ROLE_SUPER_ADMIN: create_user_with_role("owner", role=ROLE_SUPER_ADMIN),
            ROLE_ADMIN: create_user_with_role("agent", role=ROLE_ADMIN),
            ROLE_USER: create_user_with_role("customer", role=ROLE_USER),
        }
        self.others = {"customer": create_user_with_role("other", role=ROLE_USER)}

    def act_as(self, role: str | None):
        user = self.roles[role].user if role else None
        self.client.force_authenticate(user=user)

    def request(
        self,
        method: str,
        url_name: str,
        *,
        role: str | None,
        payload=None,
        reverse_kwargs=None,
        **kwargs,
    ):
        self.act_as(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        send = getattr(self.client, method)
        if method in {"post", "put", "patch"}:
            return send(url, data=payload or {}, format="json", **kwargs)
        return send(url, **kwargs)

    def get(self, url_name: str, *, role: str | None, **kwargs):
        return self.request("get", url_name, role=role, **kwargs)

    def post(self, url_name: str, *, role: str | None, **kwargs):
        return self.request("post", url_name, role=role, **kwargs)

    def put(self, url_name: str, *, role: str | None, **kwargs):
        return self.request("put", url_name, role=role, **kwargs)

    # Assertions ------------------------------------------------------------
    def assert_http_status(self, response, expected_status: int):
        assert response.status_code == expected_status, getattr(response, "data", response)

    def assert_allowed(self, response):
        assert response.status_code in ALLOWED_STATUSES, response.data

    def assert_denied(self, response, code=status.HTTP_403_FORBIDDEN):
        assert response.status_code == code, response.data

    def extract_results(self, response) -> list:
        data = response.data
        if isinstance(data, dict) and "results" in data:
            return data["results"]
        return data if isinstance(data, list) else []
