import json
import logging

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from tuma_cargo.utils.middleware import REDACTED
from tuma_cargo.utils.middleware import RequestLoggingMiddleware
from tuma_cargo.utils.middleware import redact


def test_redact_masks_nested_secrets():
    data = {
        "email": "a@example.com",
        "Password": "hunter22",
        "profile": {"refresh": "abc", "name": "Alice"},
        "items": [{"token": "xyz"}, 3],
    }
    assert redact(data) == {
        "email": "a@example.com",
        "Password": REDACTED,
        "profile": {"refresh": REDACTED, "name": "Alice"},
        "items": [{"token": REDACTED}, 3],
    }


class TestRequestLoggingMiddleware:
    def _middleware(self, status=200):
        return RequestLoggingMiddleware(lambda request: HttpResponse(status=status))

    def test_logs_api_requests(self, caplog):
        request = RequestFactory().get("/api/v1/products/")
        with caplog.at_level(logging.INFO, logger="tuma_cargo.utils.middleware"):
            self._middleware()(request)
        assert caplog.records[0].levelno == logging.INFO
        assert caplog.records[0].getMessage().startswith("GET /api/v1/products/ 200 ")

    def test_server_errors_are_warnings(self, caplog):
        request = RequestFactory().get("/api/v1/orders/")
        with caplog.at_level(logging.INFO, logger="tuma_cargo.utils.middleware"):
            self._middleware(status=502)(request)
        assert caplog.records[0].levelno == logging.WARNING

    def test_ignores_other_paths(self, caplog):
        request = RequestFactory().get("/health/")
        with caplog.at_level(logging.DEBUG, logger="tuma_cargo.utils.middleware"):
            self._middleware()(request)
        assert caplog.records == []

    @pytest.mark.parametrize("debug", [True, False])
    def test_body_is_logged_redacted_in_debug(self, caplog, settings, debug):
        settings.DEBUG = debug
        request = RequestFactory().post(
            "/api/v1/auth/login/",
            data=json.dumps({"email": "a@example.com", "password": "hunter22"}),
            content_type="application/json",
        )
        with caplog.at_level(logging.DEBUG, logger="tuma_cargo.utils.middleware"):
            self._middleware()(request)
        bodies = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        if debug:
            assert "hunter22" not in bodies[0]
            assert REDACTED in bodies[0]
        else:
            assert bodies == []
