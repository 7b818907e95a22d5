from __future__ import annotations

import json
import logging
import time
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "confirm_password",
        "password_confirm",
        "token",
        "refresh",
        "access",
    },
)
REDACTED = "***"


def redact(data: Any) -> Any:
    """Return ``data`` with password and token values masked."""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


class RequestLoggingMiddleware:
    """Log one line per API request with its status and duration."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        body = self._body_for_log(request) if settings.DEBUG else None
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO  # noqa: PLR2004
        logger.log(
            level,
            "%s %s %s %.1fms",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
        )
        if body is not None:
            logger.debug("Request body for %s %s: %s", request.method, request.path, body)
        return response

    def _body_for_log(self, request) -> Any | None:
        if request.method not in {"POST", "PUT", "PATCH"}:
            return None
        if request.content_type != "application/json":
            return None
        try:
            return redact(json.loads(request.body or b"{}"))
        except ValueError:
            return None
