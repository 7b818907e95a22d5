"""Liveness endpoint for load balancers and the admin status widget."""

from __future__ import annotations

import logging
import time
from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 0.5
_STARTED_AT = time.monotonic()


def _probe(name: str, check) -> dict[str, Any]:
    started = time.perf_counter()
    try:
        check()
    except Exception as exc:  # noqa: BLE001 - a failing dependency is reported, not raised
        logger.warning("Health probe %s failed: %s", name, exc)
        result: dict[str, Any] = {"ok": False, "error": str(exc)}
    else:
        result = {"ok": True}
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 1)
    return result


def _ping_database() -> None:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_redis() -> None:
    url = getattr(settings, "REDIS_URL", "")
    if not url:
        msg = "REDIS_URL not configured"
        raise RuntimeError(msg)
    client = redis.Redis.from_url(
        url,
        socket_timeout=PROBE_TIMEOUT,
        socket_connect_timeout=PROBE_TIMEOUT,
    )
    client.ping()


def health(request):
    components = {
        "db": _probe("db", _ping_database),
        "redis": _probe("redis", _ping_redis),
    }
    # Orders, chat and auth all need the database; Redis only carries
    # Celery and cross-process socket fan-out.
    if all(c["ok"] for c in components.values()):
        status, http_status = "ok", 200
    elif components["db"]["ok"]:
        status, http_status = "degraded", 503
    else:
        status, http_status = "down", 503

    return JsonResponse(
        {
            "status": status,
            "components": components,
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
            "timestamp": timezone.now().isoformat(),
        },
        status=http_status,
    )
