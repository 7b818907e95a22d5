from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import models

from .models import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request) -> str:
    """First hop of X-Forwarded-For when behind the proxy, else REMOTE_ADDR."""
    if request is None:
        return ""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def log_action(  # noqa: PLR0913
    action: str,
    *,
    actor: object | None = None,
    target: models.Model | None = None,
    request=None,
    message: str = "",
    model_name: str = "",
    record_id: int | None = None,
    before: dict | list | None = None,
    after: dict | list | None = None,
    ip_address: str = "",
) -> AuditLog:
    """Append an audit entry.

    ``target`` fills ``model_name``/``record_id`` from a model instance and
    ``request`` fills the actor and client IP when they are not given.
    """
    if target is not None:
        model_name = model_name or target._meta.label  # noqa: SLF001
        record_id = record_id if record_id is not None else target.pk
    if request is not None:
        actor = actor if actor is not None else getattr(request, "user", None)
        ip_address = ip_address or client_ip(request)

    actor_user = actor if isinstance(actor, get_user_model()) else None
    entry = AuditLog.objects.create(
        action=action,
        actor=actor_user,
        message=message,
        model_name=model_name,
        record_id=record_id,
        before=before,
        after=after,
        ip_address=ip_address,
    )
    logger.info(
        "audit %s actor=%s target=%s#%s",
        action,
        getattr(actor_user, "pk", None),
        model_name or "-",
        record_id,
    )
    return entry
