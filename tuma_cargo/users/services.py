from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.token_blacklist.models import OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .tasks import send_verification_email

if TYPE_CHECKING:
    from .models import User

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> dict[str, str]:
    """Return a fresh access/refresh pair carrying the user's role."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


def revoke_refresh_tokens(user: User) -> int:
    """Blacklist every outstanding refresh token of ``user``."""
    revoked = 0
    pending = OutstandingToken.objects.filter(user=user, blacklistedtoken__isnull=True)
    for token in pending:
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        revoked += int(created)
    if revoked:
        logger.info("Revoked %s refresh token(s) for user %s", revoked, user.pk)
    return revoked


def queue_verification_email(user: User) -> None:
    user_id = user.pk
    transaction.on_commit(lambda: send_verification_email.delay(user_id))
