from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING
from typing import Any

from django.db import transaction

from tuma_cargo.audit.utils import log_action
from tuma_cargo.cms.defaults import SECTIONS
from tuma_cargo.cms.defaults import get_default_settings_document
from tuma_cargo.cms.models import AdminSettings

if TYPE_CHECKING:  # pragma: no cover - typing only
    from tuma_cargo.users.models import User

logger = logging.getLogger(__name__)

# Metadata the admin UI echoes back with the document; ignored on write
METADATA_KEYS = frozenset(
    {"id", "version", "lastUpdatedBy", "last_updated_by", "updatedAt", "updated_at"},
)


class InvalidSettingsError(ValueError):
    pass


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into base (dict-only), returning a new dict."""

    out: dict[str, Any] = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def get_settings_row() -> AdminSettings | None:
    return AdminSettings.objects.filter(pk=AdminSettings.SINGLETON_ID).first()


def get_settings_document(row: AdminSettings | None = None) -> dict[str, Any]:
    """Return the default document merged with whatever has been stored."""

    defaults = get_default_settings_document()
    row = row or get_settings_row()
    if not row or not isinstance(row.document, dict):
        return defaults
    return _deep_merge(defaults, row.document)


def feature_enabled(name: str) -> bool:
    features = get_settings_document().get("features") or {}
    return bool(features.get(name, False))


def _clean_advertisements(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        msg = "advertisements must be a list"
        raise InvalidSettingsError(msg)
    return [
        ad
        for ad in value
        if isinstance(ad, dict) and str(ad.get("title") or "").strip()
    ]


@transaction.atomic
def update_settings(changes: dict[str, Any], actor: User) -> AdminSettings:
    """Apply a partial update to the settings document and bump its version.

    Dict sections are merged into the stored section, anything else replaces
    it. Advertisements without a title are dropped.
    """
    if not isinstance(changes, dict):
        msg = "Expected JSON object"
        raise InvalidSettingsError(msg)
    changes = {k: v for k, v in changes.items() if k not in METADATA_KEYS}
    unknown = sorted(set(changes) - SECTIONS)
    if unknown:
        msg = f"Unknown settings sections: {', '.join(unknown)}"
        raise InvalidSettingsError(msg)

    row = (
        AdminSettings.objects.select_for_update()
        .filter(pk=AdminSettings.SINGLETON_ID)
        .first()
    )
    if row is None:
        row = AdminSettings(document={})
    stored = dict(row.document) if isinstance(row.document, dict) else {}

    for section, value in changes.items():
        if section == "advertisements":
            value = _clean_advertisements(value)  # noqa: PLW2901
        if isinstance(value, dict) and isinstance(stored.get(section), dict):
            stored[section] = _deep_merge(stored[section], value)
        else:
            stored[section] = value

    row.document = stored
    row.version += 1
    row.last_updated_by = actor
    row.save()

    log_action(
        "settings_updated",
        actor=actor,
        message=f"sections={','.join(sorted(changes))} version={row.version}",
        target=row,
    )
    logger.info("Admin settings updated to version %s by %s", row.version, actor.pk)
    return row
