"""drf-spectacular hooks for the cargo API schema.

The router is mounted twice (``/api/`` and ``/api/v1/``); only the versioned
copy is documented.  Operations are then grouped into one tag per area so the
Swagger UI reads Products, Orders, Chat... instead of one tag per URL segment.
"""

from __future__ import annotations

from typing import Any

DOCUMENTED_PREFIX = "/api/v1/"

_HTTP_METHODS = {"get", "post", "put", "patch", "delete", "options", "head"}

# First match wins, so narrower prefixes come first.
PATTERN_TAGS = [
    ("/api/v1/auth/", "Authentication"),
    ("/api/v1/users", "Users"),
    ("/api/v1/admin/users", "Admin • Users"),
    ("/api/v1/admin/settings", "Admin • Settings"),
    ("/api/v1/admin/", "Admin • Dashboard"),
    ("/api/v1/public/", "Public"),
    ("/api/v1/products", "Products"),
    ("/api/v1/orders", "Orders"),
    ("/api/v1/chat", "Chat"),
    ("/api/v1/socket/", "Chat"),
    ("/api/v1/notifications", "Notifications"),
    ("/api/v1/upload", "Uploads"),
    ("/api/v1/audit", "Audit"),
]

ALL_TAGS = list(dict.fromkeys(tag for _, tag in PATTERN_TAGS))


def versioned_only(endpoints, **kwargs):
    """Preprocessing hook: drop the unversioned ``/api/`` duplicates."""
    return [
        endpoint
        for endpoint in endpoints
        if endpoint[0].startswith(DOCUMENTED_PREFIX)
    ]


def assign_group_tag(path: str) -> str | None:
    return next(
        (tag for prefix, tag in PATTERN_TAGS if path.startswith(prefix)),
        None,
    )


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    """Postprocessing hook: give every operation exactly one area tag."""
    for path, path_item in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if tag is None:
            continue
        for method, operation in path_item.items():
            if method.lower() in _HTTP_METHODS and isinstance(operation, dict):
                operation["tags"] = [tag]

    declared = result.setdefault("tags", [])
    seen = {entry.get("name") for entry in declared}
    declared.extend({"name": tag} for tag in ALL_TAGS if tag not in seen)
    return result
