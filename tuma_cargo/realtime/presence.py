"""Registry of the users connected to this process's Socket.IO server.

Entries are keyed by user id and count sockets, so a user with two tabs open
stays online until both disconnect. Each worker process has its own registry.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime

from django.utils import timezone


@dataclass
class PresenceEntry:
    user_id: int
    name: str
    role: str
    connected_at: datetime
    sids: set[str] = field(default_factory=set)

    def as_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "name": self.name,
            "role": self.role,
            "connections": len(self.sids),
            "connectedAt": self.connected_at.isoformat(),
        }


class PresenceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[int, PresenceEntry] = {}
        self._sid_to_user: dict[str, int] = {}

    def add(self, sid: str, user_id: int, name: str, role: str) -> bool:
        """Register a socket; True when it is the user's first one."""
        with self._lock:
            entry = self._users.get(user_id)
            first = entry is None
            if entry is None:
                entry = PresenceEntry(
                    user_id=user_id,
                    name=name,
                    role=role,
                    connected_at=timezone.now(),
                )
                self._users[user_id] = entry
            entry.sids.add(sid)
            self._sid_to_user[sid] = user_id
            return first

    def remove(self, sid: str) -> tuple[int | None, bool]:
        """Drop a socket; returns its user id and whether the user went offline."""
        with self._lock:
            user_id = self._sid_to_user.pop(sid, None)
            if user_id is None:
                return None, False
            entry = self._users.get(user_id)
            if entry is None:
                return user_id, False
            entry.sids.discard(sid)
            if entry.sids:
                return user_id, False
            del self._users[user_id]
            return user_id, True

    def is_online(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._users

    def snapshot(self) -> list[dict]:
        with self._lock:
            entries = sorted(self._users.values(), key=lambda e: e.connected_at)
            return [entry.as_dict() for entry in entries]

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._sid_to_user.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


registry = PresenceRegistry()
