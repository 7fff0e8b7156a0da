"""In-memory key-value adapter — implements KeyValueStore.

Used by tests and by callers that do not need state across restarts.
An optional byte quota emulates a full browser storage area.
"""

from __future__ import annotations

from taskboard.ports.storage_port import StorageError


class MemoryKeyValueStore:
    """Dict-backed string store."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(
                len(v.encode("utf-8")) for k, v in self._items.items() if k != key
            )
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise StorageError(f"Quota exceeded writing {key!r}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
