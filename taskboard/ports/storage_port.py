"""Storage port — string-keyed store for board state.

Mirrors the browser's localStorage: one key holds one JSON string.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when a value cannot be written (quota, I/O, locked DB...)."""


class KeyValueStore(Protocol):
    """Abstract key-value interface used by the task stores."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...
