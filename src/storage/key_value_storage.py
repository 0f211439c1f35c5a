"""Key-value persistence — string keys to string values, optionally backed by a JSON file."""

import json
import logging
import os
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class StorageQuotaError(StorageError):
    """Raised when a write would push the store past its byte quota."""


class MemoryStorage:
    """In-memory string store with an optional byte quota.

    Keys and values are plain strings; callers serialize their own data.
    The quota counts the UTF-8 bytes of every key and value together.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for ``key`` or None if absent."""
        return self._items.get(key)

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def size_bytes(self) -> int:
        """Total UTF-8 size of all keys and values."""
        return sum(_byte_len(k) + _byte_len(v) for k, v in self._items.items())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageError: If the value is not a string or cannot be persisted.
            StorageQuotaError: If the write would exceed the quota.
        """
        if not isinstance(value, str):
            raise StorageError(f"Value for '{key}' must be a string, got {type(value).__name__}")

        if self.quota_bytes is not None:
            current = self._items.get(key)
            projected = self.size_bytes() + _byte_len(value)
            if current is None:
                projected += _byte_len(key)
            else:
                projected -= _byte_len(current)
            if projected > self.quota_bytes:
                raise StorageQuotaError(
                    f"Writing '{key}' needs {projected} bytes, quota is {self.quota_bytes}"
                )

        previous = self._items.get(key)
        self._items[key] = value
        try:
            self._flush()
        except StorageError:
            if previous is None:
                self._items.pop(key, None)
            else:
                self._items[key] = previous
            raise

    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        if key not in self._items:
            return
        previous = self._items.pop(key)
        try:
            self._flush()
        except StorageError:
            self._items[key] = previous
            raise

    def _flush(self) -> None:
        """Persist the current items. No-op for the in-memory store."""


class JsonFileStorage(MemoryStorage):
    """String store persisted as a single JSON object on disk.

    The whole object is rewritten on every mutation. A missing file starts
    empty; an unreadable or corrupt file is logged and also starts empty.
    """

    def __init__(self, path: str = "data/local_storage.json", quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes=quota_bytes)
        self.path = path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self._items = self._read_file()

    def _read_file(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Could not read storage file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.error("Storage file %s does not hold a JSON object", self.path)
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageError(f"Could not write storage file {self.path}: {e}") from e


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))
