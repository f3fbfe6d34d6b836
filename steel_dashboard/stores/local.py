"""
Local key/value storage used as a fallback when the card store is
unreachable.

Values are JSON-encoded strings under keys namespaced by STORAGE_PREFIX.
Storage is in memory unless a file path is given, in which case the whole
namespace is persisted as one JSON object.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..config import STORAGE_PREFIX

logger = logging.getLogger(__name__)


class LocalStorage:
    """Namespaced JSON key/value store.

    Read and write failures are logged and never raised: local storage is a
    best-effort backup and must not break the operation that uses it.
    """

    def __init__(self, path: str | Path | None = None, prefix: str = STORAGE_PREFIX) -> None:
        self.prefix = prefix
        self.path = Path(path) if path is not None else None
        self._items: dict[str, str] = {}
        if self.path is not None and self.path.exists():
            try:
                self._items = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error("Error reading local storage file %s: %s", self.path, e)
                self._items = {}

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _flush(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._items, indent=2), encoding="utf-8")

    def save(self, key: str, data: Any) -> None:
        try:
            self._items[self._key(key)] = json.dumps(data)
            self._flush()
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving '%s' to local storage: %s", key, e)

    def load(self, key: str, default: Any = None) -> Any:
        raw = self._items.get(self._key(key))
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("Error loading '%s' from local storage: %s", key, e)
            return default

    def remove(self, key: str) -> None:
        try:
            self._items.pop(self._key(key), None)
            self._flush()
        except OSError as e:
            logger.error("Error removing '%s' from local storage: %s", key, e)

    def clear(self) -> None:
        """Remove every key in this namespace, leaving foreign keys intact."""
        try:
            for key in [k for k in self._items if k.startswith(self.prefix)]:
                del self._items[key]
            self._flush()
        except OSError as e:
            logger.error("Error clearing local storage: %s", e)

    def keys(self) -> list[str]:
        """Un-prefixed keys currently stored in this namespace."""
        return [k[len(self.prefix):] for k in self._items if k.startswith(self.prefix)]
