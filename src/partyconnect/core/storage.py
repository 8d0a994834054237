from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Protocol
from urllib.parse import quote, unquote

"""
Local key/value persistence.

The stores only need what a browser's local storage offers: get/set/remove of string
values by string key. Two backends implement that port:
- `FileKeyValueStorage`: one file per key under a directory (default `.data/partyconnect/`),
  written via a temporary file + atomic replace.
- `MemoryKeyValueStorage`: a dict, for tests and throwaway sessions.

`JsonSlot` binds one key to JSON `load()/save()` and owns the failure policy: a corrupt
payload loads as None, a failed write is logged and reported as False. Callers keep
their in-memory state either way.
"""

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryKeyValueStorage:
    """In-process storage backend."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


class FileKeyValueStorage:
    """A filesystem-backed storage keyed by string."""

    suffix = ".json"

    def __init__(self, base_dir: Path):
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _key_path(self, key: str) -> Path:
        # Percent-encoding keeps keys reversible for `keys()`.
        return self._base_dir / f"{quote(key, safe='-_.')}{self.suffix}"

    def get(self, key: str) -> str | None:
        path = self._key_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._key_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._key_path(key).unlink(missing_ok=True)

    def keys(self) -> Iterator[str]:
        if not self._base_dir.is_dir():
            return iter([])
        names = sorted(p.name for p in self._base_dir.glob(f"*{self.suffix}"))
        return iter([unquote(n[: -len(self.suffix)]) for n in names])


class JsonSlot:
    """One storage key holding a JSON document."""

    def __init__(self, storage: KeyValueStorage, key: str):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Any | None:
        """Return the decoded payload, or None when missing or unreadable."""
        try:
            raw = self._storage.get(self._key)
        except OSError:
            logger.exception("Could not read storage key %s", self._key)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt payload under storage key %s", self._key)
            return None

    def save(self, payload: Any) -> bool:
        """Serialize and write `payload`; returns False (and logs) on failure."""
        try:
            self._storage.set(self._key, json.dumps(payload, ensure_ascii=False))
        except (OSError, TypeError, ValueError):
            logger.exception("Could not persist storage key %s", self._key)
            return False
        return True

    def clear(self) -> None:
        try:
            self._storage.remove(self._key)
        except OSError:
            logger.exception("Could not remove storage key %s", self._key)
