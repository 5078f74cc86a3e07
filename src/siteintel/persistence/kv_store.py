"""String key/value stores backing the durable cache tier."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from ..config import settings

_SAFE_KEY = re.compile(r"[^A-Za-z0-9._+-]")


class KeyValueStore(Protocol):
    """Minimal storage contract: string keys to string values.

    Implementations may raise ``OSError`` for unavailable or full storage;
    callers are expected to treat that as a miss.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    """Process-local store, mostly useful for tests and single-worker deployments."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileKeyValueStore:
    """One UTF-8 file per key under the configured cache root."""

    suffix = ".json"

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.cache_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{_SAFE_KEY.sub('_', key)}{self.suffix}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(value)
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return sorted(path.name[: -len(self.suffix)] for path in self.root.glob(f"*{self.suffix}"))
