"""Durable client-side key/value storage.

Only two things are ever persisted on the client: the bearer token and the
id of the active profile. Neither is a source of truth for the profile list.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import orjson
import structlog

logger = structlog.get_logger()


class KeyValueStore(Protocol):
    """Minimal localStorage-like interface."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Non-durable store, for tests and short-lived scripts."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class LocalStore:
    """JSON file backed store. Writes replace the file atomically."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def _load(self) -> dict[str, object]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("local_store_corrupt", path=str(self._path))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".store-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(orjson.dumps(data))
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class StoredValue:
    """A single named key of a store, behind get/set/clear."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._key = key

    def get(self) -> Optional[str]:
        return self._store.get(self._key)

    def set(self, value: str) -> None:
        self._store.set(self._key, value)

    def clear(self) -> None:
        self._store.remove(self._key)
