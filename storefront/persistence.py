"""
Durable key-value persistence for session state.

The store keeps its cart, wishlist, recently-viewed list, locale and current
user here so a restarted session picks up where the shopper left off. The
mock database keeps its aggregate record here too.

Design decisions:
- Values are JSON-serializable blobs stored under a fixed key name
- Storage is a cache of session state, not a source of truth: every read
  and write fails soft (logged, never raised)
- A failed write leaves the previously stored value untouched
- Backends are swappable: a directory of JSON files for real sessions and
  an in-memory dict for tests
- An optional byte quota simulates a full browser-style storage area
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

from storefront.errors import QuotaExceededError

logger = logging.getLogger("persistence")


# Durable slice keys
CART_KEY = "nova_cart"
WISHLIST_KEY = "nova_wishlist"
VIEWED_KEY = "nova_viewed"
LOCALE_KEY = "nova_locale"
USER_KEY = "nova_user"
MOCK_DB_KEY = "novamart_db"


class StorageBackend(Protocol):
    """Raw string storage. Implementations may raise on any call."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, raw: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryBackend:
    """In-memory backend, optionally bounded by a byte quota."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, raw: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode()) for k, v in self._data.items() if k != key)
            if used + len(raw.encode()) > self.quota_bytes:
                raise QuotaExceededError(
                    f"Writing {key!r} would exceed the {self.quota_bytes} byte quota"
                )
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileBackend:
    """
    One `<key>.json` file per key inside a directory.

    Writes go to a temp file first and are moved into place, so a failed
    write never truncates the existing file.
    """

    def __init__(self, directory: Path, quota_bytes: Optional[int] = None):
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, raw: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        if self.quota_bytes is not None:
            used = sum(
                p.stat().st_size for p in self.directory.glob("*.json")
                if p.name != f"{key}.json"
            )
            if used + len(raw.encode()) > self.quota_bytes:
                raise QuotaExceededError(
                    f"Writing {key!r} would exceed the {self.quota_bytes} byte quota"
                )
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(raw)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return [p.stem for p in self.directory.glob("*.json")]


class PersistenceAdapter:
    """
    Fail-soft access to durable storage.

    Example:
        storage = PersistenceAdapter(JsonFileBackend(Path("~/.novamart").expanduser()))
        storage.save("nova_locale", "hi")
        storage.load("nova_locale", default="en")  # "hi"
    """

    def __init__(self, backend: Optional[StorageBackend] = None):
        """
        Args:
            backend: Where blobs live (in-memory when omitted)
        """
        self.backend = backend or MemoryBackend()

    def load(self, key: str, default: Any = None) -> Any:
        """
        Read and decode the value stored under `key`.

        Returns `default` when the key is absent or unreadable. Never raises.
        """
        try:
            raw = self.backend.get(key)
            if raw is None:
                return default
            return json.loads(raw)
        except Exception as e:
            logger.warning(f"Could not load {key!r}, using default: {e}")
            return default

    def save(self, key: str, value: Any) -> bool:
        """
        Encode and store `value` under `key`.

        Returns True on success. On failure logs an error and leaves the
        previously stored value in place. Never raises.
        """
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialize {key!r}: {e}")
            return False
        try:
            self.backend.set(key, raw)
        except QuotaExceededError as e:
            logger.error(f"Storage full, {key!r} not saved: {e}")
            return False
        except Exception as e:
            logger.error(f"Save of {key!r} failed: {e}")
            return False
        logger.debug(f"Saved {key!r} ({len(raw)} bytes)")
        return True

    def remove(self, key: str) -> bool:
        """Delete `key`. Returns False (logged) if the backend refused."""
        try:
            self.backend.delete(key)
            return True
        except Exception as e:
            logger.error(f"Remove of {key!r} failed: {e}")
            return False

    def contains(self, key: str) -> bool:
        try:
            return key in self.backend.keys()
        except Exception as e:
            logger.warning(f"Could not list storage keys: {e}")
            return False
