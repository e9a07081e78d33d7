"""
Persistent key-value storage for RoomBot.

Provides:
- A directory-backed JSON store (one file per key)
- An in-memory store with the same interface
- Retry of transient I/O failures on individual reads and writes
"""

import hashlib
import json
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from roombot.errors import StoreError, StoreUnavailable


class PersistentStore(Protocol):
    """Synchronous string-keyed store of JSON-compatible values."""

    lock: threading.RLock

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """
    In-memory store.

    Values are round-tripped through JSON on write so callers cannot
    mutate stored state through a shared reference.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self.lock = threading.RLock()
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """
    Directory-backed store.

    Storage structure:
    - <directory>/<md5(key)> - {"key": ..., "value": ...}

    Writes go to a temporary file that is then moved over the target,
    so a crash never leaves a half-written value behind.
    """

    def __init__(
        self,
        directory: Path,
        retries: int = 2,
        retry_delay_seconds: float = 0.1,
    ):
        """
        Open (and create if needed) a store directory.

        Args:
            directory: Directory holding one file per key.
            retries: Extra attempts for a failing get/set.
            retry_delay_seconds: Pause between attempts.

        Raises:
            StoreUnavailable: The directory cannot be created or written.
            ValueError: retries or retry_delay_seconds is negative.
        """
        if retries < 0 or retry_delay_seconds < 0:
            raise ValueError("retries and retry_delay_seconds must not be negative")

        self.directory = Path(directory).expanduser()
        self.retries = retries
        self.retry_delay_seconds = retry_delay_seconds
        self.lock = threading.RLock()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot open store at {self.directory}: {e}") from e

        if not os.access(self.directory, os.W_OK):
            raise StoreUnavailable(f"Store directory {self.directory} is not writable")

        logger.debug(f"Brain opened at {self.directory}")

    def _path_for(self, key: str) -> Path:
        return self.directory / hashlib.md5(key.encode("utf-8")).hexdigest()

    def _with_retry(self, action: str, key: str, func):
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return func()
            except OSError as e:
                if attempt == attempts:
                    raise StoreError(f"Failed to {action} '{key}': {e}") from e
                logger.warning(
                    f"Store {action} of '{key}' failed (attempt {attempt}/{attempts}): {e}"
                )
                time.sleep(self.retry_delay_seconds)

    def get(self, key: str) -> Any | None:
        """Read the value stored under key, or None if there is none."""
        path = self._path_for(key)

        def read():
            if not path.exists():
                return None
            with open(path, encoding="utf-8") as f:
                try:
                    data = json.load(f)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    logger.warning(f"Discarding corrupt value for '{key}': {e}")
                    return None
            if not isinstance(data, dict):
                logger.warning(f"Discarding corrupt value for '{key}': not an object")
                return None
            return data.get("value")

        return self._with_retry("read", key, read)

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""
        path = self._path_for(key)
        payload = json.dumps({"key": key, "value": value})

        def write():
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, path)
            except OSError:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise

        self._with_retry("write", key, write)
