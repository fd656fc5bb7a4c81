"""
Key-value byte stores used to persist the session token.

A store only needs ``load``, ``save`` and ``remove``.  A missing key is
a normal condition reported as ``None``, never as an error.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol


logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[bytes]: ...

    def save(self, key: str, value: bytes) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, mostly useful for tests and short-lived scripts."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def save(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class FileStore:
    """Store backed by a single JSON file.

    The file maps keys to base64 text.  Every write rewrites the whole
    file through a temporary file and ``os.replace`` so readers never
    see a partially written document.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable store file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: top level is not an object", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def load(self, key: str) -> Optional[bytes]:
        with self._lock:
            encoded = self._read().get(key)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError) as exc:
            logger.warning("Ignoring corrupt value for %s in %s: %s", key, self.path, exc)
            return None

    def save(self, key: str, value: bytes) -> None:
        with self._lock:
            data = self._read()
            data[key] = base64.b64encode(value).decode("ascii")
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key not in data:
                return
            del data[key]
            self._write(data)
