"""A file-backed response cache with a time-to-live."""

from __future__ import annotations

import hashlib
import shutil
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path


@dataclass
class Store:
    """Key-value cache storing each value as a JSON file under ``dir``."""

    dir: Path
    ttl: timedelta

    def __post_init__(self) -> None:
        self.dir = Path(self.dir)
        if not isinstance(self.ttl, timedelta):
            self.ttl = timedelta(seconds=self.ttl)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).digest()
        return self.dir / f"{digest[:8].hex()}.json"

    def get(self, key: str) -> bytes | None:
        """Return the cached value, or None if it is missing or expired."""
        path = self._path(key)
        try:
            age = time.time() - path.stat().st_mtime
            if age > self.ttl.total_seconds():
                return None
            return path.read_bytes()
        except OSError:
            return None

    def set(self, key: str, value: bytes | str) -> None:
        """Store a value; failures are ignored because caching is best-effort."""
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        try:
            self.dir.mkdir(parents=True, exist_ok=True)
            self._path(key).write_bytes(data)
        except OSError:
            pass

    def clear(self) -> None:
        """Remove every cached entry."""
        if self.dir.exists():
            shutil.rmtree(self.dir)