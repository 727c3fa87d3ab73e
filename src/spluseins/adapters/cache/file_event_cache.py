"""Filesystem event cache with per-entry expiry."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from spluseins.domain.contracts.event_cache import EventCacheProtocol
from spluseins.domain.models.event import Event

logger = logging.getLogger(__name__)

_EVENTS_ADAPTER = TypeAdapter(list[Event])


class FileEventCache(EventCacheProtocol):
    """Stores event lists as JSON files, sharded into subdirectories by key hash.

    Entry layout: ``<root>/<h[0:2]>/<h[2:4]>/<h>.json`` where ``h`` is the
    SHA-256 of the key. Expired entries are removed when they are read.
    """

    def __init__(self, root: str | Path, clock: Callable[[], float] = time.time) -> None:
        """Initialize the cache.

        Args:
            root: Directory holding the cache files, created if missing.
            clock: Source of the current time in seconds.
        """
        self._root = Path(root)
        self._clock = clock
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._root / digest[:2] / digest[2:4] / f"{digest}.json"

    def get(self, key: str) -> list[Event] | None:
        """Get cached events, or None on a miss or after expiry."""
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            entry = json.loads(raw)
            expires_at = float(entry["expires_at"])
            events = _EVENTS_ADAPTER.validate_python(entry["events"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Dropping unreadable cache entry for key {key}: {e}")
            self.delete(key)
            return None

        if expires_at <= self._clock():
            logger.debug(f"Cache entry for key {key} expired")
            self.delete(key)
            return None
        return events

    def set(self, key: str, events: list[Event], ttl_seconds: float) -> None:
        """Store events under a key; a non-positive TTL stores nothing and drops any old entry."""
        if ttl_seconds <= 0:
            self.delete(key)
            return

        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = {
            "key": key,
            "expires_at": self._clock() + ttl_seconds,
            "events": _EVENTS_ADAPTER.dump_python(events, mode="json", by_alias=True),
        }

        # Write to a temporary file first so readers never see a partial entry
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entry, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        self._path(key).unlink(missing_ok=True)

    def close(self) -> None:
        """Nothing to release; entries stay on disk for the next process."""
