"""Event cache used when caching is disabled."""

from __future__ import annotations

from typing import TYPE_CHECKING

from spluseins.domain.contracts.event_cache import EventCacheProtocol

if TYPE_CHECKING:
    from spluseins.domain.models.event import Event


class NullEventCache(EventCacheProtocol):
    """Always-empty store: every read is a miss and writes are discarded."""

    def get(self, key: str) -> list[Event] | None:  # noqa: ARG002
        return None

    def set(self, key: str, events: list[Event], ttl_seconds: float) -> None:  # noqa: ARG002
        return None

    def delete(self, key: str) -> None:  # noqa: ARG002
        return None

    def close(self) -> None:
        return None
