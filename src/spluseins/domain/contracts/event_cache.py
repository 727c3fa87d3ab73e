"""Protocol for event caching."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from spluseins.domain.models.event import Event


class EventCacheProtocol(Protocol):
    """Protocol for a key-value store of parsed events with per-entry TTL."""

    def get(self, key: str) -> list["Event"] | None:
        """Get cached events.

        Args:
            key: The cache key.

        Returns:
            The cached events, or None on a miss or after expiry.
        """
        ...

    def set(self, key: str, events: list["Event"], ttl_seconds: float) -> None:
        """Store events under a key.

        Args:
            key: The cache key.
            events: The events to cache.
            ttl_seconds: Lifetime of the entry.
        """
        ...

    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        ...

    def close(self) -> None:
        """Release resources held by the store."""
        ...
