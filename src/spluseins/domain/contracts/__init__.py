"""Contracts (protocols) shared between the application and adapters."""

from spluseins.domain.contracts.event_cache import EventCacheProtocol

__all__ = ["EventCacheProtocol"]
