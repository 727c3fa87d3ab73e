"""Event cache adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from spluseins.adapters.cache.file_event_cache import FileEventCache
from spluseins.adapters.cache.null_event_cache import NullEventCache

if TYPE_CHECKING:
    from spluseins.adapters.config.app_config import AppConfig
    from spluseins.domain.contracts.event_cache import EventCacheProtocol

logger = logging.getLogger(__name__)


def create_event_cache(config: AppConfig) -> EventCacheProtocol:
    """Create the event cache selected by the configuration."""
    if config.cache_disable:
        logger.info("Lecture cache disabled")
        return NullEventCache()
    logger.info(f"Caching lectures in {config.cache_path} for {config.splus_cache_seconds}s")
    return FileEventCache(config.cache_path)


__all__ = ["FileEventCache", "NullEventCache", "create_event_cache"]
