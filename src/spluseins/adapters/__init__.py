"""Adapters layer - external system integrations."""

from spluseins.adapters.cache import FileEventCache, NullEventCache, create_event_cache
from spluseins.adapters.config import AppConfig
from spluseins.adapters.sked_api import SkedHttpClient, SkedParser

__all__ = [
    "AppConfig",
    "FileEventCache",
    "NullEventCache",
    "SkedHttpClient",
    "SkedParser",
    "create_event_cache",
]
