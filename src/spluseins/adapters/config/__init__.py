"""Configuration adapters."""

from spluseins.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
