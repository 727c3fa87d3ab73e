"""Construction of the timetable service from configuration."""

from typing import TYPE_CHECKING

from spluseins.adapters.cache import create_event_cache
from spluseins.adapters.sked_api import SkedHttpClient, SkedParser
from spluseins.application.services import TimetableService

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from spluseins.adapters.config import AppConfig


def build_timetable_service(config: "AppConfig", session: "ClientSession") -> TimetableService:
    """Wire fetcher, parser and cache into a timetable service.

    The caller owns the session and must close ``service.cache`` when done.
    """
    fetcher = SkedHttpClient(
        session=session,
        base_url=config.sked_url,
        username=config.sked_user,
        password=config.sked_password,
        retry_policy=config.retry_policy(),
        timeout_seconds=config.sked_timeout_seconds,
    )
    return TimetableService(
        fetcher=fetcher,
        parser=SkedParser(config.tzinfo()),
        cache=create_event_cache(config),
        cache_seconds=config.splus_cache_seconds,
    )
