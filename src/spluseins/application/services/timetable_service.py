"""Timetable service: cached loading, unique-events view and multi-timetable merge."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from spluseins.domain.models.event import Event

if TYPE_CHECKING:
    from collections.abc import Sequence

    from spluseins.domain.contracts.event_cache import EventCacheProtocol
    from spluseins.domain.models.timetable_request import TimetableRequest
    from spluseins.domain.ports import LectureParser, SkedFetcher

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 10800


def lectures_cache_key(timetable: TimetableRequest) -> str:
    """Cache key of a timetable's parsed events.

    The week is not part of the key: the full timetable is cached and week
    filtering happens after retrieval.
    """
    return f"lectures-{timetable.id}"


def in_iso_week(event: Event, week: int) -> bool:
    """Check whether an event starts in the given ISO week."""
    return event.start is not None and event.start.isocalendar().week == week


class TimetableService:
    """Loads sked timetables through the cache and shapes them for the front-end."""

    def __init__(
        self,
        fetcher: SkedFetcher,
        parser: LectureParser,
        cache: EventCacheProtocol,
        cache_seconds: float = DEFAULT_CACHE_SECONDS,
    ) -> None:
        """Initialize the service.

        Args:
            fetcher: Retrieves timetable HTML from sked.
            parser: Turns timetable HTML into lectures.
            cache: Store for parsed events.
            cache_seconds: Lifetime of cached events.
        """
        self.fetcher = fetcher
        self.parser = parser
        self.cache = cache
        self.cache_seconds = cache_seconds
        self._in_flight: dict[str, asyncio.Task[list[Event]]] = {}

    async def _fetch_and_parse(self, timetable: TimetableRequest, key: str) -> list[Event]:
        """Fetch, parse and store one timetable."""
        logger.info(f"Lectures cache miss for key {key}")
        html = await self.fetcher.fetch(timetable)
        lectures = self.parser.parse(html, timetable)
        events = [Event.from_lecture(lecture) for lecture in lectures]
        logger.info(f"Storing {len(events)} parsed lectures for {key} in cache")
        await asyncio.to_thread(self.cache.set, key, events, self.cache_seconds)
        return events

    async def _load_through_cache(self, timetable: TimetableRequest, key: str) -> list[Event]:
        # Cache stores may touch the filesystem, so they run off the event loop
        cached = await asyncio.to_thread(self.cache.get, key)
        if cached is not None:
            return cached
        return await self._fetch_and_parse(timetable, key)

    def _forget_in_flight(self, key: str, task: asyncio.Task[list[Event]]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark a failure as retrieved even when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def load(self, timetable: TimetableRequest) -> list[Event]:
        """Load all events of a timetable, from the cache when possible.

        Concurrent loads of the same key share a single cache lookup and at
        most one upstream fetch; every waiter gets its result or its failure.
        """
        key = lectures_cache_key(timetable)
        task = self._in_flight.get(key)
        if task is None or task.done():
            task = asyncio.create_task(self._load_through_cache(timetable, key))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget_in_flight(key, done))

        # A cancelled waiter must not cancel the load other waiters share
        return await asyncio.shield(task)

    async def get_unique_events(self, timetable: TimetableRequest) -> list[Event]:
        """Return one representative event per distinct id.

        The first occurrence of each id is kept, with its start and end
        cleared since they belong to that one occurrence only.
        """
        all_events = await self.load(timetable)
        representatives: dict[str, Event] = {}
        for event in all_events:
            if event.id not in representatives:
                representatives[event.id] = event.without_times()
        return list(representatives.values())

    async def _load_week(self, timetable: TimetableRequest) -> list[Event]:
        events = await self.load(timetable)
        return [event for event in events if in_iso_week(event, timetable.week)]

    async def get_events(self, timetables: Sequence[TimetableRequest]) -> list[Event]:
        """Merge the requested weeks of several timetables.

        Timetables are loaded concurrently; if any of them fails the whole
        call fails. Events reported identically by several timetables are
        collapsed: the last occurrence wins and keeps the first one's position.
        """
        if not timetables:
            return []

        per_timetable = await asyncio.gather(
            *(self._load_week(timetable) for timetable in timetables)
        )

        events_by_key: dict[str, Event] = {}
        for events in per_timetable:
            for event in events:
                events_by_key[event.dedupe_key()] = event
        events = list(events_by_key.values())

        logger.info(f"Serving {len(events)} lectures for {timetables[0].id}")
        return events
