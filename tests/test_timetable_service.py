"""Tests for the timetable service."""

import asyncio
import gc
import time
from datetime import timedelta
from pathlib import Path

import pytest

from spluseins.adapters.cache import FileEventCache, NullEventCache
from spluseins.application.services import TimetableService, lectures_cache_key
from spluseins.domain.models import FetchError, RawLecture, TimetableRequest, lecture_id
from tests.fakes import (
    WEEK_42_MONDAY,
    DictEventCache,
    FakeClock,
    SlowEventCache,
    StubFetcher,
    StubParser,
    lecture,
)

T1 = TimetableRequest(id="T1", sked_path="i/T1.html", week=42)
T2 = TimetableRequest(id="T2", sked_path="i/T2.html", week=42)


@pytest.fixture
def t1_lectures() -> list[RawLecture]:
    """Three lectures, two of them occurrences of the same lecture L1."""
    return [
        lecture("L1", WEEK_42_MONDAY),
        lecture("L2", WEEK_42_MONDAY + timedelta(hours=2), room="B 202"),
        lecture("L1", WEEK_42_MONDAY + timedelta(days=2)),
    ]


def _service(
    fetcher: StubFetcher,
    lectures: dict[str, list[RawLecture]],
    cache: FileEventCache | NullEventCache | DictEventCache,
) -> TimetableService:
    return TimetableService(fetcher, StubParser(lectures), cache, cache_seconds=60)


def test_cache_key_ignores_week() -> None:
    """Given two requests differing only in week, when building keys, then they are equal."""
    other_week = T1.model_copy(update={"week": 43})

    assert lectures_cache_key(T1) == lectures_cache_key(other_week) == "lectures-T1"


@pytest.mark.asyncio
async def test_load_wraps_every_lecture(tmp_path: Path, t1_lectures: list[RawLecture]) -> None:
    """Given parsed lectures, when loading, then one event per lecture is returned in order."""
    service = _service(StubFetcher(), {"T1": t1_lectures}, FileEventCache(tmp_path))

    events = await service.load(T1)

    assert len(events) == len(t1_lectures)
    for event, raw in zip(events, t1_lectures, strict=True):
        assert event.id == lecture_id(raw)
        assert event.title == raw.title
        assert event.location == raw.room
        assert event.start == raw.start
        assert event.end == raw.end


@pytest.mark.asyncio
async def test_load_twice_hits_cache(tmp_path: Path, t1_lectures: list[RawLecture]) -> None:
    """Given a loaded timetable, when loading again within the TTL, then no second fetch happens."""
    fetcher = StubFetcher()
    service = _service(fetcher, {"T1": t1_lectures}, FileEventCache(tmp_path))

    first = await service.load(T1)
    second = await service.load(T1)

    assert fetcher.calls["T1"] == 1
    assert [e.model_dump_json() for e in first] == [e.model_dump_json() for e in second]


@pytest.mark.asyncio
async def test_load_after_ttl_fetches_again(
    tmp_path: Path, fake_clock: FakeClock, t1_lectures: list[RawLecture]
) -> None:
    """Given an expired entry, when loading, then exactly one new fetch happens."""
    fetcher = StubFetcher()
    service = _service(fetcher, {"T1": t1_lectures}, FileEventCache(tmp_path, clock=fake_clock))

    await service.load(T1)
    fake_clock.advance(61)
    await service.load(T1)
    await service.load(T1)

    assert fetcher.calls["T1"] == 2


@pytest.mark.asyncio
async def test_load_without_cache_always_fetches(t1_lectures: list[RawLecture]) -> None:
    """Given the disabled cache, when loading twice, then both loads fetch."""
    fetcher = StubFetcher()
    service = _service(fetcher, {"T1": t1_lectures}, NullEventCache())

    await service.load(T1)
    await service.load(T1)

    assert fetcher.calls["T1"] == 2


@pytest.mark.asyncio
async def test_concurrent_cold_loads_share_one_fetch(t1_lectures: list[RawLecture]) -> None:
    """Given two simultaneous cold loads, when they run, then only one upstream fetch happens."""
    fetcher = StubFetcher()
    fetcher.gate = asyncio.Event()
    service = _service(fetcher, {"T1": t1_lectures}, NullEventCache())

    loads = asyncio.gather(service.load(T1), service.load(T1))
    await asyncio.sleep(0)
    fetcher.gate.set()
    first, second = await loads

    assert fetcher.calls["T1"] == 1
    assert first == second


@pytest.mark.asyncio
async def test_concurrent_cold_loads_share_one_failure() -> None:
    """Given two simultaneous loads of a failing timetable, when they run, then both fail from one fetch."""
    fetcher = StubFetcher(failing_ids={"T1"})
    service = _service(fetcher, {}, NullEventCache())

    results = await asyncio.gather(service.load(T1), service.load(T1), return_exceptions=True)

    assert all(isinstance(result, FetchError) for result in results)
    assert fetcher.calls["T1"] == 1


@pytest.mark.asyncio
async def test_slow_cache_does_not_block_event_loop(t1_lectures: list[RawLecture]) -> None:
    """Given a cache with slow reads, when loading, then other coroutines keep running meanwhile."""
    service = _service(StubFetcher(), {"T1": t1_lectures}, SlowEventCache(read_seconds=0.3))
    gaps: list[float] = []

    async def tick() -> None:
        last = time.monotonic()
        for _ in range(5):
            await asyncio.sleep(0.01)
            now = time.monotonic()
            gaps.append(now - last)
            last = now

    ticker = asyncio.create_task(tick())
    await service.load(T1)
    await ticker

    assert max(gaps) < 0.2


@pytest.mark.asyncio
async def test_failure_after_all_waiters_cancelled_is_not_reported_unhandled() -> None:
    """Given a shared load whose only waiter was cancelled, when it fails, then no unhandled error is reported."""
    loop = asyncio.get_running_loop()
    unhandled: list[dict[str, object]] = []
    loop.set_exception_handler(lambda _loop, context: unhandled.append(context))
    fetcher = StubFetcher(failing_ids={"T1"})
    fetcher.gate = asyncio.Event()
    service = _service(fetcher, {}, NullEventCache())

    waiter = asyncio.create_task(service.load(T1))
    while fetcher.calls["T1"] == 0:
        await asyncio.sleep(0.001)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter
    fetcher.gate.set()
    while service._in_flight:
        await asyncio.sleep(0.001)
    gc.collect()
    loop.set_exception_handler(None)

    assert unhandled == []


@pytest.mark.asyncio
async def test_unique_events_scenario(tmp_path: Path, t1_lectures: list[RawLecture]) -> None:
    """Given T1 with two occurrences of L1, when getting unique events, then L1 appears once without times."""
    service = _service(StubFetcher(), {"T1": t1_lectures}, FileEventCache(tmp_path))

    unique = await service.get_unique_events(T1)

    assert len(unique) == 2
    assert [event.title for event in unique] == ["L1", "L2"]
    l1 = unique[0]
    assert l1.id == lecture_id(t1_lectures[0])
    assert l1.start is None
    assert l1.end is None
    assert l1.location == t1_lectures[0].room


@pytest.mark.asyncio
async def test_unique_events_has_one_entry_per_id(
    tmp_path: Path, t1_lectures: list[RawLecture]
) -> None:
    """Given any timetable, when getting unique events, then ids are distinct and complete."""
    service = _service(StubFetcher(), {"T1": t1_lectures}, FileEventCache(tmp_path))

    all_events = await service.load(T1)
    unique = await service.get_unique_events(T1)

    ids = [event.id for event in unique]
    assert len(ids) == len(set(ids))
    assert set(ids) == {event.id for event in all_events}
    assert all(event.start is None and event.end is None for event in unique)


@pytest.mark.asyncio
async def test_unique_events_leave_cached_events_untouched(
    t1_lectures: list[RawLecture],
) -> None:
    """Given unique events were built, when loading again, then the cached events keep their times."""
    cache = DictEventCache()
    service = _service(StubFetcher(), {"T1": t1_lectures}, cache)

    await service.get_unique_events(T1)
    events = await service.load(T1)

    assert all(event.start is not None for event in events)


@pytest.mark.asyncio
async def test_get_events_filters_by_requested_week(tmp_path: Path) -> None:
    """Given lectures in weeks 42 and 43, when requesting week 42, then only those are returned."""
    lectures = {
        "T1": [
            lecture("L1", WEEK_42_MONDAY),
            lecture("L1", WEEK_42_MONDAY + timedelta(weeks=1)),
            lecture("L2", WEEK_42_MONDAY + timedelta(days=4)),
        ]
    }
    service = _service(StubFetcher(), lectures, FileEventCache(tmp_path))

    events = await service.get_events([T1])

    assert [event.title for event in events] == ["L1", "L2"]
    assert all(event.start is not None for event in events)
    assert all(event.start.isocalendar().week == 42 for event in events)  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_get_events_filters_each_request_by_its_own_week(tmp_path: Path) -> None:
    """Given the same timetable for two weeks, when merging, then both weeks come from one fetch."""
    fetcher = StubFetcher()
    lectures = {
        "T1": [
            lecture("L1", WEEK_42_MONDAY),
            lecture("L1", WEEK_42_MONDAY + timedelta(weeks=1)),
            lecture("L1", WEEK_42_MONDAY + timedelta(weeks=2)),
        ]
    }
    service = _service(fetcher, lectures, FileEventCache(tmp_path))
    week_43 = T1.model_copy(update={"week": 43})

    events = await service.get_events([T1, week_43])

    assert [event.start for event in events] == [
        WEEK_42_MONDAY,
        WEEK_42_MONDAY + timedelta(weeks=1),
    ]
    assert fetcher.calls["T1"] == 1


@pytest.mark.asyncio
async def test_get_events_keeps_input_order(tmp_path: Path) -> None:
    """Given several timetables, when merging, then request order then parser order is kept."""
    lectures = {
        "T1": [lecture("A", WEEK_42_MONDAY + timedelta(days=3))],
        "T2": [
            lecture("B", WEEK_42_MONDAY + timedelta(days=1)),
            lecture("C", WEEK_42_MONDAY),
        ],
    }
    service = _service(StubFetcher(), lectures, FileEventCache(tmp_path))

    events = await service.get_events([T2, T1])

    assert [event.title for event in events] == ["B", "C", "A"]


@pytest.mark.asyncio
async def test_get_events_last_duplicate_wins(tmp_path: Path) -> None:
    """Given identical occurrences in two timetables, when merging, then the later one survives."""
    shared_from_t1 = lecture("L1", WEEK_42_MONDAY, info="from T1")
    shared_from_t2 = lecture("L1", WEEK_42_MONDAY, info="from T2")
    lectures = {
        "T1": [shared_from_t1, lecture("L2", WEEK_42_MONDAY + timedelta(hours=2))],
        "T2": [lecture("L3", WEEK_42_MONDAY + timedelta(days=1)), shared_from_t2],
    }
    service = _service(StubFetcher(), lectures, FileEventCache(tmp_path))

    events = await service.get_events([T1, T2])

    assert len(events) == 4 - 1
    assert [event.title for event in events] == ["L1", "L2", "L3"]
    assert events[0].info == "from T2"


@pytest.mark.asyncio
async def test_get_events_keeps_same_lecture_in_other_room(tmp_path: Path) -> None:
    """Given one lecture in two rooms at the same time, when merging, then both are kept."""
    lectures = {
        "T1": [lecture("L1", WEEK_42_MONDAY, room="A 101")],
        "T2": [lecture("L1", WEEK_42_MONDAY, room="A 102")],
    }
    service = _service(StubFetcher(), lectures, FileEventCache(tmp_path))

    events = await service.get_events([T1, T2])

    assert [event.location for event in events] == ["A 101", "A 102"]


@pytest.mark.asyncio
async def test_get_events_fails_as_a_whole(tmp_path: Path) -> None:
    """Given one failing timetable, when merging, then FetchError propagates and nothing is returned."""
    lectures = {"T1": [lecture("L1", WEEK_42_MONDAY)]}
    fetcher = StubFetcher(failing_ids={"T2"})
    service = _service(fetcher, lectures, FileEventCache(tmp_path))

    with pytest.raises(FetchError) as exc_info:
        await service.get_events([T1, T2])

    assert exc_info.value.timetable_id == "T2"


@pytest.mark.asyncio
async def test_failed_load_is_not_cached(tmp_path: Path) -> None:
    """Given a failing fetch, when loading again later, then the fetch is retried."""
    fetcher = StubFetcher(failing_ids={"T1"})
    service = _service(fetcher, {}, FileEventCache(tmp_path))

    with pytest.raises(FetchError):
        await service.load(T1)
    fetcher.failing_ids.clear()
    events = await service.load(T1)

    assert events == []
    assert fetcher.calls["T1"] == 2


@pytest.mark.asyncio
async def test_get_events_with_no_requests_is_empty(tmp_path: Path) -> None:
    """Given no timetable requests, when merging, then an empty list is returned."""
    service = _service(StubFetcher(), {}, FileEventCache(tmp_path))

    assert await service.get_events([]) == []
