"""Sked fetcher port."""

from typing import Protocol

from spluseins.domain.models.timetable_request import TimetableRequest


class SkedFetcher(Protocol):
    """Port for retrieving the raw HTML of a sked timetable."""

    async def fetch(self, timetable: TimetableRequest) -> str:
        """Fetch the timetable page, raising FetchError when all attempts fail."""
        ...
