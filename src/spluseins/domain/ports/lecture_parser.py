"""Lecture parser port."""

from typing import Protocol

from spluseins.domain.models.raw_lecture import RawLecture
from spluseins.domain.models.timetable_request import TimetableRequest


class LectureParser(Protocol):
    """Port for turning sked HTML into lectures.

    Implementations must be pure: no network access and no side effects.
    """

    def parse(self, html: str, timetable: TimetableRequest) -> list[RawLecture]:
        """Parse a sked page in the view mode the request selects."""
        ...
