"""Domain models for SplusEins timetables."""

from spluseins.domain.models.error_details import ErrorDetails
from spluseins.domain.models.errors import FetchError, SkedParseError
from spluseins.domain.models.event import Event, EventMeta, lecture_id
from spluseins.domain.models.raw_lecture import RawLecture
from spluseins.domain.models.retry_policy import RetryPolicy
from spluseins.domain.models.timetable_request import TimetableRequest

__all__ = [
    "ErrorDetails",
    "Event",
    "EventMeta",
    "FetchError",
    "RawLecture",
    "RetryPolicy",
    "SkedParseError",
    "TimetableRequest",
    "lecture_id",
]
