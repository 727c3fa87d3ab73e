"""Domain layer - core business logic and models."""

from spluseins.domain.models import (
    Event,
    FetchError,
    RawLecture,
    TimetableRequest,
)
from spluseins.domain.ports import (
    LectureParser,
    SkedFetcher,
)

__all__ = [
    "Event",
    "FetchError",
    "LectureParser",
    "RawLecture",
    "SkedFetcher",
    "TimetableRequest",
]
