"""Application services."""

from spluseins.application.services.timetable_service import (
    TimetableService,
    in_iso_week,
    lectures_cache_key,
)

__all__ = ["TimetableService", "in_iso_week", "lectures_cache_key"]
