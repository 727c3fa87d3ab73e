"""Errors raised while retrieving and parsing timetables."""

from spluseins.domain.models.error_details import ErrorDetails


class FetchError(RuntimeError):
    """Upstream sked request failed on every attempt."""

    def __init__(self, timetable_id: str, week: int, details: ErrorDetails) -> None:
        self.timetable_id = timetable_id
        self.week = week
        self.details = details
        status = details.status_code if details.status_code is not None else "no response"
        super().__init__(
            f"Sked error for {timetable_id}-{week}: {details.reason} (status {status})"
        )


class SkedParseError(ValueError):
    """Sked HTML did not have the expected timetable structure."""
