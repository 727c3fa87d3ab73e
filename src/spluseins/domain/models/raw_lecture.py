"""Raw lecture domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RawLecture:
    """A single lecture occurrence as read from a sked page."""

    title: str
    start: datetime
    end: datetime
    room: str = ""
    lecturer: str = ""
    info: str = ""
    organiser_name: str = ""
    organiser_shortname: str = ""
