"""Event domain model."""

import hashlib
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from spluseins.domain.models.raw_lecture import RawLecture


class EventMeta(BaseModel):
    """Organiser metadata attached to an event."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    organiser_name: str = ""
    organiser_shortname: str = ""


class Event(BaseModel):
    """A scheduled lecture occurrence served to the front-end.

    ``start`` and ``end`` are ``None`` for representatives of the unique-events
    view, where a single event stands in for every occurrence of its id.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    lecturer: str = ""
    location: str = ""
    info: str = ""
    start: datetime | None = None
    end: datetime | None = None
    meta: EventMeta = EventMeta()

    @classmethod
    def from_lecture(cls, lecture: RawLecture) -> "Event":
        """Wrap a parsed lecture into an event."""
        return cls(
            id=lecture_id(lecture),
            title=lecture.title,
            lecturer=lecture.lecturer,
            location=lecture.room,
            info=lecture.info,
            start=lecture.start,
            end=lecture.end,
            meta=EventMeta(
                organiser_name=lecture.organiser_name,
                organiser_shortname=lecture.organiser_shortname,
            ),
        )

    def without_times(self) -> "Event":
        """Return a copy with the occurrence-specific time span cleared."""
        return self.model_copy(update={"start": None, "end": None})

    def dedupe_key(self) -> str:
        """Composite identity of an occurrence across timetables."""
        start = self.start.isoformat() if self.start else None
        end = self.end.isoformat() if self.end else None
        return f"{self.meta.organiser_shortname} {self.id} {self.location} {start} {end}"


def lecture_id(lecture: RawLecture) -> str:
    """Derive the id shared by every occurrence of a lecture.

    Occurrences of the same lecture only differ in time and room, so the id
    is built from organiser, title and lecturer.
    """
    source = "\x1f".join(
        part.strip().casefold()
        for part in (lecture.organiser_shortname, lecture.title, lecture.lecturer)
    )
    return hashlib.sha1(source.encode("utf-8")).hexdigest()[:12]
