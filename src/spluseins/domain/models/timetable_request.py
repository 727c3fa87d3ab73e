"""Timetable request domain model."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimetableRequest(BaseModel):
    """Identifies one sked timetable and the ISO week a caller is interested in."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    sked_path: str
    week: int = Field(default=1, ge=1, le=53)
    graphical: bool = False
    faculty: str | None = None
