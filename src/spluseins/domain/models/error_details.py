"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Details about a failed upstream request, including HTTP status code if one was received."""

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    reason: str
