"""Application layer - use cases orchestrating domain ports."""

from spluseins.application.services import TimetableService

__all__ = ["TimetableService"]
