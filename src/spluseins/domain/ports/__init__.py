"""Ports (interfaces) for the ports-and-adapters architecture."""

from spluseins.domain.ports.lecture_parser import LectureParser
from spluseins.domain.ports.sked_fetcher import SkedFetcher

__all__ = [
    "LectureParser",
    "SkedFetcher",
]
