"""Sked adapters for the Ostfalia timetable system."""

from spluseins.adapters.sked_api.http_client import SkedHttpClient
from spluseins.adapters.sked_api.parser import SkedParser

__all__ = ["SkedHttpClient", "SkedParser"]
