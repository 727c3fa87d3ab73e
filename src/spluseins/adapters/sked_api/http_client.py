"""HTTP client for sked timetable pages.

Sked serves every timetable as a static HTML page behind HTTP Basic
authentication, e.g. https://stundenplan.ostfalia.de/i/Semester/Semester-Liste/I-B.Sc.html
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from spluseins.adapters.api_request_logger import log_api_request
from spluseins.adapters.sked_api.constants import DEFAULT_HEADERS
from spluseins.domain.models.error_details import ErrorDetails
from spluseins.domain.models.errors import FetchError
from spluseins.domain.models.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from spluseins.domain.models.timetable_request import TimetableRequest


class SkedHttpClient:
    """Fetches sked pages with Basic auth and a fixed-backoff retry."""

    def __init__(
        self,
        session: "ClientSession",
        base_url: str,
        username: str,
        password: str,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = 30,
    ) -> None:
        """Initialize the client.

        Args:
            session: aiohttp session used for all requests.
            base_url: Sked base URL, request paths are appended verbatim.
            username: Basic auth user name.
            password: Basic auth password.
            retry_policy: Attempt cap and pause between attempts.
            timeout_seconds: Total timeout of a single attempt.
        """
        self._session = session
        self._base_url = base_url
        self._username = username
        self._password = password
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    def _build_headers(self) -> dict[str, str]:
        """Build request headers including the Basic auth token."""
        auth = aiohttp.BasicAuth(self._username, self._password)
        return {**DEFAULT_HEADERS, "Authorization": auth.encode()}

    async def _attempt(self, url: str, headers: dict[str, str]) -> str | ErrorDetails:
        """Run one request; returns the body on success, otherwise the failure details."""
        try:
            async with self._session.get(url, headers=headers, timeout=self._timeout) as response:
                if response.ok:
                    return await response.text()
                return ErrorDetails(status_code=response.status, reason=response.reason or "Unknown")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return ErrorDetails(status_code=None, reason=str(e) or type(e).__name__)

    async def fetch(self, timetable: "TimetableRequest") -> str:
        """Fetch the HTML of a sked timetable.

        Client errors and server errors are retried alike until the attempt cap
        of the retry policy is reached.

        Args:
            timetable: The timetable to fetch.

        Returns:
            The page body.

        Raises:
            FetchError: If every attempt failed; carries the last failure.
        """
        url = self._base_url + timetable.sked_path
        headers = self._build_headers()
        logger.info(f"Url for {timetable.id} is {url}")

        details = ErrorDetails(reason="no attempt made")
        for attempt in range(self._retry_policy.max_attempts):
            log_api_request("GET", url, headers=headers, attempt=attempt)
            outcome = await self._attempt(url, headers)
            if isinstance(outcome, str):
                return outcome
            details = outcome

            logger.error(
                f"Sked error for {timetable.id}-{timetable.week}: {details.reason} "
                f"(attempt {attempt})"
            )
            if attempt < self._retry_policy.max_attempts - 1:
                await asyncio.sleep(self._retry_policy.backoff_seconds)

        raise FetchError(timetable.id, timetable.week, details)
