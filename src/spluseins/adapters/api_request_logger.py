"""Utility for logging sked requests when SPLUS_LOG_REQUESTS is enabled."""

import logging
import os

logger = logging.getLogger(__name__)


def should_log_requests() -> bool:
    """Check if request logging is enabled via SPLUS_LOG_REQUESTS environment variable."""
    return os.getenv("SPLUS_LOG_REQUESTS", "").lower() == "true"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers from logging."""
    sensitive_keys = {"authorization", "cookie", "x-api-key"}
    return {k: "***REDACTED***" if k.lower() in sensitive_keys else v for k, v in headers.items()}


def log_api_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    attempt: int | None = None,
) -> None:
    """Log request details if SPLUS_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        headers: Request headers (optional, sensitive headers are redacted).
        attempt: Zero-based attempt number (optional).
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {url}"]

    if attempt is not None:
        log_parts.append(f"Attempt: {attempt}")

    if headers:
        redacted = _redact_sensitive_headers(headers)
        log_parts.append(f"Headers: {redacted}")

    logger.info(" | ".join(log_parts))
