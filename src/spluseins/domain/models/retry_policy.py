"""Retry policy domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed pause between attempts.

    Every failed attempt is retried the same way regardless of the HTTP status
    that caused it; there is no exponential growth and no jitter.
    """

    max_attempts: int = 3
    backoff_seconds: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must not be negative")
