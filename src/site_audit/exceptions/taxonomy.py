"""Stable error codes for failures that reach the caller.

Error Code Convention:
    AU4xx - Rejected before any pipeline stage starts
    AU5xx - Pipeline could not produce a report

Only these three kinds of failure are user visible: invalid input, rate limit
exceeded, required data unavailable. Everything else degrades inside the
pipeline.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for API responses and logs."""

    AU400 = "AU400"  # Invalid URL or request body
    AU429 = "AU429"  # Rate limit exceeded
    AU500 = "AU500"  # Unexpected internal error
    AU502 = "AU502"  # Required collector failed

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorCode.AU400: 400,
    ErrorCode.AU429: 429,
    ErrorCode.AU500: 500,
    ErrorCode.AU502: 502,
}
