"""Request-level exceptions: rejected before the pipeline starts."""

from typing import Optional

from .base import SiteAuditError
from .taxonomy import ErrorCode


class ValidationFailure(SiteAuditError):
    """Raised when the URL or request body is malformed or not permitted."""

    code = ErrorCode.AU400

    def __init__(self, reason: str, value: Optional[str] = None):
        details = {"value": value} if value is not None else None
        super().__init__(reason, details=details)
        self.reason = reason
        self.value = value


class RateLimitExceeded(SiteAuditError):
    """Raised when a caller exceeds the sliding-window request budget."""

    code = ErrorCode.AU429

    def __init__(self, key: str, max_requests: int, window_seconds: float):
        super().__init__(
            "Too many requests. Please wait a moment and try again.",
            details={"max_requests": str(max_requests), "window_seconds": str(window_seconds)},
        )
        self.key = key
        self.max_requests = max_requests
        self.window_seconds = window_seconds
