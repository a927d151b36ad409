"""Exception types shared by the services and the HTTP layer."""

from typing import Any


class ApiError(Exception):
    """An error rendered to the client as ``{"message", "details"}``."""

    def __init__(self, status_code: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


class UpstreamError(Exception):
    """A third-party API answered with an error the caller should see."""

    status_code = 502
    message = "Upstream service error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details


class UpstreamRateLimited(UpstreamError):
    status_code = 403
    message = "GitHub API rate limit exceeded"


class UpstreamInvalidQuery(UpstreamError):
    status_code = 422
    message = "Invalid search query"


class LLMUnavailable(Exception):
    """The LLM provider is not configured or the call failed."""
