"""Exception hierarchy for commit ingestion and resume synthesis.

Hierarchy:
    CommitResumeError
    ├── ValidationError       (a raw commit record was rejected)
    ├── FormatError           (generation reply failed schema validation)
    └── UpstreamError         (source-hosting or generation API failure)
        ├── AuthError         (invalid credential)
        ├── RateLimited       (provider backpressure)
        ├── Timeout           (request exceeded its time budget)
        └── TransportError    (anything else)
            └── NotFound      (resource does not exist)
"""

from typing import Optional


class CommitResumeError(Exception):
    """Base class for all commitresume errors."""


class ValidationError(CommitResumeError):
    """A raw commit record failed normalization."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


class FormatError(CommitResumeError):
    """The generation service reply did not contain a valid payload."""


class UpstreamError(CommitResumeError):
    """An external service call failed."""

    status_code: Optional[int] = 502

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class AuthError(UpstreamError):
    """The credential was rejected."""

    status_code = 401


class RateLimited(UpstreamError):
    """The provider asked us to slow down."""

    status_code = 429


class Timeout(UpstreamError):
    """The request did not complete in time."""

    status_code = 504


class TransportError(UpstreamError):
    """Any other upstream failure."""


class NotFound(TransportError):
    """The requested repository or commit does not exist."""

    status_code = 404
