"""
Failure classification and the API response envelope.

Two layers of failure exist:

- Per-record failures. A row that cannot be identified never raises; it
  becomes a failed ConversionOutcome tagged with one of the record-level
  FailureKinds (no usable identifier, not found, identity mismatch,
  upstream error).
- Request failures. Problems with the request as a whole (empty file,
  unknown dialect, cancellation) raise KnownError, which the API layer
  turns into an ApiResponse envelope.

INVARIANT: No raw 500 errors may reach an API caller.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Per-record failures
    NO_IDENTIFIER = "no_identifier"
    NOT_FOUND = "not_found"
    IDENTITY_MISMATCH = "identity_mismatch"
    UPSTREAM_ERROR = "upstream_error"

    # Request failures
    INVALID_INPUT = "invalid_input"
    UNKNOWN_FORMAT = "unknown_format"
    CANCELLED = "cancelled"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by every conversion endpoint."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(cls, exception: Exception) -> "ApiResponse[Any]":
        """
        Create an unknown failure response.

        Only the exception type is exposed; the message may contain
        upstream internals.
        """
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Conversion failed for an unexpected reason.",
                detail=type(exception).__name__,
                suggestion="If this persists, please report the issue.",
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ConversionCancelled(KnownError):
    """Raised at the next request boundary after a conversion is cancelled."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CANCELLED,
            message="Conversion was cancelled before it finished.",
            detail=detail,
            status_code=499,
        )
