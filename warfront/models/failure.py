"""
Failure Explanation Envelope: Unified Response Classification.

Every failure that leaves the API is classified and explained through the
same envelope. Business rules raise a `KnownError` subclass; the handler in
`warfront.main` turns it into a finalized known-failure response carrying
the error's status code.

Error taxonomy:
- AuthError: missing or expired session (401)
- PermissionDeniedError: authenticated but not allowed (403)
- ValidationError: malformed request or wrong secret (400)
- NotFoundError: card, batch, token or user missing (404)
- ConflictError: logically permanent state, e.g. already claimed (409)

None of these are retried. They are reported synchronously to the caller.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Identity
    NOT_AUTHENTICATED = "not_authenticated"
    FORBIDDEN = "forbidden"

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Permanent state conflicts
    CONFLICT = "conflict"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Unknown
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


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for failures and envelope-wrapped results.

    Every response is classified into one of three outcome types.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

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
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(kind=kind, message=message, detail=detail),
        )


# Standard exception types that map to known failures


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    The message is surfaced to the caller verbatim.
    """

    kind: FailureKind = FailureKind.INVALID_INPUT
    status_code: int = 400

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        kind: FailureKind | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.detail = detail
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
        )


class AuthError(KnownError):
    """Missing, unknown or expired session."""

    kind = FailureKind.NOT_AUTHENTICATED
    status_code = 401


class PermissionDeniedError(KnownError):
    """Authenticated caller lacks the role for the operation."""

    kind = FailureKind.FORBIDDEN
    status_code = 403


class ValidationError(KnownError):
    """Malformed request or a secret that does not match."""

    kind = FailureKind.INVALID_INPUT
    status_code = 400


class NotFoundError(KnownError):
    kind = FailureKind.NOT_FOUND
    status_code = 404


class ConflictError(KnownError):
    """
    The request collides with a permanent state.

    Examples: card already claimed, card already owned, duplicate batch label.
    """

    kind = FailureKind.CONFLICT
    status_code = 409


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

UNKNOWN_FAILURE_MESSAGE = "Something went wrong on our side. Please try again later."


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Check a response's shape before it leaves the authority boundary.

    Returns the same response. Holds no state between calls.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    return response


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create a finalized unknown failure response from an exception.

    The message is fixed; only the exception type name is exposed.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=type(exception).__name__,
        ),
    )
    return finalize_response(response)


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create a finalized known failure response from a KnownError."""
    return finalize_response(error.to_response())
