"""
Failure classification and the error envelope.

Every failure that reaches a client is classified into a FailureKind and
rendered as an ErrorResponse. Exceptions that know what went wrong derive
from KnownError; the application's exception handlers turn them into
responses with the right status code.

Taxonomy:
- Validation: a required field is missing or malformed
- Not found: a referenced card, deck or entry does not exist
- Conflict: the write would break a uniqueness rule
- Upstream: the card catalog was unreachable or answered with an error
- Storage: the database rejected the statement
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    EMPTY_DECK = "empty_deck"

    EXTERNAL_API_ERROR = "external_api_error"
    STORAGE_ERROR = "storage_error"

    UNKNOWN = "unknown"


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


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    error: str = Field(..., description="Short human readable message")
    failure: FailureDetail

    @classmethod
    def from_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ErrorResponse":
        return cls(
            error=message,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


STORAGE_FAILURE_MESSAGE = "The operation could not be saved."
UNKNOWN_FAILURE_MESSAGE = "Something went wrong while handling the request."


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

    def to_response(self) -> ErrorResponse:
        """Convert to an ErrorResponse."""
        return ErrorResponse.from_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidInputError(KnownError):
    """A request field is missing or malformed."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            status_code=400,
        )


class NotFoundError(KnownError):
    """A referenced resource does not exist."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            suggestion=suggestion,
            status_code=404,
        )


class ConflictError(KnownError):
    """The write would violate a uniqueness rule."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=message,
            status_code=409,
        )


class EmptyDeckError(KnownError):
    """Raised when drawing from a deck without mainboard cards."""

    def __init__(self, deck_id: int | None = None):
        self.deck_id = deck_id
        super().__init__(
            kind=FailureKind.EMPTY_DECK,
            message="Deck is empty",
            suggestion="Add cards to the mainboard before playtesting.",
            status_code=400,
        )


class UpstreamError(KnownError):
    """
    The card catalog failed to answer.

    The upstream message is attached as detail. Never retried.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="Scryfall may be unavailable. Try again later.",
            status_code=502,
        )


def storage_failure(exception: Exception) -> ErrorResponse:
    """Generic response for database errors. Driver messages are not exposed."""
    return ErrorResponse.from_failure(
        kind=FailureKind.STORAGE_ERROR,
        message=STORAGE_FAILURE_MESSAGE,
        detail=type(exception).__name__,
    )


def unknown_failure(exception: Exception) -> ErrorResponse:
    """Catch-all response for unexpected exceptions."""
    return ErrorResponse.from_failure(
        kind=FailureKind.UNKNOWN,
        message=UNKNOWN_FAILURE_MESSAGE,
        detail=type(exception).__name__,
        suggestion="If this persists, please report the issue.",
    )


def error_payload(response: ErrorResponse) -> dict[str, Any]:
    """JSON-ready dict for an ErrorResponse."""
    return response.model_dump(mode="json")
