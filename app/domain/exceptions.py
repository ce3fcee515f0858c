"""Domain exceptions for the credential lifecycle.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.

Token invalidity exceptions carry the precise reason for server-side logs
only. Anything that reaches an external caller goes through one of the
generic exceptions (TokenRedemptionFailedException,
InvitationInvalidException) whose message and details never reveal why.
"""

from typing import Any

from app.domain.enums import InvalidReason


class TrackerException(Exception):
    """Base exception for all application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error envelope: error (message), code, and details when present."""
        body: dict[str, Any] = {"error": self.message, "code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(TrackerException):
    """Raised when input validation fails (e.g. missing field, short password)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class TokenInvalidException(TrackerException):
    """Base for internal token failures. reason is for logs, never for responses."""

    def __init__(self, reason: InvalidReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(
            message or f"Token rejected: {reason.value}",
            "TOKEN_INVALID",
        )


class TokenNotFoundException(TokenInvalidException):
    """No token record matches the presented value."""

    def __init__(self) -> None:
        super().__init__(InvalidReason.NOT_FOUND)


class TokenAlreadyUsedException(TokenInvalidException):
    """Token was redeemed before."""

    def __init__(self) -> None:
        super().__init__(InvalidReason.ALREADY_USED)


class TokenExpiredException(TokenInvalidException):
    """Token is past its expires_at."""

    def __init__(self) -> None:
        super().__init__(InvalidReason.EXPIRED)


class TokenIdentityMismatchException(TokenInvalidException):
    """Token belongs to another identity (or its subject no longer exists)."""

    def __init__(self) -> None:
        super().__init__(InvalidReason.IDENTITY_MISMATCH)


class RedemptionConflictException(TokenInvalidException):
    """A concurrent redemption claimed the token first."""

    def __init__(self) -> None:
        super().__init__(InvalidReason.CONFLICT)


_REASON_EXCEPTIONS: dict[InvalidReason, type[TokenInvalidException]] = {
    InvalidReason.NOT_FOUND: TokenNotFoundException,
    InvalidReason.ALREADY_USED: TokenAlreadyUsedException,
    InvalidReason.EXPIRED: TokenExpiredException,
    InvalidReason.IDENTITY_MISMATCH: TokenIdentityMismatchException,
    InvalidReason.CONFLICT: RedemptionConflictException,
}


def token_exception_for(reason: InvalidReason) -> TokenInvalidException:
    """Return the specific TokenInvalidException for a verification reason."""
    exc_type = _REASON_EXCEPTIONS.get(reason)
    if exc_type is None:
        return TokenInvalidException(reason)
    return exc_type()


class TokenRedemptionFailedException(TrackerException):
    """External face of every redemption failure (invalid, expired, used, effect failed)."""

    def __init__(
        self,
        message: str = (
            "This link is invalid or has expired. "
            "Please try again or request a new one."
        ),
    ) -> None:
        super().__init__(message, "TOKEN_REDEMPTION_FAILED")


class InvitationInvalidException(TrackerException):
    """External face of every invitation verification failure."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired invitation", "INVITATION_INVALID")


class AccountAlreadyExistsException(TrackerException):
    """Raised when inviting (or materializing) an email that already has an account."""

    def __init__(self, email: str) -> None:
        """Initialize with the already-registered email.

        Args:
            email: The email that already has an account.
        """
        super().__init__(
            f"A user with email {email} already exists in the system.",
            "ACCOUNT_ALREADY_EXISTS",
            {"email": email},
        )


class AccountNotFoundException(TrackerException):
    """Raised by account adapters when an id no longer resolves."""

    def __init__(self, account_id: str) -> None:
        super().__init__(
            f"Account not found: {account_id}",
            "ACCOUNT_NOT_FOUND",
            {"account_id": account_id},
        )


class DownstreamException(TrackerException):
    """Raised when the effect of a validated token (credential update, account creation) fails."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Downstream operation failed: {operation}",
            "DOWNSTREAM_ERROR",
            {"operation": operation, "reason": reason},
        )


class TransientException(TrackerException):
    """Raised when the store or network is unavailable. Nothing was mutated; safe to retry."""

    def __init__(self, message: str = "Service temporarily unavailable. Please try again.") -> None:
        super().__init__(message, "SERVICE_UNAVAILABLE")


class SqlNotConfiguredException(TrackerException):
    """Raised when an operation requires Postgres but the backend is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class NotificationDeliveryException(TrackerException):
    """Raised by notification adapters when an email could not be handed to the provider."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Failed to deliver notification",
            "NOTIFICATION_DELIVERY_ERROR",
            {"reason": reason},
        )


class SessionRefreshException(TrackerException):
    """Raised by identity provider adapters when a session cannot be read or refreshed."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Session refresh failed",
            "SESSION_REFRESH_ERROR",
            {"reason": reason},
        )
