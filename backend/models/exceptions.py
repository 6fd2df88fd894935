"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP responses
by centralized exception handlers in main.py, keeping services HTTP-agnostic.

The authentication module (auth.py) and the webhook signature helper also use
these domain exceptions so they can be reused outside of request handling
(init scripts, tests).

Every exception carries a correlation ID for Sentry and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


class UpstreamServiceException(DomainException):
    """Raised when an external collaborator (image host, database) fails."""

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class ComplaintNotFoundException(NotFoundException):
    """Complaint not found."""

    def __init__(self, complaint_id: int):
        super().__init__(f"Complaint {complaint_id} not found")
        self.complaint_id = complaint_id


class VoteNotFoundException(NotFoundException):
    """Vote not found."""

    pass


class BadgeNotFoundException(NotFoundException):
    """Raised when a badge id is not part of the catalog."""

    def __init__(self, badge_id: str):
        super().__init__(f"Badge '{badge_id}' not found")
        self.badge_id = badge_id


class InactiveUserException(PermissionDeniedException):
    """User account is inactive."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class SuperAdminProtectedException(PermissionDeniedException):
    """Raised when an operation would demote or delete the super admin."""

    def __init__(self, message: str = "The super admin cannot be modified"):
        super().__init__(message)


class DuplicateVoteException(ConflictException):
    """User has already voted on this complaint."""

    def __init__(self, message: str = "You have already voted on this complaint"):
        super().__init__(message)


class DuplicateFeedbackException(ConflictException):
    """User has already submitted feedback for this complaint."""

    def __init__(
        self, message: str = "You have already submitted feedback for this complaint"
    ):
        super().__init__(message)


class InvalidComplaintStatusException(ValidationException):
    """Invalid complaint status."""

    pass


class WebhookSignatureException(ValidationException):
    """Raised when a webhook request is missing or fails signature checks."""

    pass


# ============================================================================
# Complaint Moderation Exceptions
# ============================================================================


class FakeFlagWindowExpiredException(BusinessRuleException):
    """Raised when an admin tries to flag a complaint after the window closed."""

    def __init__(self, window_hours: int):
        super().__init__(
            f"Complaints can only be marked as fake within {window_hours} hours "
            "of submission"
        )
        self.window_hours = window_hours


class FeedbackNotAllowedException(BusinessRuleException):
    """Raised when feedback targets a complaint that is not completed."""

    def __init__(
        self, message: str = "Feedback can only be given on completed complaints"
    ):
        super().__init__(message)


class NotLongPendingException(BusinessRuleException):
    """Raised when reporting a complaint that has not been pending long enough."""

    def __init__(self, complaint_id: int, days: int):
        super().__init__(
            f"Complaint {complaint_id} has not been pending for {days} days"
        )
        self.complaint_id = complaint_id
        self.days = days


# ============================================================================
# External Service Exceptions
# ============================================================================


class ImageUploadException(UpstreamServiceException):
    """Raised when the image host rejects or fails an upload."""

    def __init__(self, message: str = "Failed to upload image"):
        super().__init__(message)

