class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist or was soft-deleted."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class SessionExpiredError(AuthenticationError):
    """Raised when the login session is expired or its token is no longer valid."""


class TransitionRejected(DomainError):
    """Raised when a work status change is not allowed from the stored status."""


class CleanupFailedError(DomainError):
    """Raised when a multi-step create failed and undoing the earlier steps failed too."""
