class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no one is signed in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NoSelectionError(ValidationError):
    """Raised when a bulk action is requested with no targets selected."""


class NotFoundError(DomainError):
    """Raised when an identifier does not resolve to a user."""


class OutOfScopeError(AuthorizationError):
    """Raised when the actor may not act on a specific target user."""


class InvalidTransitionError(DomainError):
    """Raised when a transition does not apply to the target's current state."""


class DirectoryError(DomainError):
    """Raised when the user directory rejects a single read or write."""


class BackendUnavailableError(DirectoryError):
    """Raised when the user directory cannot be reached at all."""
