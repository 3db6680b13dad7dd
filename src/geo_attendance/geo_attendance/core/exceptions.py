class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user's role forbids the requested action."""


class StoreUnavailable(DomainError):
    """Raised when the remote document store cannot be read or written.

    A failure raised from a merge-write may come after the read leg succeeded,
    so the caller must treat the mutation as possibly applied.
    """


class CapabilityError(DomainError):
    """Raised when a client-side capability (camera, location) did not deliver."""
