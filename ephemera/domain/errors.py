"""Domain exceptions.

Validation failures and rate limit rejections are ordinary results, not
exceptions. These cover the cases where an action cannot continue at all.
"""


class EphemeraError(Exception):
    """Base class for ephemera errors."""

    def __init__(self, message: str = "Unexpected error") -> None:
        self.message = message
        super().__init__(message)


class NotAuthenticatedError(EphemeraError):
    """Raised when an action requires a signed-in user."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class BackendError(EphemeraError):
    """Raised by a BackendPort when the hosted backend rejects an operation."""
