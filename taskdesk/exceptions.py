class AuthenticationError(Exception):
    """Raised when the caller identity is missing or unknown."""


class NotFoundError(Exception):
    """Raised when a task or a referenced user does not exist."""


class ForbiddenError(Exception):
    """Raised when the authorization policy rejects an action."""


class InvalidInputError(Exception):
    """Raised when a request carries malformed or inconsistent values."""


class ConflictError(Exception):
    """Raised when a task record was saved by another writer in between."""
