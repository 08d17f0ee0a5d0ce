class DomainError(Exception):
    """Base exception for business rule violations.

    Carries the HTTP status the controller layer answers with.
    """

    status_code = 400


class BadRequestError(DomainError):
    """Raised when a precondition or business rule is violated."""

    status_code = 400


class ForbiddenError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced job or session does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when the worker is already in a conflicting state."""

    status_code = 409


class ClockSkewError(RuntimeError):
    """Raised when a check-out timestamp precedes its check-in.

    Not a DomainError: it signals a broken clock, not a user mistake.
    """
