"""Error taxonomy shared by services and the HTTP layer."""


class HealthTargetsError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DomainError(HealthTargetsError):
    """An expected failure detected by a business rule."""


class NotFoundError(DomainError):
    """A required record does not exist."""


class InvalidStateError(DomainError):
    """The user's state does not allow the requested operation."""


class ValidationError(DomainError):
    """Input values are malformed or out of range."""

    def __init__(
        self, message: str, field_errors: dict[str, str] | None = None
    ) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class UnexpectedError(HealthTargetsError):
    """Any other failure, wrapped with a message that is safe to expose."""
