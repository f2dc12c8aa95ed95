"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class ActivityValidationError(ValidationError):
    """Raised (or returned) when an activity is missing a required field.

    Attributes:
        code: One of ``missing_component``, ``missing_type`` or
            ``missing_content``
    """

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)


class BusinessRuleViolationError(DomainError):
    """Business rule violation error."""

    pass


class StoreError(DomainError):
    """Raised by repositories when the underlying store fails a statement."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
