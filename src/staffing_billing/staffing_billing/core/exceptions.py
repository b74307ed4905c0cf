class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced invoice or company does not exist."""


class DocumentError(DomainError):
    """Raised when a document cannot be rendered or stored."""
