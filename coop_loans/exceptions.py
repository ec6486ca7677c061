"""Custom exception hierarchy for coop-loans."""


class CoopLoansError(Exception):
    """Base exception for all coop-loans errors."""


class EntityNotFoundError(CoopLoansError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(CoopLoansError):
    """Raised when an entity is in an invalid state for the operation."""


class DuplicatePaymentError(InvalidEntityStateError):
    """Raised when an obligation month already has an interest payment."""


class InvalidLoanInputError(CoopLoansError):
    """Raised when a loan cannot produce a schedule.

    Non-positive tenure or a missing start-date basis. The schedule
    functions recover from it and return empty results.
    """


class ValidationError(CoopLoansError):
    """Raised when a backend request fails client-side checks."""


class BackendError(CoopLoansError):
    """Raised when a remote call fails or a procedure reports failure."""


class ConfigurationError(CoopLoansError):
    """Raised when configuration is invalid or missing."""


class SinkError(CoopLoansError):
    """Raised when a sink operation fails."""
