"""Custom exception hierarchy for fin-ledger."""


class LedgerError(Exception):
    """Base exception for all fin-ledger errors."""


class EntityNotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""


class ValidationError(LedgerError):
    """Raised when an input record is rejected before touching the ledger."""


class InvalidReferenceError(ValidationError):
    """Raised when a transaction lacks the account or card its type requires."""


class InvalidAmountError(ValidationError):
    """Raised when an amount is non-positive, non-finite or not a number."""


class InvalidInstallmentPlanError(ValidationError):
    """Raised when an installment count is out of bounds or not applicable."""


class InvalidEntityStateError(LedgerError):
    """Raised when an entity is in an invalid state for the operation."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when a persistence or publishing operation fails."""


class SchemaVersionError(SinkError):
    """Raised when a persisted container has an unsupported schema version."""
