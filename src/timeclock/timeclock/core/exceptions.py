class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class TransitionError(DomainError):
    """Raised when an event is not legal in the current tracker status."""


class ConfirmationRequiredError(DomainError):
    """Raised when an action must be confirmed by the user before it runs."""


class SyncError(DomainError):
    """Raised when the submission endpoint fails or answers with an error."""


class StorageParseError(DomainError):
    """Raised when persisted data cannot be decoded."""


class ConfigurationError(DomainError):
    """Raised when a required endpoint or credential is not configured."""
