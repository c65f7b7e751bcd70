"""Custom exceptions for the Statement of Affairs engine.

This module provides a hierarchy of exception classes for consistent error
handling across the calculation core and the persistence boundary. All
exceptions inherit from SoAError, making it easy to catch all
application-specific errors.

Most problems the engine meets while calculating are NOT exceptions: unknown
account codes, unmatched or ambiguous chargeholder names and surplus
mismatches are reported as warnings on the result. Exceptions are reserved
for caller mistakes (editing an entity that does not exist, bad
configuration) and for persistence failures.

Example:
    try:
        await service.save(document)
    except SaveFailedError as e:
        # The document is still held in memory; offer a manual retry
        logger.error("save_failed", attempts=e.attempts)
    except SoAError as e:
        logger.error("operation_failed", error=str(e))
"""

from typing import Any, Optional


class SoAError(Exception):
    """Base exception for all Statement of Affairs errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise SoAError("Something went wrong", details={"case_id": "c-1"})
        SoAError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize SoAError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                retry or alternative approaches. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(SoAError):
    """Error raised when a document edit or input breaks a business rule.

    Invalid numbers are never a validation error (they read as zero). This
    is for structural rules, such as removing the last charge holder section.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class EntityNotFoundError(SoAError):
    """Error raised when an edit targets an entity id that is not in the document.

    Attributes:
        entity_type: Kind of entity looked up (e.g. "asset", "claim").
        entity_id: The id that could not be found.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.entity_type = entity_type
        self.entity_id = entity_id

        if entity_type:
            self.details["entity_type"] = entity_type
        if entity_id:
            self.details["entity_id"] = entity_id


class ConfigurationError(SoAError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class PersistenceError(SoAError):
    """Error raised when the document store rejects or fails an operation.

    Attributes:
        case_id: The case the operation was for.
        version: The document version involved (if any).
        operation: The store operation being attempted.
    """

    def __init__(
        self,
        message: str,
        *,
        case_id: Optional[str] = None,
        version: Optional[int] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.case_id = case_id
        self.version = version
        self.operation = operation

        if case_id:
            self.details["case_id"] = case_id
        if version is not None:
            self.details["version"] = version
        if operation:
            self.details["operation"] = operation


class TransientStoreError(PersistenceError):
    """A rate-limit or network failure that is worth retrying.

    Attributes:
        status_code: HTTP-style status reported by the store (429 for rate limits).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        case_id: Optional[str] = None,
        version: Optional[int] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            case_id=case_id,
            version=version,
            operation=operation,
            details=details,
            recoverable=True,
        )
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code


class SaveFailedError(PersistenceError):
    """Raised when a save gives up; the document is still held in memory.

    A save gives up once retries of transient failures are exhausted
    (recoverable) or as soon as the store rejects the document outright
    (not recoverable).

    Attributes:
        attempts: How many attempts were made before giving up.
    """

    def __init__(
        self,
        message: str,
        *,
        attempts: int = 0,
        case_id: Optional[str] = None,
        version: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(
            message,
            case_id=case_id,
            version=version,
            operation="save",
            details=details,
            recoverable=recoverable,
        )
        self.attempts = attempts
        self.details["attempts"] = attempts


__all__ = [
    "SoAError",
    "ValidationError",
    "EntityNotFoundError",
    "ConfigurationError",
    "PersistenceError",
    "TransientStoreError",
    "SaveFailedError",
]
