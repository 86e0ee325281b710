"""Error classes for queryforge.

This module provides:
- QueryForgeError: Base exception class for all package errors
- InvalidArgumentError, InvalidRangeError: Registration contract violations
- InvalidOperationError: Misconfigured pipeline or container
- ExecutionFailure, DocumentParseError, DocumentValidationError, ComplexityError:
  Request-level failures reported through ExecutionResult.errors
"""


class QueryForgeError(Exception):
    """Base exception for all queryforge errors."""

    pass


class InvalidArgumentError(QueryForgeError, ValueError):
    """Raised when a required argument is missing or has the wrong shape."""

    pass


class InvalidRangeError(InvalidArgumentError):
    """Raised when a value falls outside its recognised set (e.g. a lifetime)."""

    pass


class InvalidOperationError(QueryForgeError, RuntimeError):
    """Raised when an operation is invoked without the state it depends on."""

    pass


class ExecutionFailure(QueryForgeError):
    """Base exception for failures reported back to the caller of an execution.

    Attributes:
        code: Machine-readable error code exposed in error extensions

    """

    code = "EXECUTION_ERROR"

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.data = data or {}


class DocumentParseError(ExecutionFailure):
    """Raised when a query document cannot be parsed."""

    code = "SYNTAX_ERROR"


class DocumentValidationError(ExecutionFailure):
    """Raised when a parsed document breaks a validation rule."""

    code = "VALIDATION_ERROR"


class ComplexityError(ExecutionFailure):
    """Raised when a document exceeds the configured complexity limits."""

    code = "COMPLEXITY_ERROR"
