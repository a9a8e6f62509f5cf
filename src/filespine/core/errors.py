"""
Structured error types for file-spine.

Provides a typed hierarchy of errors with metadata for routing, logging and
root cause analysis through error chaining.

Instead of generic exceptions that lose context, every FileSpineError carries:
- **Category:** What kind of failure (handler lookup, I/O, decode, config, ...)
- **Retryable:** Whether repeating the operation may succeed
- **Context:** File name, path, data format, operation and free-form metadata
- **Cause:** The chained underlying exception (also set as ``__cause__``)

Manifesto:
    - **Distinguishable failures:** "no handler for .xyz" is a caller bug,
      "file vanished" is an I/O condition, "bad JSON" is a data problem.
      Callers branch on the type, never on the message.
    - **Error chaining:** Codec exceptions are wrapped, never replaced
    - **Serializable:** ``to_dict()`` for structured logs and CLI output

Architecture:
    ::

        FileSpineError
        ├── NoSuitableHandlerError   (HANDLER)   no handler claims the file
        ├── TypeMismatchError        (VALIDATION) target/content type refused
        ├── ConfigurationError       (CONFIG)    no write-option mapping
        ├── BatchAggregateError      (BATCH)     strict batch had failures
        └── FileHandlingError        (IO)        an operation failed on disk
            ├── FileMissingError     (IO)        file absent before reading
            ├── DecodeError          (DECODE)    read/parse/validate failed
            └── EncodeError          (ENCODE)    serialize/write failed

Examples:
    >>> from filespine.core.errors import DecodeError, ErrorCategory
    >>> try:
    ...     raise ValueError("Expecting value: line 1 column 1")
    ... except ValueError as e:
    ...     err = DecodeError("Failed to read JSON file: b.json", cause=e)
    >>> err.category
    <ErrorCategory.DECODE: 'DECODE'>
    >>> type(err.__cause__).__name__
    'ValueError'

Tags:
    errors, error-handling, exceptions, error-chaining, file-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and routing.

    Categories split caller/configuration bugs (HANDLER, VALIDATION, CONFIG),
    which are raised immediately, from conditions met while touching the file
    system (IO, DECODE, ENCODE), which are captured into results or failed
    futures.
    """

    # Caller / configuration errors
    HANDLER = "HANDLER"           # No handler claims the file
    VALIDATION = "VALIDATION"     # Target type or content type refused
    CONFIG = "CONFIG"             # Write option mapping missing or invalid

    # File system / codec errors
    IO = "IO"                     # Missing file, permission, disk errors
    DECODE = "DECODE"             # Reading, parsing or validating content
    ENCODE = "ENCODE"             # Serializing or writing content

    # Aggregates
    BATCH = "BATCH"               # Strict batch with member failures

    # Internal errors
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what every file operation knows about itself; anything
    else goes into ``metadata``.
    """

    file_name: str | None = None
    path: str | None = None
    data_format: str | None = None
    operation: str | None = None
    handler: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["file_name", "path", "data_format", "operation", "handler"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FileSpineError(Exception):
    """
    Base exception for all file-spine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so raising
    sites only supply a message and, where there is one, the cause.

    Args:
        message: Human-readable description
        category: Overrides ``default_category``
        retryable: Overrides ``default_retryable``
        context: Structured metadata, created empty when omitted
        cause: Underlying exception; also installed as ``__cause__``
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FileSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DecodeError("Failed").with_context(
                file_name="b.json",
                data_format="JSON",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PRE-FLIGHT ERRORS (raised immediately, never captured into a Result)
# =============================================================================


class NoSuitableHandlerError(FileSpineError):
    """No registered handler with the requested capability claims the file."""

    default_category = ErrorCategory.HANDLER


class TypeMismatchError(FileSpineError):
    """
    A handler was asked for a target type or given content it cannot serve.

    Raised, for example, when a text handler is asked to decode into anything
    other than ``str``: silently returning the raw text would hand the caller
    a value of the wrong shape.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        expected: tuple[type, ...] = (),
        received: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.received = received

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.expected:
            result["expected"] = [t.__name__ for t in self.expected]
        if self.received is not None:
            result["received"] = getattr(self.received, "__name__", repr(self.received))
        return result


class ConfigurationError(FileSpineError):
    """No write-option mapping exists for an extension, or the option is invalid."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, message: str, *, extension: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.extension = extension


# =============================================================================
# FILE HANDLING ERRORS (captured into Err for reads, fail the future for writes)
# =============================================================================


class FileHandlingError(FileSpineError):
    """An operation failed while touching a file."""

    default_category = ErrorCategory.IO


class FileMissingError(FileHandlingError):
    """The file did not exist when the read started."""

    default_category = ErrorCategory.IO


class DecodeError(FileHandlingError):
    """Reading, parsing or validating file content failed."""

    default_category = ErrorCategory.DECODE


class EncodeError(FileHandlingError):
    """Serializing or writing file content failed."""

    default_category = ErrorCategory.ENCODE


# =============================================================================
# BATCH ERRORS
# =============================================================================


class BatchAggregateError(FileSpineError):
    """
    A batch run without partial-failure tolerance had failing members.

    ``failures`` maps every failed key to its error, in request order. The
    first failure is chained as ``__cause__``. Results of the members that
    succeeded are deliberately not attached.
    """

    default_category = ErrorCategory.BATCH

    def __init__(self, message: str, *, failures: dict[str, BaseException], **kwargs: Any):
        first = next(iter(failures.values()), None)
        kwargs.setdefault("cause", first)
        super().__init__(message, **kwargs)
        self.failures = dict(failures)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["failures"] = {key: str(error) for key, error in self.failures.items()}
        return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, FileSpineError):
        return error.retryable
    # Transient OS conditions, not missing files or permissions
    if isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        return False
    return isinstance(error, (InterruptedError, BlockingIOError, TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, FileSpineError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.IO
    if isinstance(error, (UnicodeError, ValueError)):
        return ErrorCategory.DECODE
    if isinstance(error, TypeError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "FileSpineError",
    "NoSuitableHandlerError",
    "TypeMismatchError",
    "ConfigurationError",
    "FileHandlingError",
    "FileMissingError",
    "DecodeError",
    "EncodeError",
    "BatchAggregateError",
    "is_retryable",
    "categorize_error",
]
