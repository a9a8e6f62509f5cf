"""File Spine Core -- results, errors, logging and settings.

Architecture::

    errors.py      Structured error hierarchy (FileSpineError and friends)
    result.py      Result[T] envelope (Ok / Err / try_result)
    logging.py     Structured logging (structlog)
    settings.py    FileSpineSettings (pydantic-settings, FILESPINE_* env)

Module Map (recommended reading order)
--------------------------------------
  result            Result[T] for explicit success/failure
  errors            Error categories, context and chaining
  logging           configure_logging / get_logger / LogContext
  settings          Environment-driven configuration

Tags:
    file-spine, foundation, result, errors, logging

Doc-Types:
    package-overview, module-index
"""

from filespine.core.errors import (
    BatchAggregateError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    ErrorCategory,
    ErrorContext,
    FileHandlingError,
    FileMissingError,
    FileSpineError,
    NoSuitableHandlerError,
    TypeMismatchError,
    categorize_error,
    is_retryable,
)
from filespine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from filespine.core.result import (
    Err,
    Ok,
    Result,
    collect_results,
    failure,
    partition_results,
    success,
    try_result,
)

__all__ = [
    # errors
    "BatchAggregateError",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "ErrorCategory",
    "ErrorContext",
    "FileHandlingError",
    "FileMissingError",
    "FileSpineError",
    "NoSuitableHandlerError",
    "TypeMismatchError",
    "categorize_error",
    "is_retryable",
    # logging
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # result
    "Err",
    "Ok",
    "Result",
    "collect_results",
    "failure",
    "partition_results",
    "success",
    "try_result",
]
