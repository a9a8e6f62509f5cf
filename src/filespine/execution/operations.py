"""Execution wrapper — run blocking file I/O on a worker pool.

WHY
───
Handlers know *how* to read a JSON or text file; they should not each
re-implement submitting to a pool, checking that the file exists,
wrapping codec exceptions, and logging.  This module does that once.

ARCHITECTURE
────────────
::

    execute_read(pool, path, fmt, op)    → Future[Result[T]]
      └─ worker: exists? ─ no ─→ Err(FileMissingError)     (op not called)
                         └ yes ─→ op() ─ ok ──→ Ok(value)
                                       └ raise → Err(DecodeError, chained)

    execute_write(pool, path, fmt, content, op) → Future[None]
      └─ worker: op() ─ ok ──→ None
                      └ raise → EncodeError raised → future fails

    attach_callbacks(future, path, fmt, action)  → same future
      └─ done-callback: log outcome, fire ExecutionHooks (best effort)

READ / WRITE ASYMMETRY
──────────────────────
A read future always *succeeds*; its value is a ``Result`` that may be an
``Err``.  A write future *fails* with ``EncodeError``.  Batch tolerance in
``batch.py`` relies on this split: read failures are already values,
write failures must be caught off the future.

Related modules:
    batch.py        — fans many of these out and collects them
    pools.py        — owned ThreadPoolExecutor lifecycle
    handlers/base.py — the only callers of execute_read / execute_write
"""

from __future__ import annotations

import contextvars
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from filespine.core.errors import DecodeError, EncodeError, ErrorContext, FileMissingError
from filespine.core.logging import get_logger
from filespine.core.result import Err, Ok, Result

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationEvent:
    """What a hook receives about one file operation."""

    action: str
    path: Path
    data_format: str
    value_type: str | None = None
    error: BaseException | None = None

    @property
    def file_name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ExecutionHooks:
    """Optional telemetry callbacks.

    Hooks are invoked best-effort: an exception raised by a hook is logged
    and otherwise ignored, and never changes the operation's outcome.

    Example:
        >>> seen = []
        >>> hooks = ExecutionHooks(on_failure=lambda ev: seen.append(ev.file_name))
    """

    on_start: Callable[[OperationEvent], None] | None = None
    on_success: Callable[[OperationEvent], None] | None = None
    on_failure: Callable[[OperationEvent], None] | None = None


def _fire(hooks: ExecutionHooks | None, name: str, event: OperationEvent) -> None:
    if hooks is None:
        return
    hook = getattr(hooks, name)
    if hook is None:
        return
    try:
        hook(event)
    except Exception:
        logger.warning(
            "operation_hook.failed",
            hook=name,
            file=event.file_name,
            data_format=event.data_format,
            exc_info=True,
        )


def _context(path: Path, data_format: str, operation: str) -> ErrorContext:
    return ErrorContext(
        file_name=path.name,
        path=str(path),
        data_format=data_format,
        operation=operation,
    )


def execute_read(
    pool: Executor,
    path: str | Path,
    data_format: str,
    operation: Callable[[], T],
    hooks: ExecutionHooks | None = None,
) -> Future[Result[T]]:
    """Submit a blocking read and capture its outcome as a ``Result``.

    The returned future never completes exceptionally for I/O or codec
    failures: a missing file becomes ``Err(FileMissingError)`` and anything
    raised by ``operation`` becomes ``Err(DecodeError)`` chained to the
    original exception.

    Args:
        pool: Executor the read runs on (owned by the caller)
        path: File to read
        data_format: Label for logs and messages (``"JSON"``, ``"TXT"``)
        operation: Zero-argument callable doing the actual I/O and decoding
        hooks: Optional telemetry callbacks
    """
    path = Path(path)
    logger.info("file_read.submit", file=path.name, data_format=data_format)

    def _run() -> Result[T]:
        thread = threading.current_thread().name
        _fire(hooks, "on_start", OperationEvent("reading", path, data_format))

        if not path.exists():
            error = FileMissingError(
                f"{data_format} file not found: {path.absolute()}",
                context=_context(path, data_format, "read"),
            )
            logger.error(
                "file_read.missing",
                file=path.name,
                path=str(path.absolute()),
                data_format=data_format,
                thread=thread,
            )
            return Err(error)

        logger.debug("file_read.start", file=path.name, data_format=data_format, thread=thread)
        try:
            value = operation()
        except Exception as e:
            logger.error(
                "file_read.failed",
                file=path.name,
                data_format=data_format,
                thread=thread,
                error=str(e),
                exc_info=True,
            )
            return Err(
                DecodeError(
                    f"Failed to read {data_format} file: {path.name}",
                    context=_context(path, data_format, "read"),
                    cause=e,
                )
            )

        logger.info("file_read.complete", file=path.name, data_format=data_format, thread=thread)
        return Ok(value)

    # Workers do not inherit contextvars; carry bound log context (batch_id) across.
    ctx = contextvars.copy_context()
    return pool.submit(ctx.run, _run)


def execute_write(
    pool: Executor,
    path: str | Path,
    data_format: str,
    content: Any,
    operation: Callable[[], None],
    hooks: ExecutionHooks | None = None,
) -> Future[None]:
    """Submit a blocking write; a failure fails the returned future.

    Unlike :func:`execute_read`, nothing is captured: an exception raised by
    ``operation`` is re-raised in the worker as ``EncodeError`` chained to
    the original, so ``future.result()`` raises it.

    Args:
        pool: Executor the write runs on (owned by the caller)
        path: File to write
        data_format: Label for logs and messages
        content: The value being written (only its type is logged)
        operation: Zero-argument callable doing the actual encoding and I/O
        hooks: Optional telemetry callbacks
    """
    path = Path(path)
    content_type = type(content).__name__
    logger.info("file_write.submit", file=path.name, data_format=data_format)

    def _run() -> None:
        thread = threading.current_thread().name
        _fire(hooks, "on_start", OperationEvent("writing", path, data_format))
        logger.debug(
            "file_write.start",
            file=path.name,
            data_format=data_format,
            content_type=content_type,
            thread=thread,
        )
        try:
            operation()
        except Exception as e:
            logger.error(
                "file_write.failed",
                file=path.name,
                data_format=data_format,
                content_type=content_type,
                thread=thread,
                error=str(e),
                exc_info=True,
            )
            raise EncodeError(
                f"Failed to write {data_format} file: {path.name}",
                context=_context(path, data_format, "write"),
                cause=e,
            ) from e
        logger.info(
            "file_write.complete",
            file=path.name,
            data_format=data_format,
            content_type=content_type,
            thread=thread,
        )

    ctx = contextvars.copy_context()
    return pool.submit(ctx.run, _run)


def attach_callbacks(
    future: Future[Any],
    path: str | Path,
    data_format: str,
    action: str,
    hooks: ExecutionHooks | None = None,
) -> Future[Any]:
    """Log the outcome of ``future`` when it completes and fire hooks.

    Works for read futures (value is a ``Result``) and write futures (value
    is ``None`` or an exception).  Returns ``future`` itself, unchanged.
    """
    path = Path(path)

    def _on_done(done: Future[Any]) -> None:
        try:
            if done.cancelled():
                logger.warning("file_operation.cancelled", action=action, file=path.name, data_format=data_format)
                return

            exc = done.exception()
            if exc is not None:
                logger.warning(
                    "file_operation.raised",
                    action=action,
                    file=path.name,
                    data_format=data_format,
                    error=str(exc),
                )
                _fire(hooks, "on_failure", OperationEvent(action, path, data_format, error=exc))
                return

            outcome = done.result()
            match outcome:
                case Err(error):
                    logger.warning(
                        "file_operation.failed",
                        action=action,
                        file=path.name,
                        data_format=data_format,
                        error=str(error),
                    )
                    _fire(hooks, "on_failure", OperationEvent(action, path, data_format, error=error))
                case Ok(value):
                    value_type = type(value).__name__
                    logger.info(
                        "file_operation.succeeded",
                        action=action,
                        file=path.name,
                        data_format=data_format,
                        value_type=value_type,
                    )
                    _fire(hooks, "on_success", OperationEvent(action, path, data_format, value_type=value_type))
                case _:
                    logger.info("file_operation.succeeded", action=action, file=path.name, data_format=data_format)
                    _fire(hooks, "on_success", OperationEvent(action, path, data_format))
        except Exception:
            logger.warning("file_operation.callback_failed", action=action, file=path.name, exc_info=True)

    ctx = contextvars.copy_context()
    future.add_done_callback(lambda done: ctx.run(_on_done, done))
    return future


__all__ = [
    "ExecutionHooks",
    "OperationEvent",
    "attach_callbacks",
    "execute_read",
    "execute_write",
]
