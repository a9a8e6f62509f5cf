"""Batch orchestration — many file operations, one outcome.

Fans a request map (path → target type, or path → content) out into one
handler call per key, runs them concurrently on the caller's pool, and
collects a map with exactly the same keys.

ARCHITECTURE
────────────
::

    BatchOrchestrator(pool, registry)
      ├── .read_many_blocking(files_to_types, tolerate)    → dict[key, Result]
      ├── .read_many_nonblocking(files_to_types, tolerate) → Future[dict]
      └── .write_many(files_to_content, option, tolerate)  → bool

    per key:   registry.dispatch(path) ─▶ handler.read/write ─▶ Future
                 └─ pre-flight raise (no handler, bad target type) is
                    captured for that key, not raised for the batch

    collect:   Future ─▶ Result        (write futures: None → Ok(None),
               raise  ─▶ Err             raised EncodeError → Err)

TOLERANCE POLICY
────────────────
``tolerate_partial_failures=True``
    Every failure becomes an ``Err`` entry; the map always has one entry
    per requested key.  ``write_many`` returns ``False`` if anything failed.
``tolerate_partial_failures=False``
    Any failure (``Err`` result, failed future or pre-flight error) fails
    the whole batch with one ``BatchAggregateError``.  The batch still waits
    for every member so no write is left running behind the caller's back.

The non-blocking variant completes its future from done-callbacks, so it
never occupies a pool worker while waiting for the others.

Related modules:
    operations.py — the per-file execution wrapper
    registry.py   — handler dispatch and write-option resolution
"""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from filespine.core.errors import BatchAggregateError, FileSpineError
from filespine.core.logging import LogContext, get_logger
from filespine.core.result import Err, Ok, Result, partition_results
from filespine.handlers.base import Capability
from filespine.registry import HandlerRegistry

logger = get_logger(__name__)

Key = str | Path
Submitted = Future | BaseException


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class BatchSummary:
    """Counts and timing of one finished batch."""

    batch_id: str
    operation: str
    total: int
    succeeded: int = 0
    failed: int = 0
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return (self.succeeded / self.total) * 100

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "batch_id": self.batch_id,
            "operation": self.operation,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "duration_seconds": self.duration_seconds,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def _new_batch_id() -> str:
    return uuid.uuid4().hex[:12]


def _to_result(item: Submitted) -> Result[Any]:
    """Outcome of one finished member as a ``Result``."""
    if isinstance(item, BaseException):
        return Err(item)
    if item.cancelled():
        return Err(FileSpineError("Batch member was cancelled"))
    exc = item.exception()
    if exc is not None:
        return Err(exc)
    value = item.result()
    if isinstance(value, (Ok, Err)):
        return value
    return Ok(value)


class BatchOrchestrator:
    """Run many single-file operations concurrently with a tolerance policy.

    Args:
        pool: Executor every member runs on (owned by the caller)
        registry: Registry used to pick each file's handler
    """

    def __init__(self, pool: Executor, registry: HandlerRegistry):
        self._pool = pool
        self._registry = registry

    # ── Reads ───────────────────────────────────────────────────────

    def read_many_blocking(
        self,
        files_to_types: Mapping[Key, Any],
        tolerate_partial_failures: bool = False,
    ) -> dict[Key, Result[Any]]:
        """Read every file concurrently and wait for all of them.

        Args:
            files_to_types: Path → target type (``None`` for the handler's natural type)
            tolerate_partial_failures: See the module docstring

        Returns:
            Path → ``Result``, one entry per requested path

        Raises:
            BatchAggregateError: Not tolerating, and at least one read failed
        """
        batch_id = _new_batch_id()
        summary = BatchSummary(batch_id=batch_id, operation="read", total=len(files_to_types))
        start = time.perf_counter()
        with LogContext(batch_id=batch_id):
            logger.info(
                "batch_read.start",
                files=len(files_to_types),
                blocking=True,
                tolerate_partial_failures=tolerate_partial_failures,
            )
            submitted = self._submit_reads(files_to_types)
            wait([item for item in submitted.values() if isinstance(item, Future)])
            return self._finish(submitted, summary, start, tolerate_partial_failures)

    def read_many_nonblocking(
        self,
        files_to_types: Mapping[Key, Any],
        tolerate_partial_failures: bool = False,
    ) -> Future[dict[Key, Result[Any]]]:
        """Start every read and return at once.

        The returned future resolves with the same map
        :meth:`read_many_blocking` would return, or fails with
        ``BatchAggregateError`` under the strict policy.
        """
        batch_id = _new_batch_id()
        summary = BatchSummary(batch_id=batch_id, operation="read", total=len(files_to_types))
        start = time.perf_counter()
        aggregate: Future[dict[Key, Result[Any]]] = Future()
        aggregate.set_running_or_notify_cancel()

        with LogContext(batch_id=batch_id):
            logger.info(
                "batch_read.start",
                files=len(files_to_types),
                blocking=False,
                tolerate_partial_failures=tolerate_partial_failures,
            )
            submitted = self._submit_reads(files_to_types)

        def _complete() -> None:
            try:
                aggregate.set_result(self._finish(submitted, summary, start, tolerate_partial_failures))
            except Exception as e:
                aggregate.set_exception(e)

        _when_all_done([item for item in submitted.values() if isinstance(item, Future)], _complete)
        return aggregate

    def _submit_reads(self, files_to_types: Mapping[Key, Any]) -> dict[Key, Submitted]:
        submitted: dict[Key, Submitted] = {}
        for key, target_type in files_to_types.items():
            try:
                handler = self._registry.dispatch(key, Capability.GENERIC)
                submitted[key] = handler.read(self._pool, key, target_type)
            except FileSpineError as e:
                logger.warning("batch.member_rejected", file=Path(key).name, error=str(e))
                submitted[key] = e
        return submitted

    # ── Writes ──────────────────────────────────────────────────────

    def write_many(
        self,
        files_to_content: Mapping[Key, Any],
        option: Any = None,
        tolerate_partial_failures: bool = False,
    ) -> bool:
        """Write every file concurrently and wait for all of them.

        ``option`` is shared by the batch and resolved per file through
        :meth:`HandlerRegistry.resolve_write_option` before anything is
        submitted, so an extension with no mapping aborts the whole batch
        with ``ConfigurationError`` and writes nothing.

        Returns:
            ``True`` if every write succeeded, ``False`` if any failed
            (tolerant mode only)

        Raises:
            ConfigurationError: A file's extension has no write-option mapping
            BatchAggregateError: Not tolerating, and at least one write failed
        """
        options = {key: self._registry.resolve_write_option(key, option) for key in files_to_content}

        batch_id = _new_batch_id()
        summary = BatchSummary(batch_id=batch_id, operation="write", total=len(files_to_content))
        start = time.perf_counter()
        with LogContext(batch_id=batch_id):
            logger.info(
                "batch_write.start",
                files=len(files_to_content),
                tolerate_partial_failures=tolerate_partial_failures,
            )
            submitted: dict[Key, Submitted] = {}
            for key, content in files_to_content.items():
                try:
                    handler = self._registry.dispatch(key, Capability.GENERIC)
                    submitted[key] = handler.write(self._pool, key, content, options[key])
                except FileSpineError as e:
                    logger.warning("batch.member_rejected", file=Path(key).name, error=str(e))
                    submitted[key] = e

            wait([item for item in submitted.values() if isinstance(item, Future)])
            results = self._finish(submitted, summary, start, tolerate_partial_failures)
        return all(result.is_ok() for result in results.values())

    # ── Collection ──────────────────────────────────────────────────

    def _finish(
        self,
        submitted: dict[Key, Submitted],
        summary: BatchSummary,
        start: float,
        tolerate_partial_failures: bool,
    ) -> dict[Key, Result[Any]]:
        results = {key: _to_result(item) for key, item in submitted.items()}
        _, errors = partition_results(list(results.values()))

        summary.succeeded = len(results) - len(errors)
        summary.failed = len(errors)
        summary.completed_at = utcnow()
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"batch_{summary.operation}.complete",
            batch_id=summary.batch_id,
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            duration_ms=duration_ms,
        )

        if errors and not tolerate_partial_failures:
            failures = {key: result.error for key, result in results.items() if isinstance(result, Err)}
            logger.error(
                f"batch_{summary.operation}.failed",
                batch_id=summary.batch_id,
                failed=list(str(key) for key in failures),
            )
            raise BatchAggregateError(
                f"Batch {summary.operation} failed: {len(failures)} of {summary.total} files failed",
                failures=failures,
            )
        return results


def _when_all_done(futures: list[Future], callback: Callable[[], None]) -> None:
    """Call ``callback`` once, after every future in ``futures`` is done."""
    if not futures:
        callback()
        return

    remaining = len(futures)
    lock = threading.Lock()

    def _one_done(_: Future) -> None:
        nonlocal remaining
        with lock:
            remaining -= 1
            last = remaining == 0
        if last:
            callback()

    for future in futures:
        future.add_done_callback(_one_done)


__all__ = ["BatchOrchestrator", "BatchSummary"]
