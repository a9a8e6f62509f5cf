"""FileManager — the caller-facing façade.

One object, bound to the application's worker pool, that reads and writes
any registered format::

    with worker_pool() as pool:
        files = FileManager(pool, register_defaults=True)

        files.read_text("report.md").result()          # Ok("...")
        files.read_object("config.json", Config)       # Future[Result[Config]]
        files.write_bytes("blob.bin", b"\\x00\\x01")     # Future[None]

        files.read_many_blocking(
            {"a.json": Config, "b.json": Config},
            tolerate_partial_failures=True,
        )                                              # {"a.json": Ok, "b.json": Err}

Per-file calls pick a handler by capability (``read_text`` only considers
text handlers, and so on); ``read_any`` / ``write_any`` and the batch calls
consider every handler.  Dispatch failures, refused target types and bad
write options raise immediately; I/O outcomes arrive through the future.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any

from filespine.core.logging import get_logger
from filespine.core.result import Result
from filespine.core.settings import FileSpineSettings
from filespine.execution.batch import BatchOrchestrator
from filespine.execution.operations import ExecutionHooks
from filespine.handlers.base import (
    BinaryFileHandler,
    Capability,
    FileHandler,
    ObjectFileHandler,
    TextFileHandler,
    WriteMode,
)
from filespine.handlers.binary import RawBinaryFileHandler
from filespine.handlers.structured import JsonFileHandler, YamlFileHandler
from filespine.handlers.text import TxtFileHandler
from filespine.registry import HandlerEntry, HandlerRegistry

logger = get_logger(__name__)


def default_handlers(
    settings: FileSpineSettings | None = None,
    hooks: ExecutionHooks | None = None,
) -> list[FileHandler]:
    """The stock handler set, in registration order: text, JSON, YAML, binary."""
    settings = settings or FileSpineSettings()
    return [
        TxtFileHandler(
            encoding=settings.encoding,
            default_write_mode=settings.default_write_mode,
            hooks=hooks,
        ),
        JsonFileHandler(indent=settings.json_indent, hooks=hooks),
        YamlFileHandler(encoding=settings.encoding, hooks=hooks),
        RawBinaryFileHandler(hooks=hooks),
    ]


class FileManager:
    """Reads and writes files of any registered format on a worker pool.

    Args:
        pool: Executor all I/O runs on; the caller owns its lifetime
        registry: Handler registry to use (a new empty one by default)
        register_defaults: Register :func:`default_handlers` first
        hooks: Telemetry hooks given to the default handlers
        settings: Configuration for the default handlers
    """

    def __init__(
        self,
        pool: Executor,
        registry: HandlerRegistry | None = None,
        *,
        register_defaults: bool = False,
        hooks: ExecutionHooks | None = None,
        settings: FileSpineSettings | None = None,
    ):
        self._pool = pool
        self._registry = registry if registry is not None else HandlerRegistry()
        if register_defaults:
            for handler in default_handlers(settings, hooks):
                self._registry.register(handler)
        self._batch = BatchOrchestrator(pool, self._registry)
        logger.debug("file_manager.created", handlers=len(self._registry), defaults=register_defaults)

    @classmethod
    def from_settings(
        cls,
        pool: Executor,
        settings: FileSpineSettings | None = None,
        hooks: ExecutionHooks | None = None,
    ) -> FileManager:
        """Manager with the default handlers configured from ``settings``."""
        return cls(pool, register_defaults=True, hooks=hooks, settings=settings)

    @property
    def pool(self) -> Executor:
        return self._pool

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def register_handler(
        self,
        handler: FileHandler,
        capabilities: Iterable[Capability] | None = None,
    ) -> HandlerEntry:
        """Register ``handler`` after every handler already present."""
        return self._registry.register(handler, capabilities)

    # ── Text ────────────────────────────────────────────────────────

    def read_text(self, path: str | Path) -> Future[Result[str]]:
        handler = self._registry.dispatch(path, Capability.TEXT)
        if isinstance(handler, TextFileHandler):
            return handler.read_text(self._pool, path)
        return handler.read(self._pool, path, str)

    def write_text(
        self,
        path: str | Path,
        content: str,
        mode: WriteMode | str | None = None,
    ) -> Future[None]:
        """Write ``content`` as text.

        ``mode`` is a :class:`WriteMode` or its value (``"append"``); ``None``
        uses the handler's default.
        """
        handler = self._registry.dispatch(path, Capability.TEXT)
        if isinstance(handler, TextFileHandler):
            return handler.write_text(self._pool, path, content, mode)
        return handler.write(self._pool, path, content, mode)

    # ── Objects ─────────────────────────────────────────────────────

    def read_object(self, path: str | Path, target_type: Any) -> Future[Result[Any]]:
        """Decode a structured file into ``target_type`` (model, dataclass, ``dict``...)."""
        handler = self._registry.dispatch(path, Capability.OBJECT)
        if isinstance(handler, ObjectFileHandler):
            return handler.read_object(self._pool, path, target_type)
        return handler.read(self._pool, path, target_type)

    def write_object(self, path: str | Path, value: Any) -> Future[None]:
        handler = self._registry.dispatch(path, Capability.OBJECT)
        if isinstance(handler, ObjectFileHandler):
            return handler.write_object(self._pool, path, value)
        return handler.write(self._pool, path, value)

    # ── Bytes ───────────────────────────────────────────────────────

    def read_bytes(self, path: str | Path) -> Future[Result[bytes]]:
        handler = self._registry.dispatch(path, Capability.BINARY)
        if isinstance(handler, BinaryFileHandler):
            return handler.read_bytes(self._pool, path)
        return handler.read(self._pool, path, bytes)

    def write_bytes(self, path: str | Path, data: bytes) -> Future[None]:
        handler = self._registry.dispatch(path, Capability.BINARY)
        if isinstance(handler, BinaryFileHandler):
            return handler.write_bytes(self._pool, path, data)
        return handler.write(self._pool, path, data)

    # ── Any format ──────────────────────────────────────────────────

    def read_any(self, path: str | Path, target_type: Any = None) -> Future[Result[Any]]:
        """Read with whichever handler claims ``path`` first, regardless of capability."""
        return self._registry.dispatch(path, Capability.GENERIC).read(self._pool, path, target_type)

    def write_any(self, path: str | Path, content: Any, option: Any = None) -> Future[None]:
        return self._registry.dispatch(path, Capability.GENERIC).write(self._pool, path, content, option)

    # ── Batches ─────────────────────────────────────────────────────

    def read_many_blocking(
        self,
        files_to_types: Mapping[str | Path, Any],
        tolerate_partial_failures: bool = False,
    ) -> dict[str | Path, Result[Any]]:
        return self._batch.read_many_blocking(files_to_types, tolerate_partial_failures)

    def read_many_nonblocking(
        self,
        files_to_types: Mapping[str | Path, Any],
        tolerate_partial_failures: bool = False,
    ) -> Future[dict[str | Path, Result[Any]]]:
        return self._batch.read_many_nonblocking(files_to_types, tolerate_partial_failures)

    def write_many(
        self,
        files_to_content: Mapping[str | Path, Any],
        option: Any = None,
        tolerate_partial_failures: bool = False,
    ) -> bool:
        return self._batch.write_many(files_to_content, option, tolerate_partial_failures)

    def __repr__(self) -> str:
        return f"FileManager(handlers={[h.name for h in self._registry]})"


__all__ = ["FileManager", "default_handlers"]
