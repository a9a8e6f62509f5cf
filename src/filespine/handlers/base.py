"""Format handler contract.

A handler answers "can I process this file?" from the file name alone and,
if so, reads or writes it through the execution wrapper.  Three capability
refinements share the base contract:

::

    FileHandler (can_handle, read, write)
      ├── TextFileHandler    read_text  / write_text   (str, WriteMode)
      ├── ObjectFileHandler  read_object / write_object (target type)
      └── BinaryFileHandler  read_bytes / write_bytes  (bytes)

Every concrete handler declares ``data_format`` (label for logs), the
``extensions`` it recognizes (primary first, then aliases) and, for writes,
the ``write_option_type`` it expects.  ``can_handle`` is a pure,
case-insensitive suffix check so a registry can probe many handlers cheaply.

Reads return ``Future[Result[T]]``; writes return ``Future[None]`` that
fails with ``EncodeError``.  Asking a handler for a target type it cannot
produce, or handing it content it cannot write, raises
``TypeMismatchError`` immediately instead of submitting anything.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from filespine.core.errors import ConfigurationError, ErrorContext, TypeMismatchError
from filespine.core.logging import get_logger
from filespine.core.result import Result
from filespine.execution.operations import (
    ExecutionHooks,
    attach_callbacks,
    execute_read,
    execute_write,
)

logger = get_logger(__name__)


class Capability(str, Enum):
    """Capability tags used by the registry to filter handlers.

    Every handler also satisfies ``GENERIC``: it can serve the untyped
    ``read``/``write`` entry points.
    """

    TEXT = "text"
    OBJECT = "object"
    BINARY = "binary"
    GENERIC = "generic"


class WriteMode(str, Enum):
    """How a text write opens its file."""

    OVERWRITE = "overwrite"    # create, or truncate an existing file
    APPEND = "append"          # create, or append to an existing file
    CREATE_NEW = "create_new"  # create; fail if the file already exists

    @property
    def open_mode(self) -> str:
        return {"overwrite": "w", "append": "a", "create_new": "x"}[self.value]


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


class FileHandler(ABC):
    """Base contract for all format handlers.

    Args:
        extensions: Replaces the class-level ``extensions`` (primary first)
        hooks: Telemetry callbacks fired around every operation
    """

    data_format: ClassVar[str] = "FILE"
    extensions: tuple[str, ...] = ()
    capabilities: ClassVar[frozenset[Capability]] = frozenset()
    write_option_type: ClassVar[type | None] = None

    def __init__(
        self,
        *,
        extensions: Iterable[str] | None = None,
        hooks: ExecutionHooks | None = None,
    ) -> None:
        source = self.extensions if extensions is None else tuple(extensions)
        if not source:
            raise ValueError(f"{type(self).__name__} needs at least one extension")
        self.extensions = tuple(_normalize_extension(ext) for ext in source)
        self.hooks = hooks

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def primary_extension(self) -> str:
        return self.extensions[0]

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.extensions[1:]

    def can_handle(self, path: str | Path) -> bool:
        """True if the file name ends with the primary extension or an alias."""
        file_name = Path(path).name.lower()
        return any(file_name.endswith(ext) for ext in self.extensions)

    @property
    def default_write_option(self) -> Any:
        """Option used when a write passes none (``None`` if options are unused)."""
        return None

    # ── Generic entry points ────────────────────────────────────────

    @abstractmethod
    def read(self, pool: Executor, path: str | Path, target_type: Any = None) -> Future[Result[Any]]:
        """Read ``path`` into ``target_type``."""

    @abstractmethod
    def write(self, pool: Executor, path: str | Path, content: Any, option: Any = None) -> Future[None]:
        """Write ``content`` to ``path`` using ``option``."""

    # ── Helpers for subclasses ──────────────────────────────────────

    def _submit_read(self, pool: Executor, path: str | Path, operation: Callable[[], Any]) -> Future[Result[Any]]:
        future = execute_read(pool, path, self.data_format, operation, hooks=self.hooks)
        return attach_callbacks(future, path, self.data_format, "reading", hooks=self.hooks)

    def _submit_write(
        self,
        pool: Executor,
        path: str | Path,
        content: Any,
        operation: Callable[[], None],
    ) -> Future[None]:
        future = execute_write(pool, path, self.data_format, content, operation, hooks=self.hooks)
        return attach_callbacks(future, path, self.data_format, "writing", hooks=self.hooks)

    def _type_mismatch(
        self,
        path: str | Path,
        message: str,
        expected: tuple[type, ...],
        received: Any,
    ) -> TypeMismatchError:
        logger.error(
            "handler.type_mismatch",
            handler=self.name,
            file=Path(path).name,
            expected=[t.__name__ for t in expected],
            received=getattr(received, "__name__", repr(received)),
        )
        return TypeMismatchError(
            message,
            expected=expected,
            received=received,
            context=ErrorContext(
                file_name=Path(path).name,
                path=str(path),
                data_format=self.data_format,
                handler=self.name,
            ),
        )

    def _invalid_option(
        self,
        message: str,
        option: Any,
        cause: BaseException | None = None,
    ) -> ConfigurationError:
        logger.error(
            "handler.invalid_write_option",
            handler=self.name,
            data_format=self.data_format,
            option=repr(option),
        )
        return ConfigurationError(message, extension=self.primary_extension, cause=cause)

    def __repr__(self) -> str:
        return f"{self.name}(extensions={list(self.extensions)})"


class TextFileHandler(FileHandler):
    """Text formats (plain text, Markdown, logs).

    Generic ``read`` only produces ``str``; asking for any other target type
    raises ``TypeMismatchError`` rather than handing back raw text where a
    structured value was expected.
    """

    capabilities = frozenset({Capability.TEXT})
    write_option_type = WriteMode
    readable_types: ClassVar[tuple[Any, ...]] = (str, object, Any)

    def __init__(self, *, default_write_mode: WriteMode = WriteMode.OVERWRITE, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.default_write_mode = WriteMode(default_write_mode)

    @property
    def default_write_option(self) -> WriteMode:
        return self.default_write_mode

    @abstractmethod
    def read_text(self, pool: Executor, path: str | Path) -> Future[Result[str]]:
        """Read the whole file as a string."""

    @abstractmethod
    def write_text(
        self,
        pool: Executor,
        path: str | Path,
        content: str,
        mode: WriteMode | str | None = None,
    ) -> Future[None]:
        """Write ``content`` using ``mode`` (default: ``default_write_mode``)."""

    def read(self, pool: Executor, path: str | Path, target_type: Any = None) -> Future[Result[Any]]:
        if target_type is not None and target_type not in self.readable_types:
            raise self._type_mismatch(
                path,
                f"{self.name} can only read into str or object, "
                f"but received {getattr(target_type, '__name__', target_type)}",
                expected=(str, object),
                received=target_type,
            )
        return self.read_text(pool, path)

    def write(self, pool: Executor, path: str | Path, content: Any, option: Any = None) -> Future[None]:
        return self.write_text(pool, path, content, option)

    def _check_text(self, path: str | Path, content: Any) -> None:
        if not isinstance(content, str):
            raise self._type_mismatch(
                path,
                f"{self.name} can only write str content, but received {type(content).__name__}",
                expected=(str,),
                received=type(content),
            )

    def _resolve_mode(self, mode: WriteMode | str | None) -> WriteMode:
        if mode is None:
            return self.default_write_mode
        try:
            return WriteMode(mode.lower() if isinstance(mode, str) else mode)
        except ValueError as e:
            raise self._invalid_option(
                f"Unknown write mode {mode!r} for {self.data_format}; "
                f"expected one of {[m.value for m in WriteMode]}",
                mode,
                cause=e,
            ) from e


class ObjectFileHandler(FileHandler):
    """Structured formats decoded into a caller-described shape.

    ``target_type`` is anything pydantic can validate against: a model, a
    dataclass, ``dict[str, int]``, ``list[Config]``.  ``None``/``object``
    mean "plain Python data".  Writes take no option.
    """

    capabilities = frozenset({Capability.OBJECT})
    write_option_type = None

    @abstractmethod
    def read_object(self, pool: Executor, path: str | Path, target_type: Any) -> Future[Result[Any]]:
        """Decode the file into ``target_type``."""

    @abstractmethod
    def write_object(self, pool: Executor, path: str | Path, value: Any) -> Future[None]:
        """Encode ``value`` into the file, replacing its content."""

    def read(self, pool: Executor, path: str | Path, target_type: Any = None) -> Future[Result[Any]]:
        if target_type is None or target_type is object:
            target_type = Any
        return self.read_object(pool, path, target_type)

    def write(self, pool: Executor, path: str | Path, content: Any, option: Any = None) -> Future[None]:
        if option is not None:
            raise self._invalid_option(
                f"{self.data_format} writes take no option, but received {option!r}",
                option,
            )
        return self.write_object(pool, path, content)


class BinaryFileHandler(FileHandler):
    """Raw byte formats (images, audio, opaque blobs). Writes take no option."""

    capabilities = frozenset({Capability.BINARY})
    write_option_type = None
    readable_types: ClassVar[tuple[Any, ...]] = (bytes, object, Any)

    @abstractmethod
    def read_bytes(self, pool: Executor, path: str | Path) -> Future[Result[bytes]]:
        """Read the whole file as bytes."""

    @abstractmethod
    def write_bytes(self, pool: Executor, path: str | Path, data: bytes) -> Future[None]:
        """Write ``data``, replacing the file's content."""

    def read(self, pool: Executor, path: str | Path, target_type: Any = None) -> Future[Result[Any]]:
        if target_type is not None and target_type not in self.readable_types:
            raise self._type_mismatch(
                path,
                f"{self.name} can only read into bytes or object, "
                f"but received {getattr(target_type, '__name__', target_type)}",
                expected=(bytes, object),
                received=target_type,
            )
        return self.read_bytes(pool, path)

    def write(self, pool: Executor, path: str | Path, content: Any, option: Any = None) -> Future[None]:
        if option is not None:
            raise self._invalid_option(
                f"{self.data_format} writes take no option, but received {option!r}",
                option,
            )
        return self.write_bytes(pool, path, content)

    def _check_bytes(self, path: str | Path, data: Any) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise self._type_mismatch(
                path,
                f"{self.name} can only write bytes-like content, but received {type(data).__name__}",
                expected=(bytes, bytearray, memoryview),
                received=type(data),
            )
        return bytes(data)


__all__ = [
    "BinaryFileHandler",
    "Capability",
    "FileHandler",
    "ObjectFileHandler",
    "TextFileHandler",
    "WriteMode",
]
