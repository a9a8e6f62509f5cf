"""Handler Registry — ordered, capability-tagged handler dispatch.

Manifesto:
Callers ask for "read this as text" or "decode this into Config"; the
registry finds the handler.  Handlers are kept in registration order and
tagged with explicit capabilities when registered, so dispatch is a plain
ordered scan: no type inspection at call time, and the same registry and
file always select the same handler.

ARCHITECTURE
────────────
::

    HandlerRegistry
      ├── .register(handler, capabilities=None)  ─ append entry (no dedup)
      ├── .dispatch(path, capability)            ─ first match or raise
      ├── .find(path, capability)                ─ first match or None
      ├── .resolve_write_option(path, option)    ─ extension → option type
      └── .supported_extensions()                ─ for listings / CLI

    HandlerEntry(position, handler, capabilities)

    dispatch(path, TEXT):
      for entry in entries (insertion order):
          TEXT in entry.capabilities?  and  handler.can_handle(path)?
              → return entry.handler              (first match wins)
      → NoSuitableHandlerError

OVERLAP POLICY
──────────────
Two handlers may claim the same extension.  That is not an error: the one
registered first is authoritative for every capability both share.

THREADING
─────────
Register during single-threaded setup; afterwards the registry is only
read, and concurrent dispatch needs no locking.

Related modules:
    handlers/base.py — the FileHandler contract and Capability tags
    manager.py       — FileManager façade built on this registry
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from filespine.core.errors import ConfigurationError, ErrorContext, NoSuitableHandlerError
from filespine.core.logging import get_logger
from filespine.handlers.base import Capability, FileHandler

logger = get_logger(__name__)


@dataclass(frozen=True)
class HandlerEntry:
    """One registered handler and the capabilities it was registered with."""

    position: int
    handler: FileHandler
    capabilities: frozenset[Capability]

    def serves(self, capability: Capability) -> bool:
        return capability is Capability.GENERIC or capability in self.capabilities


class HandlerRegistry:
    """Ordered registry of format handlers.

    Example:
        >>> from filespine.handlers import JsonFileHandler, TxtFileHandler
        >>> registry = HandlerRegistry()
        >>> registry.register(TxtFileHandler()).position
        0
        >>> _ = registry.register(JsonFileHandler())
        >>> registry.dispatch("notes.md", Capability.TEXT)
        TxtFileHandler(extensions=['.txt', '.md', '.log'])
    """

    def __init__(self, handlers: Iterable[FileHandler] | None = None):
        self._entries: list[HandlerEntry] = []
        for handler in handlers or ():
            self.register(handler)

    def register(
        self,
        handler: FileHandler,
        capabilities: Iterable[Capability] | None = None,
    ) -> HandlerEntry:
        """Append a handler; it loses ties to every handler registered before it.

        Args:
            handler: The handler to add
            capabilities: Tags to register it under (default: ``handler.capabilities``)

        Returns:
            The new entry
        """
        tags = frozenset(handler.capabilities if capabilities is None else capabilities)
        entry = HandlerEntry(position=len(self._entries), handler=handler, capabilities=tags)
        self._entries.append(entry)
        logger.info(
            "registry.handler_registered",
            handler=handler.name,
            position=entry.position,
            capabilities=sorted(tag.value for tag in tags),
            extensions=list(handler.extensions),
        )
        return entry

    def find(self, path: str | Path, capability: Capability = Capability.GENERIC) -> FileHandler | None:
        """First handler registered under ``capability`` that claims ``path``."""
        for entry in self._entries:
            if entry.serves(capability) and entry.handler.can_handle(path):
                return entry.handler
        return None

    def dispatch(self, path: str | Path, capability: Capability = Capability.GENERIC) -> FileHandler:
        """Like :meth:`find`, but raise when nothing matches.

        Raises:
            NoSuitableHandlerError: No handler with ``capability`` claims ``path``
        """
        handler = self.find(path, capability)
        if handler is None:
            file_name = Path(path).name
            label = "" if capability is Capability.GENERIC else f"{capability.value} "
            logger.error(
                "registry.no_suitable_handler",
                file=file_name,
                capability=capability.value,
                registered=len(self._entries),
            )
            raise NoSuitableHandlerError(
                f"No suitable {label}file handler found for file: {file_name}",
                context=ErrorContext(file_name=file_name, path=str(path), operation=capability.value),
            )
        logger.debug("registry.dispatched", file=Path(path).name, capability=capability.value, handler=handler.name)
        return handler

    def resolve_write_option(self, path: str | Path, option: Any = None) -> Any:
        """Map ``option`` to what the handler owning ``path``'s extension expects.

        - ``None`` resolves to the handler's default option.
        - Handlers that take no option resolve to ``None``; a shared option
          given to a batch is simply not passed to them.
        - Otherwise the option is converted to the handler's
          ``write_option_type`` (e.g. ``"append"`` → ``WriteMode.APPEND``).

        Raises:
            ConfigurationError: No handler claims the extension, or the option
                cannot be converted
        """
        file_name = Path(path).name
        extension = Path(path).suffix.lower() or file_name
        handler = self.find(path)
        if handler is None:
            logger.error("registry.no_write_option_mapping", file=file_name, extension=extension)
            raise ConfigurationError(
                f"No write option mapping exists for {extension!r} (file: {file_name})",
                extension=extension,
                context=ErrorContext(file_name=file_name, path=str(path), operation="write"),
            )

        option_type = handler.write_option_type
        if option_type is None:
            if option is not None:
                logger.debug("registry.write_option_unused", file=file_name, handler=handler.name)
            return None
        if option is None:
            return handler.default_write_option
        if isinstance(option, option_type):
            return option
        try:
            return option_type(option.lower() if isinstance(option, str) else option)
        except (TypeError, ValueError) as e:
            logger.error(
                "registry.invalid_write_option",
                file=file_name,
                handler=handler.name,
                option=repr(option),
                expected=option_type.__name__,
            )
            raise ConfigurationError(
                f"Write option {option!r} is not a valid {option_type.__name__} for file: {file_name}",
                extension=extension,
                cause=e,
                context=ErrorContext(file_name=file_name, path=str(path), handler=handler.name),
            ) from e

    # ── Inspection ───────────────────────────────────────────────────

    @property
    def entries(self) -> tuple[HandlerEntry, ...]:
        return tuple(self._entries)

    @property
    def handlers(self) -> tuple[FileHandler, ...]:
        return tuple(entry.handler for entry in self._entries)

    def supported_extensions(self, capability: Capability = Capability.GENERIC) -> list[str]:
        """Extensions claimed under ``capability``, first-registered order, no duplicates."""
        seen: dict[str, None] = {}
        for entry in self._entries:
            if entry.serves(capability):
                for ext in entry.handler.extensions:
                    seen.setdefault(ext, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FileHandler]:
        return iter(self.handlers)


__all__ = ["HandlerEntry", "HandlerRegistry"]
