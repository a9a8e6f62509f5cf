"""
Shared pytest fixtures for file-spine tests.

This module provides:
- A worker pool shut down after every test
- Registries and managers wired with the stock handlers
- Small file factories for the common formats

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(manager, write_file):
        path = write_file("a.txt", "hello")
        assert manager.read_text(path).result().unwrap() == "hello"
"""

from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
import structlog
from structlog.testing import LogCapture

from filespine.core.logging import clear_context
from filespine.execution import batch as batch_module
from filespine.execution import operations
from filespine.execution.pools import worker_pool
from filespine.handlers import base as handlers_base
from filespine.handlers.binary import RawBinaryFileHandler
from filespine.handlers.structured import JsonFileHandler, YamlFileHandler
from filespine.handlers.text import TxtFileHandler
from filespine.manager import FileManager
from filespine.registry import HandlerRegistry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark everything not explicitly marked as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop bound log context and structlog configuration between tests."""
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture
def log_entries(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    """
    Capture structlog events, with bound context merged in.

    Module loggers may already be cached by an earlier ``configure_logging``
    call, so the ones under test are swapped for fresh proxies.
    """
    log_output = LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, log_output])
    for module in (operations, batch_module, handlers_base):
        monkeypatch.setattr(module, "logger", structlog.get_logger(module.__name__))
    return log_output.entries


# =============================================================================
# Pools, registries, managers
# =============================================================================


@pytest.fixture
def pool() -> Generator[ThreadPoolExecutor, None, None]:
    """Four-worker pool, drained and joined after the test."""
    with worker_pool(max_workers=4) as executor:
        yield executor


@pytest.fixture
def registry() -> HandlerRegistry:
    """Text (``.txt``/``.md``/``.log``) and JSON handlers, in that order."""
    reg = HandlerRegistry()
    reg.register(TxtFileHandler())
    reg.register(JsonFileHandler())
    return reg


@pytest.fixture
def full_registry() -> HandlerRegistry:
    """Every stock handler: text, JSON, YAML, binary."""
    return HandlerRegistry(
        [TxtFileHandler(), JsonFileHandler(), YamlFileHandler(), RawBinaryFileHandler()]
    )


@pytest.fixture
def manager(pool: ThreadPoolExecutor) -> FileManager:
    return FileManager(pool, register_defaults=True)


# =============================================================================
# File factories
# =============================================================================


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str | bytes], Path]:
    """
    Create a file under ``tmp_path`` and return its path.

    ``str`` content is written as UTF-8 text, ``bytes`` as-is.
    """

    def _write(name: str, content: str | bytes) -> Path:
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
