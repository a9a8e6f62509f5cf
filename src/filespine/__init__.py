"""
File Spine - concurrent, format-aware file I/O.

Pick a handler by file extension, run the I/O on your worker pool, get a
``Result`` back::

    from filespine import FileManager, worker_pool

    with worker_pool() as pool:
        files = FileManager(pool, register_defaults=True)
        match files.read_text("report.md").result():
            case Ok(text):
                ...
            case Err(error):
                ...
"""

__version__ = "0.1.0"

from filespine.core import *  # noqa: E402,F401,F403
from filespine.core import __all__ as _core_all  # noqa: E402
from filespine.core.settings import FileSpineSettings  # noqa: E402
from filespine.execution.batch import BatchOrchestrator, BatchSummary  # noqa: E402
from filespine.execution.operations import ExecutionHooks, OperationEvent  # noqa: E402
from filespine.execution.pools import worker_pool  # noqa: E402
from filespine.handlers import *  # noqa: E402,F401,F403
from filespine.handlers import __all__ as _handlers_all  # noqa: E402
from filespine.manager import FileManager, default_handlers  # noqa: E402
from filespine.registry import HandlerEntry, HandlerRegistry  # noqa: E402

__all__ = [
    "__version__",
    *_core_all,
    *_handlers_all,
    "BatchOrchestrator",
    "BatchSummary",
    "ExecutionHooks",
    "FileManager",
    "FileSpineSettings",
    "HandlerEntry",
    "HandlerRegistry",
    "OperationEvent",
    "default_handlers",
    "worker_pool",
]
