"""Worker pool lifecycle.

file-spine never owns a global pool.  The application creates one, hands it
to :class:`~filespine.manager.FileManager`, and shuts it down when done.
``worker_pool`` is the convenient way to do all three::

    with worker_pool(settings) as pool:
        manager = FileManager(pool, register_defaults=True)
        ...
    # pending work drained, threads joined
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

from filespine.core.logging import get_logger
from filespine.core.settings import FileSpineSettings

logger = get_logger(__name__)


@contextmanager
def worker_pool(
    settings: FileSpineSettings | None = None,
    *,
    max_workers: int | None = None,
) -> Iterator[ThreadPoolExecutor]:
    """Yield a ``ThreadPoolExecutor`` and shut it down on exit.

    Args:
        settings: Source of ``max_workers`` / ``thread_name_prefix``
        max_workers: Overrides ``settings.max_workers``
    """
    settings = settings or FileSpineSettings()
    workers = max_workers or settings.max_workers
    pool = ThreadPoolExecutor(
        max_workers=workers,
        thread_name_prefix=settings.thread_name_prefix,
    )
    logger.debug("worker_pool.started", max_workers=workers)
    try:
        yield pool
    finally:
        pool.shutdown(wait=True)
        logger.debug("worker_pool.shutdown", max_workers=workers)
