"""Raw binary handler: ``.bin`` plus ``.dat``."""

from __future__ import annotations

from concurrent.futures import Executor, Future
from pathlib import Path

from filespine.core.result import Result
from filespine.handlers.base import BinaryFileHandler


class RawBinaryFileHandler(BinaryFileHandler):
    """Reads and writes whole files as bytes, no interpretation.

    Register it with ``extensions=`` to claim other binary formats::

        RawBinaryFileHandler(extensions=[".png", ".jpg"])
    """

    data_format = "BINARY"
    extensions = (".bin", ".dat")

    def read_bytes(self, pool: Executor, path: str | Path) -> Future[Result[bytes]]:
        path = Path(path)
        return self._submit_read(pool, path, path.read_bytes)

    def write_bytes(self, pool: Executor, path: str | Path, data: bytes) -> Future[None]:
        path = Path(path)
        payload = self._check_bytes(path, data)
        return self._submit_write(pool, path, payload, lambda: path.write_bytes(payload))
