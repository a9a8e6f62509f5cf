"""Plain text handler: ``.txt`` plus ``.md`` and ``.log`` as aliases."""

from __future__ import annotations

from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any

from filespine.core.result import Result
from filespine.handlers.base import TextFileHandler, WriteMode


class TxtFileHandler(TextFileHandler):
    """Reads and writes whole files as strings.

    Newlines are preserved as written (no translation), so a string written
    and read back compares equal.

    Args:
        encoding: Text encoding for reads and writes
    """

    data_format = "TXT"
    extensions = (".txt", ".md", ".log")

    def __init__(self, *, encoding: str = "utf-8", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.encoding = encoding

    def read_text(self, pool: Executor, path: str | Path) -> Future[Result[str]]:
        path = Path(path)

        def _read() -> str:
            with path.open("r", encoding=self.encoding, newline="") as fh:
                return fh.read()

        return self._submit_read(pool, path, _read)

    def write_text(
        self,
        pool: Executor,
        path: str | Path,
        content: str,
        mode: WriteMode | str | None = None,
    ) -> Future[None]:
        path = Path(path)
        self._check_text(path, content)
        write_mode = self._resolve_mode(mode)

        def _write() -> None:
            with path.open(write_mode.open_mode, encoding=self.encoding, newline="") as fh:
                fh.write(content)

        return self._submit_write(pool, path, content, _write)
