"""Structured handlers: JSON and YAML decoded through pydantic.

Both handlers validate decoded data against the caller's ``target_type``
with a pydantic ``TypeAdapter``, so malformed content and shape mismatches
both surface as ``Err(DecodeError)``; a half-populated object is never
returned.

::

    read_object(path, Config)
      JSON: bytes ──TypeAdapter(Config).validate_json──▶ Config
      YAML: text ──yaml.safe_load──▶ dict ──validate_python──▶ Config

    write_object(path, value)
      JSON: value ──TypeAdapter(type(value)).dump_json(indent)──▶ bytes
      YAML: value ──dump_python(mode="json")──▶ dict ──yaml.safe_dump──▶ text
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any

import yaml
from pydantic import PydanticUserError, TypeAdapter

from filespine.core.result import Result
from filespine.handlers.base import ObjectFileHandler


def _adapter(target_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target_type)


def _target_adapter(handler: ObjectFileHandler, path: Path, target_type: Any) -> TypeAdapter[Any]:
    """Adapter for a read target; a type pydantic cannot describe is a caller error."""
    try:
        return _adapter(target_type)
    except PydanticUserError as e:
        raise handler._type_mismatch(
            path,
            f"{handler.name} cannot decode into {getattr(target_type, '__name__', target_type)!s}: {e}",
            expected=(object,),
            received=target_type,
        ) from e


class JsonFileHandler(ObjectFileHandler):
    """JSON files.

    Args:
        indent: Indentation for written files; ``None`` writes compact JSON
    """

    data_format = "JSON"
    extensions = (".json",)

    def __init__(self, *, indent: int | None = 2, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.indent = indent

    def read_object(self, pool: Executor, path: str | Path, target_type: Any) -> Future[Result[Any]]:
        path = Path(path)
        adapter = _target_adapter(self, path, target_type)

        def _decode() -> Any:
            return adapter.validate_json(path.read_bytes())

        return self._submit_read(pool, path, _decode)

    def write_object(self, pool: Executor, path: str | Path, value: Any) -> Future[None]:
        path = Path(path)

        def _encode() -> None:
            payload = _adapter(type(value)).dump_json(value, indent=self.indent)
            path.write_bytes(payload)

        return self._submit_write(pool, path, value, _encode)


class YamlFileHandler(ObjectFileHandler):
    """YAML files (``.yaml`` and ``.yml``), safe loader/dumper only.

    Args:
        encoding: Text encoding for reads and writes
    """

    data_format = "YAML"
    extensions = (".yaml", ".yml")

    def __init__(self, *, encoding: str = "utf-8", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.encoding = encoding

    def read_object(self, pool: Executor, path: str | Path, target_type: Any) -> Future[Result[Any]]:
        path = Path(path)
        adapter = _target_adapter(self, path, target_type)

        def _decode() -> Any:
            data = yaml.safe_load(path.read_text(encoding=self.encoding))
            return adapter.validate_python(data)

        return self._submit_read(pool, path, _decode)

    def write_object(self, pool: Executor, path: str | Path, value: Any) -> Future[None]:
        path = Path(path)

        def _encode() -> None:
            data = _adapter(type(value)).dump_python(value, mode="json")
            with path.open("w", encoding=self.encoding) as fh:
                yaml.safe_dump(data, fh, sort_keys=False, allow_unicode=True)

        return self._submit_write(pool, path, value, _encode)
