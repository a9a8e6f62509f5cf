"""Format handlers.

::

    base.py        FileHandler contract, Capability, WriteMode
    text.py        TxtFileHandler        .txt .md .log
    structured.py  JsonFileHandler       .json
                   YamlFileHandler       .yaml .yml
    binary.py      RawBinaryFileHandler  .bin .dat
"""

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

__all__ = [
    "BinaryFileHandler",
    "Capability",
    "FileHandler",
    "JsonFileHandler",
    "ObjectFileHandler",
    "RawBinaryFileHandler",
    "TextFileHandler",
    "TxtFileHandler",
    "WriteMode",
    "YamlFileHandler",
]
