"""Tests for the raw binary handler."""

import pytest

from filespine.core.errors import ConfigurationError, EncodeError, FileMissingError, TypeMismatchError
from filespine.core.result import Ok
from filespine.handlers.base import Capability
from filespine.handlers.binary import RawBinaryFileHandler


class TestRawBinary:
    def test_defaults(self):
        handler = RawBinaryFileHandler()
        assert handler.extensions == (".bin", ".dat")
        assert handler.capabilities == frozenset({Capability.BINARY})

    def test_custom_extensions(self):
        handler = RawBinaryFileHandler(extensions=[".png", "jpg"])
        assert handler.can_handle("photo.JPG")
        assert not handler.can_handle("blob.bin")

    def test_round_trip(self, pool, tmp_path):
        handler = RawBinaryFileHandler()
        path = tmp_path / "blob.bin"
        data = bytes(range(256))
        assert handler.write_bytes(pool, path, data).result() is None
        assert handler.read_bytes(pool, path).result() == Ok(data)

    def test_bytes_like_content(self, pool, tmp_path):
        handler = RawBinaryFileHandler()
        path = tmp_path / "blob.dat"
        handler.write(pool, path, bytearray(b"\x00\x01")).result()
        handler.write(pool, path, memoryview(b"\x02\x03")).result()
        assert path.read_bytes() == b"\x02\x03"

    @pytest.mark.parametrize("target", [None, bytes, object])
    def test_generic_read_targets(self, pool, write_file, target):
        path = write_file("a.bin", b"\xde\xad")
        assert RawBinaryFileHandler().read(pool, path, target).result() == Ok(b"\xde\xad")

    def test_generic_read_refuses_str(self, pool, write_file):
        with pytest.raises(TypeMismatchError):
            RawBinaryFileHandler().read(pool, write_file("a.bin", b"x"), str)

    def test_str_content_refused(self, pool, tmp_path):
        with pytest.raises(TypeMismatchError):
            RawBinaryFileHandler().write_bytes(pool, tmp_path / "a.bin", "text")

    def test_options_refused(self, pool, tmp_path):
        with pytest.raises(ConfigurationError):
            RawBinaryFileHandler().write(pool, tmp_path / "a.bin", b"x", "append")

    def test_refused_option_is_logged(self, pool, tmp_path, log_entries):
        with pytest.raises(ConfigurationError) as exc_info:
            RawBinaryFileHandler().write(pool, tmp_path / "a.bin", b"x", "append")

        assert exc_info.value.extension == ".bin"
        (entry,) = [e for e in log_entries if e["event"] == "handler.invalid_write_option"]
        assert entry["handler"] == "RawBinaryFileHandler"
        assert entry["option"] == "'append'"

    def test_missing_file(self, pool, tmp_path):
        result = RawBinaryFileHandler().read_bytes(pool, tmp_path / "gone.bin").result()
        assert isinstance(result.error, FileMissingError)
        assert "BINARY file not found" in str(result.error)

    def test_write_into_missing_directory_fails_the_future(self, pool, tmp_path):
        future = RawBinaryFileHandler().write_bytes(pool, tmp_path / "no" / "such" / "dir.bin", b"x")
        with pytest.raises(EncodeError) as exc_info:
            future.result()
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
