"""Tests for BatchOrchestrator: concurrent batches and the tolerance policy."""

import threading
from datetime import timedelta
from pathlib import Path

import pytest
import structlog
from pydantic import BaseModel

from filespine.core.errors import (
    BatchAggregateError,
    ConfigurationError,
    DecodeError,
    FileMissingError,
    NoSuitableHandlerError,
    TypeMismatchError,
)
from filespine.core.result import Ok
from filespine.execution.batch import BatchOrchestrator, BatchSummary
from filespine.execution.pools import worker_pool
from filespine.handlers.text import TxtFileHandler
from filespine.registry import HandlerRegistry


class Config(BaseModel):
    name: str
    port: int


class GatedTextHandler(TxtFileHandler):
    """Text handler whose reads block until ``gate`` is set."""

    def __init__(self, gate: threading.Event, **kwargs):
        super().__init__(**kwargs)
        self.gate = gate

    def read_text(self, pool, path):
        path = Path(path)

        def _read():
            self.gate.wait(timeout=5)
            return path.read_text(encoding="utf-8")

        return self._submit_read(pool, path, _read)


@pytest.fixture
def batch(pool, full_registry):
    return BatchOrchestrator(pool, full_registry)


@pytest.fixture
def configs(write_file):
    """a.json valid, b.json malformed."""
    good = write_file("a.json", '{"name": "api", "port": 8080}')
    bad = write_file("b.json", '{"name": "api", "port": ')
    return str(good), str(bad)


class TestReadManyBlocking:
    def test_tolerant_partial_failure(self, batch, configs):
        good, bad = configs
        results = batch.read_many_blocking({good: Config, bad: Config}, tolerate_partial_failures=True)

        assert list(results) == [good, bad]
        assert results[good] == Ok(Config(name="api", port=8080))
        assert isinstance(results[bad].error, DecodeError)

    def test_tolerant_captures_every_failure_kind(self, batch, write_file, tmp_path):
        text = str(write_file("notes.txt", "hello"))
        missing = str(tmp_path / "missing.json")
        unknown = str(write_file("table.csv", "a,b"))
        mismatch = str(write_file("other.txt", "x"))

        results = batch.read_many_blocking(
            {text: str, missing: Config, unknown: None, mismatch: int},
            tolerate_partial_failures=True,
        )

        assert len(results) == 4
        assert results[text] == Ok("hello")
        assert isinstance(results[missing].error, FileMissingError)
        assert isinstance(results[unknown].error, NoSuitableHandlerError)
        assert isinstance(results[mismatch].error, TypeMismatchError)

    def test_strict_all_succeed(self, batch, write_file):
        a = str(write_file("a.txt", "A"))
        b = str(write_file("b.bin", b"B"))
        results = batch.read_many_blocking({a: None, b: None})
        assert results == {a: Ok("A"), b: Ok(b"B")}

    def test_strict_failure_aggregates(self, batch, configs, tmp_path):
        good, bad = configs
        missing = str(tmp_path / "gone.json")

        with pytest.raises(BatchAggregateError) as exc_info:
            batch.read_many_blocking({good: Config, bad: Config, missing: Config})

        error = exc_info.value
        assert list(error.failures) == [bad, missing]
        assert good not in error.failures
        assert not hasattr(error, "results")
        assert isinstance(error.failures[bad], DecodeError)
        assert isinstance(error.failures[missing], FileMissingError)
        assert error.__cause__ is error.failures[bad]
        assert "2 of 3" in error.message

    def test_strict_pre_flight_error_is_aggregated(self, batch, write_file):
        unknown = str(write_file("table.csv", "a,b"))
        with pytest.raises(BatchAggregateError) as exc_info:
            batch.read_many_blocking({unknown: None})
        assert isinstance(exc_info.value.failures[unknown], NoSuitableHandlerError)

    def test_path_keys_are_preserved(self, batch, write_file):
        path = write_file("a.txt", "A")
        results = batch.read_many_blocking({path: str})
        assert list(results) == [path]

    def test_empty_batch(self, batch):
        assert batch.read_many_blocking({}) == {}


class TestReadManyNonBlocking:
    def test_returns_before_reads_finish(self, pool, write_file):
        gate = threading.Event()
        registry = HandlerRegistry([GatedTextHandler(gate)])
        a = str(write_file("a.txt", "A"))
        b = str(write_file("b.txt", "B"))

        future = BatchOrchestrator(pool, registry).read_many_nonblocking({a: str, b: str})
        assert not future.done()

        gate.set()
        assert future.result(timeout=5) == {a: Ok("A"), b: Ok("B")}

    def test_tolerant(self, batch, configs):
        good, bad = configs
        results = batch.read_many_nonblocking({good: Config, bad: Config}, True).result(timeout=5)
        assert results[good].is_ok()
        assert results[bad].is_err()

    def test_strict_sets_exception(self, batch, configs):
        good, bad = configs
        future = batch.read_many_nonblocking({good: Config, bad: Config})
        error = future.exception(timeout=5)
        assert isinstance(error, BatchAggregateError)
        assert list(error.failures) == [bad]

    def test_only_pre_flight_failures(self, batch, write_file):
        unknown = str(write_file("table.csv", "a,b"))
        future = batch.read_many_nonblocking({unknown: None}, tolerate_partial_failures=True)
        assert future.done()
        assert isinstance(future.result()[unknown].error, NoSuitableHandlerError)

    def test_empty_batch(self, batch):
        assert batch.read_many_nonblocking({}).result(timeout=5) == {}


class TestWriteMany:
    def test_writes_every_file(self, batch, tmp_path):
        files = {
            str(tmp_path / "a.txt"): "text",
            str(tmp_path / "b.json"): {"name": "api", "port": 1},
            str(tmp_path / "c.bin"): b"\x00",
        }
        assert batch.write_many(files) is True
        assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "text"
        assert (tmp_path / "b.json").exists()
        assert (tmp_path / "c.bin").read_bytes() == b"\x00"

    def test_shared_option_applies_to_text_only(self, batch, write_file, tmp_path):
        log = write_file("app.log", "one\n")
        files = {str(log): "two\n", str(tmp_path / "state.json"): {"ok": True}}
        assert batch.write_many(files, option="append") is True
        assert log.read_text(encoding="utf-8") == "one\ntwo\n"
        assert (tmp_path / "state.json").exists()

    def test_unmapped_extension_writes_nothing(self, batch, tmp_path):
        files = {str(tmp_path / "a.txt"): "x", str(tmp_path / "b.csv"): "y"}
        with pytest.raises(ConfigurationError):
            batch.write_many(files, tolerate_partial_failures=True)
        assert not (tmp_path / "a.txt").exists()

    def test_invalid_option_raises(self, batch, tmp_path):
        with pytest.raises(ConfigurationError):
            batch.write_many({str(tmp_path / "a.txt"): "x"}, option="truncate")

    def test_tolerant_reports_false(self, batch, write_file, tmp_path):
        existing = write_file("exists.txt", "keep")
        fresh = tmp_path / "fresh.txt"
        ok = batch.write_many(
            {str(existing): "new", str(fresh): "new"},
            option="create_new",
            tolerate_partial_failures=True,
        )
        assert ok is False
        assert existing.read_text(encoding="utf-8") == "keep"
        assert fresh.read_text(encoding="utf-8") == "new"

    def test_strict_raises(self, batch, write_file, tmp_path):
        existing = str(write_file("exists.txt", "keep"))
        with pytest.raises(BatchAggregateError) as exc_info:
            batch.write_many({existing: "new", str(tmp_path / "b.txt"): "x"}, option="create_new")
        assert list(exc_info.value.failures) == [existing]
        assert (tmp_path / "b.txt").read_text(encoding="utf-8") == "x"

    def test_bad_content_is_a_member_failure(self, batch, tmp_path):
        ok = batch.write_many({str(tmp_path / "a.txt"): 42}, tolerate_partial_failures=True)
        assert ok is False


class TestBatchSummary:
    def test_rates_and_duration(self):
        summary = BatchSummary(batch_id="b1", operation="read", total=4, succeeded=3, failed=1)
        assert summary.success_rate == 75.0
        assert summary.duration_seconds is None

        summary.completed_at = summary.started_at + timedelta(seconds=2)
        assert summary.duration_seconds == 2.0

    def test_to_dict(self):
        summary = BatchSummary(batch_id="b1", operation="write", total=0)
        payload = summary.to_dict()
        assert payload["success_rate"] == 0.0
        assert payload["completed_at"] is None
        assert payload["operation"] == "write"


class TestBatchLogContext:
    """Worker-side events carry the batch_id bound on the caller thread."""

    @staticmethod
    def _events(entries, name):
        return [entry for entry in entries if entry["event"] == name]

    def test_read_events_carry_batch_id(self, log_entries, full_registry, write_file):
        path = str(write_file("a.txt", "A"))

        with worker_pool(max_workers=2) as pool:
            BatchOrchestrator(pool, full_registry).read_many_blocking({path: str})

        (start,) = self._events(log_entries, "batch_read.start")
        batch_id = start["batch_id"]
        for name in ["file_read.start", "file_read.complete", "file_operation.succeeded"]:
            (entry,) = self._events(log_entries, name)
            assert entry["batch_id"] == batch_id, name

    def test_write_events_carry_batch_id(self, log_entries, full_registry, tmp_path):
        with worker_pool(max_workers=2) as pool:
            BatchOrchestrator(pool, full_registry).write_many({str(tmp_path / "a.txt"): "A"})

        (start,) = self._events(log_entries, "batch_write.start")
        (complete,) = self._events(log_entries, "file_write.complete")
        assert complete["batch_id"] == start["batch_id"]

    def test_context_does_not_leak_after_batch(self, log_entries, full_registry, write_file):
        path = str(write_file("a.txt", "A"))
        with worker_pool(max_workers=1) as pool:
            BatchOrchestrator(pool, full_registry).read_many_blocking({path: str})
        assert structlog.contextvars.get_contextvars() == {}
