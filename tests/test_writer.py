"""Tests for seedbed.writer."""

import sqlite3
import threading
from concurrent.futures import Future

import pytest

from seedbed.exceptions import WriteFailed
from seedbed.writer import BackgroundWriter, combine


def fail(message="disk I/O error"):
    raise sqlite3.OperationalError(message)


class TestBackgroundWriter:
    """Tests for BackgroundWriter."""

    def test_submit_returns_result_future(self, writer):
        future = writer.submit("add", lambda a, b: a + b, 2, 3)

        assert future.result(timeout=5) == 5

    def test_runs_off_caller_thread(self, writer):
        future = writer.submit("thread", threading.current_thread)

        assert future.result(timeout=5) is not threading.current_thread()

    def test_writes_run_in_submission_order(self, writer):
        seen = []
        for n in range(50):
            writer.submit("append", seen.append, n)

        assert writer.flush(timeout=5) is True
        assert seen == list(range(50))

    def test_failure_is_recorded_not_raised(self, writer):
        """A failed write resolves its future with the error and is recorded."""
        future = writer.submit("insert_area", fail)

        assert isinstance(future.exception(timeout=5), sqlite3.OperationalError)
        assert len(writer.failures) == 1
        failure = writer.failures[0]
        assert isinstance(failure, WriteFailed)
        assert failure.operation == "insert_area"
        assert isinstance(failure.error, sqlite3.OperationalError)

    def test_failure_is_logged(self, writer, caplog):
        with caplog.at_level("ERROR", logger="seedbed.writer"):
            writer.submit("delete_plant", fail).exception(timeout=5)

        assert "delete_plant" in caplog.text

    def test_failure_listener_called(self, writer):
        received = []
        writer.add_failure_listener(received.append)

        writer.submit("update_area", fail).exception(timeout=5)

        assert [f.operation for f in received] == ["update_area"]

    def test_removed_listener_not_called(self, writer):
        received = []
        remove = writer.add_failure_listener(received.append)
        remove()

        writer.submit("update_area", fail).exception(timeout=5)

        assert received == []

    def test_raising_listener_does_not_stop_others(self, writer):
        received = []

        def broken(_):
            raise RuntimeError("listener bug")

        writer.add_failure_listener(broken)
        writer.add_failure_listener(received.append)

        writer.submit("insert_plant", fail).exception(timeout=5)

        assert len(received) == 1

    def test_later_writes_run_after_failure(self, writer):
        writer.submit("first", fail)
        future = writer.submit("second", lambda: "ok")

        assert future.result(timeout=5) == "ok"

    def test_flush_when_idle(self, writer):
        assert writer.flush() is True
        assert writer.pending == 0

    def test_flush_times_out_on_blocked_write(self, writer):
        release = threading.Event()
        writer.submit("blocked", release.wait)

        assert writer.flush(timeout=0.05) is False

        release.set()
        assert writer.flush(timeout=5) is True

    def test_submit_after_shutdown_is_recorded_not_raised(self):
        background = BackgroundWriter()
        background.shutdown()
        ran = []

        future = background.submit("late", ran.append, 1)

        assert isinstance(future.exception(timeout=5), RuntimeError)
        assert ran == []
        assert [f.operation for f in background.failures] == ["late"]
        assert background.pending == 0


class TestCombine:
    """Tests for combine()."""

    def test_results_in_order(self):
        first, second = Future(), Future()
        combined = combine([first, second])

        second.set_result("b")
        assert not combined.done()
        first.set_result("a")

        assert combined.result(timeout=1) == ["a", "b"]

    def test_first_exception_wins(self):
        first, second = Future(), Future()
        combined = combine([first, second])

        first.set_result("a")
        second.set_exception(ValueError("bad"))

        with pytest.raises(ValueError, match="bad"):
            combined.result(timeout=1)

    def test_empty(self):
        assert combine([]).result(timeout=1) == []
