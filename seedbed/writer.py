"""Background writes for the garden and settings stores.

Mutations update in-memory state first and hand the matching durable write
to a BackgroundWriter. The caller gets a Future back and never waits on it.

ORDERING:
The default single worker runs writes strictly in submission order, so an
area insert always reaches the database before a plant insert that
references it.

FAILURES:
A failed write is logged, recorded as a WriteFailed on `failures` and passed
to every failure listener. The Future resolves with the original exception.
Writes are never retried.
"""

from __future__ import annotations

import logging
import threading
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Sequence

from .exceptions import WriteFailed

logger = logging.getLogger(__name__)

FailureListener = Callable[[WriteFailed], None]


class BackgroundWriter:
    """Runs durable writes off the caller's thread."""

    def __init__(self, max_workers: int = 1, thread_name_prefix: str = "seedbed-writer"):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )
        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._listeners: list[FailureListener] = []
        self.failures: list[WriteFailed] = []

    def submit(self, operation: str, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue fn(*args) as the durable write named `operation`.

        Args:
            operation: Name used in logs and failure records
            fn: Callable performing the write
            *args: Positional arguments for fn

        Returns:
            Future resolving to fn's result, or to its exception. After
            shutdown() the write is not run and the Future already holds
            the RuntimeError, recorded like any other failure.
        """
        logger.debug("Dispatching write %s", operation)
        with self._lock:
            try:
                future = self._executor.submit(self._run, operation, fn, args)
            except RuntimeError as e:
                future = None
                rejected = e
            else:
                self._pending.add(future)

        if future is None:
            logger.error("Background write %s rejected: %s", operation, rejected)
            self._record_failure(WriteFailed(operation, rejected))
            future = Future()
            future.set_exception(rejected)
            return future

        future.add_done_callback(self._discard)
        return future

    def _run(self, operation: str, fn: Callable[..., Any], args: tuple) -> Any:
        try:
            return fn(*args)
        except Exception as e:
            logger.error("Background write %s failed: %s", operation, e, exc_info=True)
            self._record_failure(WriteFailed(operation, e))
            raise

    def _record_failure(self, failure: WriteFailed) -> None:
        with self._lock:
            self.failures.append(failure)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(failure)
            except Exception:
                logger.exception("Write failure listener raised for %s", failure.operation)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def add_failure_listener(self, listener: FailureListener) -> Callable[[], None]:
        """Register a callback for failed writes.

        Returns:
            A function that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every write submitted so far has finished.

        Returns:
            True if all writes finished, False if timeout expired first
        """
        with self._lock:
            outstanding = list(self._pending)
        if not outstanding:
            return True
        _, not_done = futures.wait(outstanding, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting writes; optionally wait for queued ones."""
        self._executor.shutdown(wait=wait)


def combine(fs: Sequence[Future]) -> Future:
    """Future that completes once every future in fs has.

    Resolves to the list of results in order, or to the first exception
    found in that order.
    """
    combined: Future = Future()
    remaining = len(fs)
    lock = threading.Lock()

    def on_done(_: Future) -> None:
        nonlocal remaining
        with lock:
            remaining -= 1
            if remaining:
                return
        for f in fs:
            error = f.exception()
            if error is not None:
                combined.set_exception(error)
                return
        combined.set_result([f.result() for f in fs])

    if not fs:
        combined.set_result([])
    for f in fs:
        f.add_done_callback(on_done)
    return combined
