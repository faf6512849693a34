"""
Progress reporting and cooperative cancellation for analysis passes.

The clustering pass talks to a ``ProgressReporter`` only. Whether the values
end up in a plain callback (CLI) or in a ``ProgressChannel`` drained by another
thread (GUI, async callers) is decided by whoever builds the reporter.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .errors import AnalysisCancelled

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """
    Forward completion fractions to a callback.

    Values are clamped to [0, 1] and regressions are dropped, so observers
    always see a non-decreasing sequence within one run. There is no promise
    of a final 1.0; completion of the analysis call is authoritative.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback
        self._last = 0.0
        self._emitted = False

    @property
    def last(self) -> float:
        return self._last

    def report(self, fraction: float) -> None:
        if self._callback is None:
            return
        fraction = min(1.0, max(0.0, fraction))
        if self._emitted and fraction < self._last:
            return
        self._last = fraction
        self._emitted = True
        self._callback(fraction)


@dataclass(frozen=True)
class ProgressEvent:
    fraction: float


_CLOSED = object()


class ProgressChannel:
    """
    Bounded single-producer channel of progress events.

    The producer never blocks: when the buffer is full the oldest pending
    event is discarded, since only the most recent fraction matters. The
    consumer iterates until the producer calls ``close()``.
    """

    def __init__(self, maxsize: int = 64) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    def offer(self, fraction: float) -> None:
        if self._closed.is_set():
            return
        self._force_put(ProgressEvent(fraction))

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._force_put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def get(self, timeout: Optional[float] = None) -> Optional[ProgressEvent]:
        """Next event, or None once the channel is closed and drained.

        Raises:
            queue.Empty: If *timeout* elapses with nothing to read
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Keep the marker visible for any other reader.
            self._force_put(_CLOSED)
            return None
        return item

    def __iter__(self) -> Iterator[ProgressEvent]:
        while True:
            event = self.get()
            if event is None:
                return
            yield event

    def _force_put(self, item: object) -> None:
        while True:
            try:
                self._queue.put_nowait(item)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a pass."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis was cancelled")
