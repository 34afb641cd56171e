# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import queue
import threading
from typing import Generic, Iterator, Optional

from futurekit.result import Result
from futurekit.types import T


class StreamClosedError(Exception):
    """The single result of a stream was already consumed."""


_CLOSED = object()


class ResultStream(Generic[T]):
    """
    A buffered stream carrying exactly one `Result` and then closing.

    Only the first `send` is delivered. `send` never blocks.
    """

    __slots__ = ("_queue", "_lock", "_sent")

    def __init__(self):
        # Room for the result and the close marker.
        self._queue: queue.Queue = queue.Queue(maxsize=2)
        self._lock = threading.Lock()
        self._sent = False

    def send(self, result: Result[T]) -> bool:
        with self._lock:
            if self._sent:
                return False
            self._sent = True
            self._queue.put_nowait(result)
            self._queue.put_nowait(_CLOSED)
        return True

    def get(self, timeout: Optional[float] = None) -> Result[T]:
        """
        Take the result, waiting for it if necessary.

        Raises:
            queue.Empty: If the timeout elapsed before a result arrived.
            StreamClosedError: If the result was already taken.
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Keep the marker for other readers.
            self._queue.put_nowait(_CLOSED)
            raise StreamClosedError("stream already delivered its result")
        return item

    def qsize(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        """Whether the result was taken."""
        # Once taken, only the close marker is left.
        return self._sent and self._queue.qsize() <= 1

    def __iter__(self) -> Iterator[Result[T]]:
        while True:
            try:
                yield self.get()
            except StreamClosedError:
                return
