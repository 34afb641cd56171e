# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import threading
from typing import TYPE_CHECKING, Generic, Optional, Sequence

from futurekit.logging import get_logger
from futurekit.result import Result
from futurekit.types import CancelFn, T

if TYPE_CHECKING:
    from futurekit.future import Future

logger = get_logger(__name__)


class Promise(Generic[T]):
    """
    The write side of a `Future`.

    Only the first of `success`, `failure` and `complete` has an effect, later calls are ignored.
    A promise should have a single owner, while its future can be shared freely.
    """

    __slots__ = ("_future", "_cancel_lock", "_cancelled", "_cancel_fns")

    _future: "Future[T]"
    _cancelled: bool
    _cancel_fns: tuple[CancelFn, ...]

    def __init__(self, future: "Future[T]", cancel_fns: Sequence[CancelFn] = ()):
        self._future = future
        self._cancel_lock = threading.Lock()
        self._cancelled = False
        self._cancel_fns = tuple(fn for fn in cancel_fns if fn is not None)

    def success(self, value: T) -> None:
        self._future._fulfill(Result(value=value))

    def failure(self, error: Exception) -> None:
        self._future._fulfill(Result(error=error))

    def complete(self, value: Optional[T], error: Optional[Exception]) -> None:
        """Fail if `error` is set, otherwise succeed with `value`."""
        if error is not None:
            self.failure(error)
        else:
            self.success(value)  # type: ignore[arg-type]

    def is_cancelled(self) -> bool:
        """Whether `cancel` was requested. Independent of whether the future is fulfilled."""
        return self._cancelled

    def _cancel(self) -> None:
        # Check-and-set under the lock, the cleanup functions run outside of it exactly once.
        with self._cancel_lock:
            if self._cancelled:
                return
            self._cancelled = True
        logger.debug("promise cancelled", future=self._future, cleanups=len(self._cancel_fns))
        for fn in self._cancel_fns:
            try:
                fn()
            except Exception as e:
                # The remaining cleanups still have to run, a second cancel() will not retry them.
                logger.error("cancel function failed", error=e, cancel_fn=fn)

    def __repr__(self) -> str:
        return f"Promise(future={self._future!r}, cancelled={self._cancelled!r})"
