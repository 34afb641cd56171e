# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import functools
import threading
import time
import weakref
from typing import Callable, Optional

from futurekit.errors import CancelledError, DeadlineExceededError
from futurekit.logging import get_logger

logger = get_logger(__name__)


def _noop() -> None:
    pass


def _cancel_child(child_ref: "weakref.ref[CancellationToken]", parent: "CancellationToken") -> None:
    child = child_ref()
    if child is not None:
        child._cancel(parent.error())


class CancellationToken:
    """
    Cooperative cancellation signal with an optional deadline.

    A token is cancelled at most once, either explicitly via `cancel()`, by its deadline, or by its
    parent. Cancelling never interrupts running code: operations have to observe the token
    (`is_cancelled()`, `wait()`, `raise_if_cancelled()`) and stop on their own.

    Child tokens are cancelled together with their parent and carry the parent's error. Cancelling a
    child does not affect the parent.
    """

    __slots__ = (
        "__weakref__",
        "_lock",
        "_event",
        "_error",
        "_hooks",
        "_next_hook_id",
        "_parent",
        "_parent_unregister",
        "_deadline",
        "_timer",
    )

    _error: Optional[CancelledError]
    _hooks: dict[int, Callable[[], None]]
    _parent_unregister: Optional[Callable[[], None]]
    _deadline: Optional[float]
    _timer: Optional[threading.Timer]

    def __init__(
        self, *, parent: Optional["CancellationToken"] = None, timeout: Optional[float] = None
    ):
        """
        Args:
            parent: If given, this token is cancelled when the parent is cancelled.
            timeout: Seconds after which the token is cancelled with a `DeadlineExceededError`.
        """
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._error = None
        self._hooks = {}
        self._next_hook_id = 0
        self._parent = parent
        self._parent_unregister = None
        self._deadline = None
        self._timer = None

        if timeout is not None:
            self._deadline = time.monotonic() + max(timeout, 0.0)
        if parent is not None:
            if parent._deadline is not None and (
                self._deadline is None or parent._deadline < self._deadline
            ):
                # The parent's timer cancels us at its deadline.
                self._deadline = parent._deadline
                timeout = None
            unregister = parent.on_cancel(
                functools.partial(_cancel_child, weakref.ref(self), parent)
            )
            with self._lock:
                if self._error is None:
                    self._parent_unregister = unregister
            # Drop the parent's hook once this token is garbage collected.
            weakref.finalize(self, unregister)

        if timeout is not None and self._error is None:
            if timeout <= 0:
                self._expire()
            else:
                timer = threading.Timer(timeout, self._expire)
                timer.daemon = True
                with self._lock:
                    if self._error is None:
                        self._timer = timer
                        timer.start()

    @property
    def deadline(self) -> Optional[float]:
        """The `time.monotonic()` timestamp at which the token expires, if any."""
        return self._deadline

    def child(self, timeout: Optional[float] = None) -> "CancellationToken":
        """Create a token that is cancelled together with this one."""
        return CancellationToken(parent=self, timeout=timeout)

    def cancel(self) -> None:
        """Cancel the token. Subsequent calls have no effect."""
        self._cancel(CancelledError.with_current_traceback("operation was cancelled"))

    def _expire(self) -> None:
        self._cancel(DeadlineExceededError.with_current_traceback("deadline exceeded"))

    def _cancel(self, error: Optional[CancelledError]) -> bool:
        if error is None:
            error = CancelledError("operation was cancelled")
        with self._lock:
            if self._error is not None:
                return False
            self._error = error
            self._event.set()
            hooks = list(self._hooks.values())
            self._hooks.clear()
            timer, self._timer = self._timer, None
            unregister, self._parent_unregister = self._parent_unregister, None
        if timer is not None:
            timer.cancel()
        if unregister is not None:
            unregister()
        for hook in hooks:
            try:
                hook()
            except Exception as e:
                # Remaining hooks still have to run, e.g. to wake up waiters.
                logger.error("cancellation hook failed", error=e, hook=hook)
        return True

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def error(self) -> Optional[CancelledError]:
        """The cancellation error, or `None` while the token is live."""
        return self._error

    def raise_if_cancelled(self) -> None:
        err = self._error
        if err is not None:
            raise err

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the token is cancelled. Returns False if the timeout elapsed first."""
        return self._event.wait(timeout)

    def on_cancel(self, fn: Callable[[], None]) -> Callable[[], None]:
        """
        Run `fn` once the token is cancelled. If it already is, `fn` runs right away on the calling
        thread. Otherwise it runs on the thread that cancels the token.

        Returns:
            A function that removes the hook again. Calling it after the hook ran has no effect.
        """
        with self._lock:
            if self._error is None:
                hook_id = self._next_hook_id
                self._next_hook_id += 1
                self._hooks[hook_id] = fn
                return functools.partial(self._remove_hook, hook_id)
        fn()
        return _noop

    def _remove_hook(self, hook_id: int) -> None:
        with self._lock:
            self._hooks.pop(hook_id, None)

    def __repr__(self) -> str:
        err = self._error
        state = "live" if err is None else type(err).__name__
        return f"CancellationToken(state={state}, deadline={self._deadline!r})"
