# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import threading
from typing import Any, Callable, Generic, Optional

from futurekit.callbacks import TokenCallback, invoke_callback, invoke_token_callback
from futurekit.promise import Promise
from futurekit.result import Result
from futurekit.stream import ResultStream
from futurekit.token import CancellationToken
from futurekit.types import CancelFn, T


class Future(Generic[T]):
    """
    Read side of an eventually available `Result`.

    A future is fulfilled exactly once through its `Promise`. After that, the result never changes,
    every blocked reader is woken up and every registered callback runs once on its own thread.
    Futures are thread-safe and may be shared freely. Create them with `new()`.
    """

    __slots__ = (
        "_lock",
        "_done",
        "_result",
        "_promise",
        "_waiters",
        "_success_callbacks",
        "_error_callbacks",
        "_result_callbacks",
        "_success_token_callbacks",
        "_error_token_callbacks",
        "_result_token_callbacks",
    )

    _result: Optional[Result[T]]
    _promise: Optional[Promise[T]]
    _waiters: list[threading.Event]
    _success_callbacks: list[Callable[[T], Any]]
    _error_callbacks: list[Callable[[Exception], Any]]
    _result_callbacks: list[Callable[[Result[T]], Any]]
    _success_token_callbacks: list[TokenCallback[T]]
    _error_token_callbacks: list[TokenCallback[Exception]]
    _result_token_callbacks: list[TokenCallback[Result[T]]]

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._result = None
        self._promise = None
        self._waiters = []
        self._success_callbacks = []
        self._error_callbacks = []
        self._result_callbacks = []
        self._success_token_callbacks = []
        self._error_token_callbacks = []
        self._result_token_callbacks = []

    def done(self) -> bool:
        return self._done.is_set()

    def get_result(self, token: Optional[CancellationToken] = None) -> Result[T]:
        """
        Wait for the future and return its result.

        Args:
            token: Stop waiting once this token is cancelled and return its error instead. This only
                ends this wait, the future itself is not affected. `None` waits without limit.
        """
        if self._done.is_set():
            return self._result  # type: ignore[return-value]
        if token is None:
            self._done.wait()
            return self._result  # type: ignore[return-value]

        waiter = threading.Event()
        with self._lock:
            if self._result is not None:
                return self._result
            self._waiters.append(waiter)
        unregister = token.on_cancel(waiter.set)
        try:
            waiter.wait()
        finally:
            unregister()
            with self._lock:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
        if self._done.is_set():
            return self._result  # type: ignore[return-value]
        return Result(error=token.error())

    def get(self, token: Optional[CancellationToken] = None) -> T:
        """Wait for the future and return its value, or raise its error."""
        return self.get_result(token).unwrap()

    def to_stream(self, token: Optional[CancellationToken] = None) -> ResultStream[T]:
        """
        Deliver the result through a single item stream.
        With a token, the token's error is delivered instead if it fires first.
        """
        stream: ResultStream[T] = ResultStream()
        if self._done.is_set():
            stream.send(self._result)  # type: ignore[arg-type]
            return stream

        unregister: Optional[Callable[[], None]] = None
        if token is not None:
            unregister = token.on_cancel(lambda: stream.send(Result(error=token.error())))

        def _feed(result: Result[T]) -> None:
            stream.send(result)
            if unregister is not None:
                unregister()

        self.on_result(_feed)
        return stream

    def cancel(self) -> None:
        """
        Request cancellation of the operation behind this future by running the cleanup functions of
        its promise, at most once. The operation is not interrupted and may still complete.
        """
        promise = self._promise
        if promise is not None:
            promise._cancel()

    def _register(self, callbacks: list, entry: Any) -> Optional[Result[T]]:
        # Returns the result if already fulfilled, so the caller fires the entry right away.
        with self._lock:
            if self._result is None:
                callbacks.append(entry)
                return None
            return self._result

    def on_success(self, callback: Optional[Callable[[T], Any]]) -> None:
        """Call `callback(value)` on a separate thread if the future succeeds."""
        if callback is None:
            return
        result = self._register(self._success_callbacks, callback)
        if result is not None and result.error is None:
            invoke_callback("on_success", callback, result.value)

    def on_error(self, callback: Optional[Callable[[Exception], Any]]) -> None:
        """Call `callback(error)` on a separate thread if the future fails."""
        if callback is None:
            return
        result = self._register(self._error_callbacks, callback)
        if result is not None and result.error is not None:
            invoke_callback("on_error", callback, result.error)

    def on_result(self, callback: Optional[Callable[[Result[T]], Any]]) -> None:
        """Call `callback(result)` on a separate thread once the future is fulfilled."""
        if callback is None:
            return
        result = self._register(self._result_callbacks, callback)
        if result is not None:
            invoke_callback("on_result", callback, result)

    def on_success_with_token(
        self,
        token: Optional[CancellationToken],
        callback: Optional[Callable[[CancellationToken, T], Any]],
    ) -> None:
        """
        Like `on_success`, but calls `callback(child_token, value)`. The child token derives from
        `token` and is cancelled when the callback returns.
        """
        if callback is None:
            return
        entry = TokenCallback(token=token, callback=callback)
        result = self._register(self._success_token_callbacks, entry)
        if result is not None and result.error is None:
            invoke_token_callback("on_success_with_token", entry, result.value)

    def on_error_with_token(
        self,
        token: Optional[CancellationToken],
        callback: Optional[Callable[[CancellationToken, Exception], Any]],
    ) -> None:
        if callback is None:
            return
        entry = TokenCallback(token=token, callback=callback)
        result = self._register(self._error_token_callbacks, entry)
        if result is not None and result.error is not None:
            invoke_token_callback("on_error_with_token", entry, result.error)

    def on_result_with_token(
        self,
        token: Optional[CancellationToken],
        callback: Optional[Callable[[CancellationToken, Result[T]], Any]],
    ) -> None:
        if callback is None:
            return
        entry = TokenCallback(token=token, callback=callback)
        result = self._register(self._result_token_callbacks, entry)
        if result is not None:
            invoke_token_callback("on_result_with_token", entry, result)

    def _fulfill(self, result: Result[T]) -> bool:
        with self._lock:
            if self._result is not None:
                return False
            # Callbacks registered up to here are in the snapshot, later ones see the result.
            self._result = result
            self._done.set()
            waiters, self._waiters = self._waiters, []
            success, self._success_callbacks = self._success_callbacks, []
            errors, self._error_callbacks = self._error_callbacks, []
            results, self._result_callbacks = self._result_callbacks, []
            success_tok, self._success_token_callbacks = self._success_token_callbacks, []
            errors_tok, self._error_token_callbacks = self._error_token_callbacks, []
            results_tok, self._result_token_callbacks = self._result_token_callbacks, []

        for waiter in waiters:
            waiter.set()

        for callback in results:
            invoke_callback("on_result", callback, result)
        for entry in results_tok:
            invoke_token_callback("on_result_with_token", entry, result)
        if result.error is None:
            for callback in success:
                invoke_callback("on_success", callback, result.value)
            for entry in success_tok:
                invoke_token_callback("on_success_with_token", entry, result.value)
        else:
            for callback in errors:
                invoke_callback("on_error", callback, result.error)
            for entry in errors_tok:
                invoke_token_callback("on_error_with_token", entry, result.error)
        return True

    def __repr__(self) -> str:
        result = self._result
        if result is None:
            state = "pending"
        elif result.error is None:
            state = "success"
        else:
            state = f"failure({type(result.error).__name__})"
        return f"Future(state={state})"


def new(*cancel_fns: CancelFn) -> tuple[Future[T], Promise[T]]:
    """
    Create a pending future and the promise that fulfills it.

    Args:
        cancel_fns: Cleanup functions run once when `Future.cancel()` is first called.
    """
    future: Future[T] = Future()
    promise = Promise(future, cancel_fns)
    future._promise = promise
    return future, promise


def new_error(error: Exception) -> Future[Any]:
    """A future that already failed with `error`."""
    future, promise = new()
    promise.failure(error)
    return future


def completed(value: T) -> Future[T]:
    """A future that already succeeded with `value`."""
    future: Future[T] = Future()
    future._fulfill(Result(value=value))
    return future
