# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from futurekit.callbacks import start_thread
from futurekit.config import FutureConfig, get_config
from futurekit.errors import PanicError, is_panic
from futurekit.future import Future, new
from futurekit.promise import Promise
from futurekit.token import CancellationToken
from futurekit.types import T


def complete_from(promise: Promise[T], fn: Callable[..., T], *args: Any) -> None:
    """
    Call `fn(*args)` and complete the promise with its outcome.

    A raised `Exception` becomes the failure as is. Anything else raised (e.g. `SystemExit`) is
    converted into a `PanicError` carrying the stack trace, so the raising thread never dies with
    the promise left pending.
    """
    try:
        value = fn(*args)
    except BaseException as e:
        promise.failure(PanicError.from_exception(e) if is_panic(e) else e)
    else:
        promise.success(value)


class Executor(ABC):
    """
    Strategy for starting an operation and binding its outcome to a promise.

    Implementations must complete the promise exactly once, must not let anything raised by the
    operation escape, and should respect the token of `start_with_token`.
    """

    @abstractmethod
    def start(self, promise: Promise[T], fn: Callable[[], T]) -> None: ...

    @abstractmethod
    def start_with_token(
        self,
        token: CancellationToken,
        promise: Promise[T],
        fn: Callable[[CancellationToken], T],
    ) -> None: ...


class ThreadExecutor(Executor):
    """Runs every operation on a new thread. This is the default strategy."""

    def __init__(self, config: Optional[FutureConfig] = None):
        """
        Args:
            config: Thread naming and daemon settings. Defaults to the process config at start time.
        """
        self._config = config

    def start(self, promise: Promise[T], fn: Callable[[], T]) -> None:
        start_thread(lambda: complete_from(promise, fn), "worker", self._config)

    def start_with_token(
        self,
        token: CancellationToken,
        promise: Promise[T],
        fn: Callable[[CancellationToken], T],
    ) -> None:
        # The operation starts even if the token is already cancelled, it has to check the token itself.
        start_thread(lambda: complete_from(promise, fn, token), "worker", self._config)


class PoolExecutor(Executor):
    """
    Runs operations on a bounded thread pool.

    Operations beyond `max_workers` are queued. A queued token-aware operation whose token fires before
    it gets a thread is failed with the token's error instead of being run.
    """

    def __init__(self, max_workers: int, config: Optional[FutureConfig] = None):
        if config is None:
            config = get_config()
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=f"{config.thread_name_prefix}-pool"
        )

    def start(self, promise: Promise[T], fn: Callable[[], T]) -> None:
        self._submit(promise, complete_from, promise, fn)

    def start_with_token(
        self,
        token: CancellationToken,
        promise: Promise[T],
        fn: Callable[[CancellationToken], T],
    ) -> None:
        def _run() -> None:
            err = token.error()
            if err is not None:
                promise.failure(err)
            else:
                complete_from(promise, fn, token)

        self._submit(promise, _run)

    def _submit(self, promise: Promise[Any], fn: Callable[..., None], *args: Any) -> None:
        try:
            self._pool.submit(fn, *args)
        except RuntimeError as e:
            # Pool was shut down.
            promise.failure(e)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "PoolExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


DEFAULT_EXECUTOR: Executor = ThreadExecutor()


def run(fn: Callable[[], T], *, executor: Optional[Executor] = None) -> Future[T]:
    """
    Run `fn` concurrently and return a future for its outcome.

    Args:
        fn: The operation. It fails by raising.
        executor: How to run it. Defaults to a new thread per operation.
    """
    future, promise = new()
    (executor or DEFAULT_EXECUTOR).start(promise, fn)
    return future


def run_with_token(
    token: Optional[CancellationToken],
    fn: Callable[[CancellationToken], T],
    *,
    executor: Optional[Executor] = None,
) -> Future[T]:
    """
    Run `fn(child_token)` concurrently and return a future for its outcome.

    The child token is cancelled when `token` is, when the returned future is cancelled, and once the
    operation returned. `None` runs the operation with a fresh root token.
    """
    child = token.child() if token is not None else CancellationToken()
    future, promise = new(child.cancel)

    def _body(tok: CancellationToken) -> T:
        try:
            return fn(tok)
        finally:
            child.cancel()

    (executor or DEFAULT_EXECUTOR).start_with_token(child, promise, _body)
    return future


def run_with_executor(executor: Executor, fn: Callable[[], T]) -> Future[T]:
    return run(fn, executor=executor)
