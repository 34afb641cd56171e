# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import itertools
import threading
from typing import Any, Callable, Generic, Optional

from futurekit.config import FutureConfig, get_config
from futurekit.errors import PanicError
from futurekit.logging import get_logger, log_suppressed
from futurekit.token import CancellationToken
from futurekit.types import T, edataclass

logger = get_logger(__name__)

_thread_counter = itertools.count()


@edataclass
class TokenCallback(Generic[T]):
    """A token-aware callback together with the token given at registration time."""

    token: Optional[CancellationToken]
    callback: Callable[[CancellationToken, T], Any]


def start_thread(
    target: Callable[[], None], kind: str, config: Optional[FutureConfig] = None
) -> threading.Thread:
    """Start a thread named after the configured prefix for one operation or callback."""
    if config is None:
        config = get_config()
    thread = threading.Thread(
        target=target,
        name=f"{config.thread_name_prefix}-{kind}-{next(_thread_counter)}",
        daemon=config.daemon_threads,
    )
    thread.start()
    return thread


def _log_panic(kind: str, exc: BaseException) -> None:
    log_suppressed(
        logger,
        "error",
        f"panic encountered in future.{kind} callback",
        error=PanicError.from_exception(exc),
    )


def invoke_callback(kind: str, callback: Optional[Callable[[T], Any]], value: T) -> None:
    """
    Run a callback on its own thread.
    Anything raised by the callback is logged and dropped.

    Args:
        kind: Name of the registration method, used for logging.
        callback: The callback. `None` is ignored.
        value: The argument to pass.
    """
    if callback is None:
        return

    def _run() -> None:
        try:
            callback(value)
        except BaseException as e:
            _log_panic(kind, e)

    start_thread(_run, "callback")


def invoke_token_callback(kind: str, entry: TokenCallback[T], value: T) -> None:
    """
    Like `invoke_callback`, but passes a child of the registered token. The child is cancelled once the
    callback returns, without affecting the registered token.
    """
    if entry.callback is None:
        return
    callback = entry.callback
    parent = entry.token

    def _run() -> None:
        token = parent.child() if parent is not None else CancellationToken()
        try:
            callback(token, value)
        except BaseException as e:
            _log_panic(kind, e)
        finally:
            token.cancel()

    start_thread(_run, "callback")
