# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
"""Fire-and-forget launchers. Failures are logged, never raised to the caller."""

from typing import Any, Callable, Optional

from futurekit.executor import run, run_with_token
from futurekit.future import Future
from futurekit.logging import get_logger, log_suppressed
from futurekit.token import CancellationToken

logger = get_logger(__name__)


def _log_errors(future: Future[Any], name: str) -> None:
    future.on_error(lambda err: log_suppressed(logger, "error", f"futurekit.{name}", error=err))


def _discard(_: Any) -> None:
    return None


def _raise_returned(err: Optional[Exception]) -> None:
    if err is not None:
        raise err


def spawn(fn: Callable[[], Any]) -> None:
    """Run `fn` on a separate thread. Its return value is ignored, errors are logged."""
    _log_errors(run(lambda: _discard(fn())), "spawn")


def spawn_with_token(
    token: Optional[CancellationToken], fn: Callable[[CancellationToken], Any]
) -> None:
    """Run `fn(token)` on a separate thread, like `spawn`. The token is passed as a child token."""
    _log_errors(run_with_token(token, lambda tok: _discard(fn(tok))), "spawn_with_token")


def spawn_with_error(fn: Callable[[], Optional[Exception]]) -> None:
    """Run `fn` on a separate thread. A returned or raised error is logged."""
    _log_errors(run(lambda: _raise_returned(fn())), "spawn_with_error")


def spawn_with_token_and_error(
    token: Optional[CancellationToken], fn: Callable[[CancellationToken], Optional[Exception]]
) -> None:
    _log_errors(
        run_with_token(token, lambda tok: _raise_returned(fn(tok))),
        "spawn_with_token_and_error",
    )
