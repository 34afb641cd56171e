# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
"""Thread-safe futures and promises with callbacks, cooperative cancellation and combinators."""

from futurekit.combinators import (
    combine,
    combine_no_short_circuit,
    combine_no_short_circuit_with_token,
    combine_with_token,
    flat_map,
    flat_map_with_token,
    map_future,
    map_future_with_token,
)
from futurekit.config import FutureConfig, get_config, set_config
from futurekit.errors import (
    CancelledError,
    CombinedError,
    DeadlineExceededError,
    InvalidFutureError,
    PanicError,
    error_chain,
    has_error,
)
from futurekit.executor import (
    DEFAULT_EXECUTOR,
    Executor,
    PoolExecutor,
    ThreadExecutor,
    run,
    run_with_executor,
    run_with_token,
)
from futurekit.future import Future, completed, new, new_error
from futurekit.logging import configure_structlog
from futurekit.promise import Promise
from futurekit.result import Result
from futurekit.spawn import spawn, spawn_with_error, spawn_with_token, spawn_with_token_and_error
from futurekit.stream import ResultStream, StreamClosedError
from futurekit.token import CancellationToken

__all__ = [
    "CancellationToken",
    "CancelledError",
    "CombinedError",
    "DEFAULT_EXECUTOR",
    "DeadlineExceededError",
    "Executor",
    "Future",
    "FutureConfig",
    "InvalidFutureError",
    "PanicError",
    "PoolExecutor",
    "Promise",
    "Result",
    "ResultStream",
    "StreamClosedError",
    "ThreadExecutor",
    "combine",
    "combine_no_short_circuit",
    "combine_no_short_circuit_with_token",
    "combine_with_token",
    "completed",
    "configure_structlog",
    "error_chain",
    "flat_map",
    "flat_map_with_token",
    "get_config",
    "has_error",
    "map_future",
    "map_future_with_token",
    "new",
    "new_error",
    "run",
    "run_with_executor",
    "run_with_token",
    "set_config",
    "spawn",
    "spawn_with_error",
    "spawn_with_token",
    "spawn_with_token_and_error",
]
