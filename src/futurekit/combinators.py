# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
"""
Combinators building new futures out of existing ones.

Each combinator owns a private promise and drives it from a task started through the given executor
(a new thread by default). The task blocks on the input futures, so errors of the inputs are
propagated unchanged. Token-aware variants stop waiting once the token fires and fail with the
token's error. Nothing here cancels the input futures.
"""

from typing import Any, Callable, Optional

from futurekit.errors import CombinedError, InvalidFutureError
from futurekit.executor import Executor, run, run_with_token
from futurekit.future import Future, completed, new_error
from futurekit.result import Result
from futurekit.token import CancellationToken
from futurekit.types import T, U


def _check(name: str, future: Optional[Future[Any]], fn: Optional[Callable[..., Any]]):
    if future is None:
        return new_error(InvalidFutureError(f"{name}: future is None"))
    if fn is None:
        return new_error(InvalidFutureError(f"{name}: function is None"))
    return None


def _unwrap_inner(name: str, inner: Optional[Future[U]]) -> Future[U]:
    if inner is None:
        raise InvalidFutureError(f"{name}: function returned None instead of a future")
    return inner


def map_future(
    future: Future[T],
    fn: Callable[[T], U],
    *,
    executor: Optional[Executor] = None,
) -> Future[U]:
    """
    Transform the value of `future` with `fn` once it succeeds.

    If `future` fails, the failure is passed on and `fn` is not called. If `fn` raises, the returned
    future fails with that error.
    """
    if (err := _check("map_future", future, fn)) is not None:
        return err
    return run(lambda: fn(future.get()), executor=executor)


def map_future_with_token(
    token: Optional[CancellationToken],
    future: Future[T],
    fn: Callable[[CancellationToken, T], U],
    *,
    executor: Optional[Executor] = None,
) -> Future[U]:
    if (err := _check("map_future_with_token", future, fn)) is not None:
        return err
    return run_with_token(token, lambda tok: fn(tok, future.get(tok)), executor=executor)


def flat_map(
    future: Future[T],
    fn: Callable[[T], Future[U]],
    *,
    executor: Optional[Executor] = None,
) -> Future[U]:
    """
    Like `map_future`, but `fn` returns a future. The returned future is fulfilled with the result of
    that inner future.
    """
    if (err := _check("flat_map", future, fn)) is not None:
        return err
    return run(
        lambda: _unwrap_inner("flat_map", fn(future.get())).get(),
        executor=executor,
    )


def flat_map_with_token(
    token: Optional[CancellationToken],
    future: Future[T],
    fn: Callable[[T], Future[U]],
    *,
    executor: Optional[Executor] = None,
) -> Future[U]:
    if (err := _check("flat_map_with_token", future, fn)) is not None:
        return err
    return run_with_token(
        token,
        lambda tok: _unwrap_inner("flat_map_with_token", fn(future.get(tok))).get(tok),
        executor=executor,
    )


def _collect_all(futures: tuple[Future[T], ...], token: Optional[CancellationToken]) -> list[T]:
    # Waits for the inputs in order, the first failure in input order wins.
    return [f.get(token) for f in futures]


def _collect_no_short_circuit(
    futures: tuple[Future[T], ...], token: Optional[CancellationToken]
) -> list[T]:
    results: list[Result[T]] = [f.get_result(token) for f in futures]
    errors = [r.error for r in results if r.error is not None]
    if errors:
        raise CombinedError(f"{len(errors)} of {len(results)} futures failed", errors)
    return [r.value for r in results]  # type: ignore[misc]


def _check_inputs(name: str, futures: tuple[Optional[Future[Any]], ...]):
    for i, f in enumerate(futures):
        if f is None:
            return new_error(InvalidFutureError(f"{name}: future at index {i} is None"))
    return None


def combine(
    *futures: Future[T], executor: Optional[Executor] = None
) -> Future[Optional[list[T]]]:
    """
    Wait for all futures and collect their values in input order.

    Fails with the first error in input order. The other inputs keep running, their outcome is
    discarded. With no inputs, the result is `None`.
    """
    if not futures:
        return completed(None)
    if (err := _check_inputs("combine", futures)) is not None:
        return err
    return run(lambda: _collect_all(futures, None), executor=executor)


def combine_with_token(
    token: Optional[CancellationToken],
    *futures: Future[T],
    executor: Optional[Executor] = None,
) -> Future[Optional[list[T]]]:
    if not futures:
        return completed(None)
    if (err := _check_inputs("combine_with_token", futures)) is not None:
        return err
    return run_with_token(token, lambda tok: _collect_all(futures, tok), executor=executor)


def combine_no_short_circuit(
    *futures: Future[T], executor: Optional[Executor] = None
) -> Future[list[T]]:
    """
    Wait for all futures, even if some fail.

    If any failed, the returned future fails with a `CombinedError` holding every failure in input
    order. Otherwise it succeeds with the values in input order, an empty list for no inputs.
    """
    if not futures:
        return completed([])
    if (err := _check_inputs("combine_no_short_circuit", futures)) is not None:
        return err
    return run(lambda: _collect_no_short_circuit(futures, None), executor=executor)


def combine_no_short_circuit_with_token(
    token: Optional[CancellationToken],
    *futures: Future[T],
    executor: Optional[Executor] = None,
) -> Future[list[T]]:
    """
    Like `combine_no_short_circuit`. Once the token fires, every input that is still pending contributes
    the token's error to the `CombinedError`.
    """
    if not futures:
        return completed([])
    if (err := _check_inputs("combine_no_short_circuit_with_token", futures)) is not None:
        return err
    return run_with_token(
        token, lambda tok: _collect_no_short_circuit(futures, tok), executor=executor
    )
