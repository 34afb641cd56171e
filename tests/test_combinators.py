# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause

"""This module tests map, flat_map and the fan-in combinators."""

import threading
import unittest

from futurekit import (
    CancellationToken,
    CancelledError,
    CombinedError,
    InvalidFutureError,
    PoolExecutor,
    combine,
    combine_no_short_circuit,
    combine_no_short_circuit_with_token,
    combine_with_token,
    completed,
    flat_map,
    flat_map_with_token,
    has_error,
    map_future,
    map_future_with_token,
    new,
    new_error,
    run,
)

TIMEOUT = 2.0


class TestMap(unittest.TestCase):
    def test_map(self):
        fut = map_future(completed(10), lambda v: v * 2)
        assert fut.get() == 20

    def test_map_pending(self):
        fut, promise = new()
        mapped = map_future(fut, lambda v: f"value: {v}")
        assert not mapped.done()
        promise.success(7)
        assert mapped.get() == "value: 7"

    def test_map_original_error(self):
        """The error of the input is passed on and the function is not called"""
        err = ValueError("original")
        called = []
        fut = map_future(new_error(err), lambda v: called.append(v))
        assert fut.get_result().error is err
        assert called == []

    def test_map_transform_error(self):
        err = ValueError("transform")

        def _fail(v):
            raise err

        assert map_future(completed(1), _fail).get_result().error is err

    def test_map_misuse(self):
        assert isinstance(map_future(None, lambda v: v).get_result().error, InvalidFutureError)
        assert isinstance(map_future(completed(1), None).get_result().error, InvalidFutureError)

    def test_map_with_token(self):
        token = CancellationToken()
        fut = map_future_with_token(token, completed(3), lambda tok, v: (tok.is_cancelled(), v + 1))
        assert fut.get() == (False, 4)

    def test_map_with_token_cancelled(self):
        """Cancelling the token stops waiting for a pending input"""
        token = CancellationToken()
        pending, _ = new()
        fut = map_future_with_token(token, pending, lambda tok, v: v)
        token.cancel()
        err = fut.get_result().error
        assert isinstance(err, CancelledError)
        assert err is token.error()
        assert not pending.done()

    def test_map_with_token_misuse(self):
        token = CancellationToken()
        fut = map_future_with_token(token, None, lambda tok, v: v)
        assert isinstance(fut.get_result().error, InvalidFutureError)


class TestFlatMap(unittest.TestCase):
    def test_flat_map(self):
        fut = flat_map(completed(5), lambda v: run(lambda: v * 3))
        assert fut.get() == 15

    def test_flat_map_original_error(self):
        err = ValueError("original")
        called = []
        fut = flat_map(new_error(err), lambda v: called.append(v) or completed(v))
        assert fut.get_result().error is err
        assert called == []

    def test_flat_map_inner_error(self):
        err = ValueError("inner")
        assert flat_map(completed(1), lambda v: new_error(err)).get_result().error is err

    def test_flat_map_transform_error(self):
        err = ValueError("transform")

        def _fail(v):
            raise err

        assert flat_map(completed(1), _fail).get_result().error is err

    def test_flat_map_none_inner(self):
        """A function returning no future fails the result instead of hanging"""
        err = flat_map(completed(1), lambda v: None).get_result().error
        assert isinstance(err, InvalidFutureError), err

    def test_flat_map_misuse(self):
        assert isinstance(flat_map(None, completed).get_result().error, InvalidFutureError)
        assert isinstance(flat_map(completed(1), None).get_result().error, InvalidFutureError)

    def test_flat_map_with_token(self):
        token = CancellationToken()
        assert flat_map_with_token(token, completed(2), lambda v: completed(v + 1)).get() == 3

    def test_flat_map_with_token_cancelled_inner(self):
        """The token also stops waiting for the inner future"""
        token = CancellationToken()
        inner, _ = new()
        reached = threading.Event()

        def _inner(v):
            reached.set()
            return inner

        fut = flat_map_with_token(token, completed(1), _inner)
        assert reached.wait(TIMEOUT)
        token.cancel()
        assert isinstance(fut.get_result().error, CancelledError)
        assert not inner.done()


class TestCombine(unittest.TestCase):
    def test_combine(self):
        futs = [run(lambda i=i: i * i) for i in range(5)]
        assert combine(*futs).get() == [0, 1, 4, 9, 16]

    def test_combine_order(self):
        """Values are ordered by input, not by completion"""
        (f1, p1), (f2, p2) = new(), new()
        fut = combine(f1, f2)
        p2.success("second")
        p1.success("first")
        assert fut.get() == ["first", "second"]

    def test_combine_error(self):
        err = ValueError("combine error")
        fut = combine(completed(1), new_error(err), completed(3))
        assert fut.get_result().error is err

    def test_combine_empty(self):
        result = combine().get_result()
        assert result.ok
        assert result.value is None

    def test_combine_none_input(self):
        err = combine(completed(1), None).get_result().error
        assert isinstance(err, InvalidFutureError)

    def test_combine_with_token(self):
        token = CancellationToken()
        assert combine_with_token(token, completed(1), completed(2)).get() == [1, 2]
        assert combine_with_token(token).get() is None

    def test_combine_with_token_cancelled(self):
        token = CancellationToken()
        pending, _ = new()
        fut = combine_with_token(token, completed(1), pending)
        token.cancel()
        assert fut.get_result().error is token.error()

    def test_combine_executor(self):
        with PoolExecutor(max_workers=1) as pool:
            fut = combine(completed("a"), completed("b"), executor=pool)
            assert fut.get() == ["a", "b"]


class TestCombineNoShortCircuit(unittest.TestCase):
    def test_success(self):
        futs = [run(lambda i=i: str(i)) for i in range(3)]
        assert combine_no_short_circuit(*futs).get() == ["0", "1", "2"]

    def test_empty(self):
        assert combine_no_short_circuit().get() == []
        assert combine_no_short_circuit_with_token(CancellationToken()).get() == []

    def test_errors(self):
        """All failures are collected, in input order"""
        err1 = ValueError("first failure")
        err2 = KeyError("second failure")
        result = combine_no_short_circuit(
            new_error(err1), completed(2), new_error(err2)
        ).get_result()
        assert result.value is None
        assert isinstance(result.error, CombinedError)
        assert list(result.error.exceptions) == [err1, err2]
        assert has_error(result.error, err1)
        assert has_error(result.error, err2)
        assert "first failure" in str(result.error)
        assert "second failure" in str(result.error)

    def test_waits_for_all(self):
        """Does not fail before every input completed"""
        err = ValueError("early")
        slow, promise = new()
        fut = combine_no_short_circuit(new_error(err), slow)
        assert fut.get_result(CancellationToken(timeout=0.05)).error is not None
        assert not fut.done()
        promise.success(1)
        result = fut.get_result()
        assert has_error(result.error, err)

    def test_with_token_cancelled(self):
        token = CancellationToken()
        pending, _ = new()
        fut = combine_no_short_circuit_with_token(token, completed(1), pending)
        token.cancel()
        err = fut.get_result().error
        assert isinstance(err, CombinedError)
        assert has_error(err, CancelledError)
        assert has_error(err, token.error())

    def test_none_input(self):
        err = combine_no_short_circuit(None).get_result().error
        assert isinstance(err, InvalidFutureError)
