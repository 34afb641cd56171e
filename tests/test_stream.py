# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause

"""This module tests delivering results through streams."""

import queue
import unittest

import pytest

from futurekit import CancellationToken, CancelledError, Result, completed, new, new_error
from futurekit.stream import ResultStream, StreamClosedError


class TestResultStream(unittest.TestCase):
    def test_single_result(self):
        stream = ResultStream()
        assert stream.send(Result.success(1))
        assert not stream.send(Result.success(2))
        assert not stream.closed
        assert stream.get().value == 1
        assert stream.closed
        with pytest.raises(StreamClosedError):
            stream.get()
        # The close marker stays for later readers.
        with pytest.raises(StreamClosedError):
            stream.get()

    def test_empty_timeout(self):
        with pytest.raises(queue.Empty):
            ResultStream().get(timeout=0.01)

    def test_iter(self):
        stream = ResultStream()
        stream.send(Result.failure(ValueError("x")))
        items = list(stream)
        assert len(items) == 1
        assert isinstance(items[0].error, ValueError)


class TestFutureStream(unittest.TestCase):
    def test_completed(self):
        assert completed(5).to_stream().get(timeout=1.0).value == 5

    def test_pending(self):
        fut, promise = new()
        stream = fut.to_stream()
        with pytest.raises(queue.Empty):
            stream.get(timeout=0.01)
        promise.success("late")
        assert stream.get(timeout=2.0).value == "late"

    def test_error(self):
        err = ValueError("stream error")
        assert new_error(err).to_stream().get(timeout=1.0).error is err

    def test_token(self):
        """The token's error is delivered if it fires first"""
        fut, promise = new()
        token = CancellationToken()
        stream = fut.to_stream(token)
        token.cancel()
        result = stream.get(timeout=2.0)
        assert isinstance(result.error, CancelledError)
        promise.success(1)
        assert list(stream) == []
