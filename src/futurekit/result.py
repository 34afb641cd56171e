# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
from dataclasses import field
from types import TracebackType
from typing import Any, Generic, Iterator, Optional

from futurekit.types import T, edataclass


@edataclass
class Result(Generic[T]):
    """
    The outcome of one operation: a value on success, an error on failure.

    If `error` is set, `value` is `None` and must not be used.
    """

    value: Optional[T] = None
    error: Optional[Exception] = None
    #: Traceback of `error` when the result was created.
    _traceback: Optional[TracebackType] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.error is not None:
            self._traceback = self.error.__traceback__

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result[Any]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            # Every raise extends the traceback of the shared error, so start over from the stored one.
            raise self.error.with_traceback(self._traceback)
        return self.value  # type: ignore[return-value]

    def __iter__(self) -> Iterator[Any]:
        # Allows `value, err = fut.get_result()`
        yield self.value
        yield self.error
