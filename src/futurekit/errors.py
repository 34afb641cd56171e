# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import traceback
from typing import Iterator, Type, TypeVar, Union

E = TypeVar("E", bound=BaseException)

PANIC_RECOVERY_MESSAGE = "recovered from panic"


class CancelledError(Exception):
    """Raised when a wait or an operation was aborted by its cancellation token."""

    @classmethod
    def with_current_traceback(cls: Type[E], *args) -> E:
        try:
            raise cls(*args)
        except cls as e:
            if e.__traceback__ is not None and e.__traceback__.tb_next is not None:
                return e.with_traceback(e.__traceback__.tb_next)
            return e


class DeadlineExceededError(CancelledError):
    """Raised when the deadline of a cancellation token expired."""


class PanicError(Exception):
    """
    Failure that replaces a non-`Exception` escaping from an operation or a callback,
    e.g. `SystemExit` raised inside a worker thread.

    The message carries the payload and the formatted stack. The original is kept as `__cause__`.
    """

    @classmethod
    def from_exception(cls, exc: BaseException) -> "PanicError":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        payload = str(exc) or type(exc).__name__
        err = cls(f"{PANIC_RECOVERY_MESSAGE}: {payload}\nstack trace:\n{stack}")
        err.__cause__ = exc
        return err


class InvalidFutureError(ValueError):
    """A combinator was given a missing future or function."""


class CombinedError(ExceptionGroup):
    """All failures of a fan-in that does not stop at the first error."""

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.exceptions)


def is_panic(exc: BaseException) -> bool:
    """Anything that is not a regular `Exception` is treated as a panic."""
    return not isinstance(exc, Exception)


def error_chain(err: BaseException | None) -> Iterator[BaseException]:
    """
    Iterate over the error, its explicit causes and all members of nested exception groups.

    Each error is yielded once, even if it is reachable along several paths.
    """
    seen: set[int] = set()
    stack = [err] if err is not None else []
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur
        if cur.__cause__ is not None:
            stack.append(cur.__cause__)
        if isinstance(cur, BaseExceptionGroup):
            stack.extend(reversed(cur.exceptions))


def has_error(
    err: BaseException | None, target: Union[BaseException, Type[BaseException]]
) -> bool:
    """
    Check whether `target` is part of the error chain of `err`.

    Args:
        err: The error to inspect. `None` never matches.
        target: An error instance (compared by identity) or an error class (compared by isinstance).
    """
    if isinstance(target, type):
        return any(isinstance(e, target) for e in error_chain(err))
    return any(e is target for e in error_chain(err))
