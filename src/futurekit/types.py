# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
from dataclasses import dataclass
from typing import Callable, TypeAlias, TypeVar

from typing_extensions import dataclass_transform

T = TypeVar("T")
U = TypeVar("U")

# Cleanup hooks run by `Future.cancel()`.
CancelFn: TypeAlias = Callable[[], None]


# Slotted kw-only dataclasses are used for every plain record in the package.
@dataclass_transform(kw_only_default=True, slots_default=True)
def edataclass(cls):
    """
    Shorthand for `@dataclass(slots=True, kw_only=True)`.

    Use `dataclass` directly when other options are needed, e.g. `frozen=True`.
    """
    return dataclass(kw_only=True, slots=True)(cls)
