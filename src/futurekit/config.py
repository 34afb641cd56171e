# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import logging
import os
import threading
from typing import Mapping, Optional

from futurekit.types import edataclass

ENV_PREFIX = "FUTUREKIT_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name}={raw!r} is not a boolean, expected one of {_TRUE_VALUES + _FALSE_VALUES}")


def _parse_level(name: str, raw: str) -> int:
    value = raw.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"{name}={raw!r} is not a log level")
    return level


@edataclass
class FutureConfig:
    """Process-wide settings for worker threads and logging."""

    #: Prefix of the names of threads started for operations and callbacks.
    thread_name_prefix: str = "futurekit"
    #: Whether worker and callback threads are daemon threads.
    daemon_threads: bool = True
    #: Default level used by `configure_structlog`.
    log_level: int = logging.WARNING
    #: Whether `configure_structlog` renders JSON to the console instead of the rich renderer.
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FutureConfig":
        """
        Build the config from `FUTUREKIT_*` environment variables.
        Unset variables keep their defaults.

        Args:
            environ: The environment to read. Defaults to `os.environ`.

        Raises:
            ValueError: If a variable is set to an invalid value.
        """
        if environ is None:
            environ = os.environ
        kwargs = {}
        if (raw := environ.get(f"{ENV_PREFIX}THREAD_NAME_PREFIX")) is not None:
            if not raw.strip():
                raise ValueError(f"{ENV_PREFIX}THREAD_NAME_PREFIX must not be empty")
            kwargs["thread_name_prefix"] = raw.strip()
        if (raw := environ.get(f"{ENV_PREFIX}DAEMON_THREADS")) is not None:
            kwargs["daemon_threads"] = _parse_bool(f"{ENV_PREFIX}DAEMON_THREADS", raw)
        if (raw := environ.get(f"{ENV_PREFIX}LOG_LEVEL")) is not None:
            kwargs["log_level"] = _parse_level(f"{ENV_PREFIX}LOG_LEVEL", raw)
        if (raw := environ.get(f"{ENV_PREFIX}LOG_JSON")) is not None:
            kwargs["log_json"] = _parse_bool(f"{ENV_PREFIX}LOG_JSON", raw)
        return cls(**kwargs)


_config: Optional[FutureConfig] = None
_config_lock = threading.Lock()


def get_config() -> FutureConfig:
    """Return the process default config, loading it from the environment on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = FutureConfig.from_env()
        return _config


def set_config(config: Optional[FutureConfig]) -> None:
    """Replace the process default config. `None` reloads it from the environment on next use."""
    global _config
    with _config_lock:
        _config = config
