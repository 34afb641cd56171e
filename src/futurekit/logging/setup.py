# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.dev import ConsoleRenderer, RichTracebackFormatter
from structlog.processors import ExceptionRenderer, JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter
from structlog.tracebacks import ExceptionDictTransformer

from futurekit.config import get_config


def add_thread_name(logger, name, event_dict):
    """Record the emitting thread, most events come from worker or callback threads."""
    event_dict.setdefault("thread", threading.current_thread().name)
    return event_dict


def log_suppressed(log: Any, level: str, event: str, **kw: Any) -> None:
    """
    Emit a log event where a broken log sink must not break the caller.
    Used on the panic recovery paths, which run on background threads without a caller to report to.
    """
    try:
        getattr(log, level)(event, **kw)
    except Exception:
        pass


def configure_structlog(
    level: Optional[int] = None,
    log_path: Optional[Path] = None,
    json: Optional[bool] = None,
):
    """Route structlog through the stdlib logging module.

    Console output uses the rich renderer, or JSON if requested. If a log_path is given, events are
    additionally written as JSON lines to a rotating file.

    Args:
        level: Minimum level to log. Defaults to the configured `log_level`.
        log_path: Optional file to log to.
        json: Render the console output as JSON. Defaults to the configured `log_json`.
    """
    config = get_config()
    if level is None:
        level = config.log_level
    if json is None:
        json = config.log_json

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        add_thread_name,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_processors = [
        ProcessorFormatter.remove_processors_meta,
        ExceptionRenderer(ExceptionDictTransformer(show_locals=False)),
        JSONRenderer(),
    ]

    pkg_logger = logging.getLogger("futurekit")
    pkg_logger.setLevel(level)
    for handler in list(pkg_logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            pkg_logger.removeHandler(handler)

    if json:
        console_formatter = ProcessorFormatter(
            processors=json_processors, foreign_pre_chain=shared_processors
        )
    else:
        console_formatter = ProcessorFormatter(
            processor=ConsoleRenderer(
                exception_formatter=RichTracebackFormatter(show_locals=False)
            ),
            foreign_pre_chain=shared_processors,
        )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    pkg_logger.addHandler(console_handler)

    if log_path:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            ProcessorFormatter(processors=json_processors, foreign_pre_chain=shared_processors)
        )
        pkg_logger.addHandler(file_handler)
