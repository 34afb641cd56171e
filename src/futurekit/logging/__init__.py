# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause
import logging
from logging import CRITICAL, DEBUG, ERROR, FATAL, INFO, WARNING

from structlog import get_logger

from futurekit.logging.setup import add_thread_name, configure_structlog, log_suppressed

# Stay silent unless the application configures logging.
logging.getLogger("futurekit").addHandler(logging.NullHandler())


__all__ = [
    "add_thread_name",
    "configure_structlog",
    "get_logger",
    "log_suppressed",
    "CRITICAL",
    "DEBUG",
    "ERROR",
    "FATAL",
    "INFO",
    "WARNING",
]
