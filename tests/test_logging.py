# Copyright (c) 2025, NVIDIA CORPORATION.
# SPDX-License-Identifier: BSD-3-Clause

"""This module tests routing structlog events through the stdlib logging module."""

import json
import logging
import tempfile
import threading
import unittest
from pathlib import Path

import structlog

from futurekit.logging import add_thread_name, configure_structlog, log_suppressed


class TestLogging(unittest.TestCase):
    def setUp(self):
        self._pkg_logger = logging.getLogger("futurekit")
        self._handlers = list(self._pkg_logger.handlers)
        self._level = self._pkg_logger.level
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        for handler in list(self._pkg_logger.handlers):
            if handler not in self._handlers:
                handler.close()
        self._pkg_logger.handlers = self._handlers
        self._pkg_logger.setLevel(self._level)
        structlog.reset_defaults()
        self._tmp.cleanup()

    def test_json_file(self):
        log_path = Path(self._tmp.name) / "futurekit.log"
        configure_structlog(level=logging.INFO, log_path=log_path, json=True)

        # A logger of our own, the module loggers must not be cached with this configuration.
        log = structlog.get_logger("futurekit.tests")
        log.debug("filtered out")
        log.info("event logged", answer=42)
        for handler in self._pkg_logger.handlers:
            handler.flush()

        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1, lines
        record = json.loads(lines[0])
        assert record["event"] == "event logged"
        assert record["answer"] == 42
        assert record["level"] == "info"
        assert record["logger"] == "futurekit.tests"
        assert record["thread"] == threading.current_thread().name

    def test_reconfigure_replaces_handlers(self):
        configure_structlog(level=logging.WARNING, json=True)
        configure_structlog(level=logging.WARNING, json=False)
        handlers = [
            h for h in self._pkg_logger.handlers if not isinstance(h, logging.NullHandler)
        ]
        assert len(handlers) == 1, handlers

    def test_add_thread_name(self):
        event = add_thread_name(None, "info", {"event": "x"})
        assert event["thread"] == threading.current_thread().name
        assert add_thread_name(None, "info", {"thread": "given"})["thread"] == "given"

    def test_log_suppressed(self):
        class BrokenLogger:
            def error(self, event, **kw):
                raise OSError("sink is gone")

        log_suppressed(BrokenLogger(), "error", "ignored", error=ValueError())
