"""
Tests for the log formatter that carries booking context.
"""

import logging

from booking_scheduler.core.log_config import ContextFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    return logging.makeLogRecord({"name": "booking", "levelname": "INFO", "msg": "Availability loaded", **extra})


def test_context_keys_are_appended_in_order():
    formatter = ContextFormatter("%(message)s")

    line = formatter.format(_record(slot_count=0, week_start="2025-01-06", request_id="req_1"))

    assert line == "Availability loaded | request_id=req_1 week_start=2025-01-06 slot_count=0"


def test_blank_and_unknown_keys_are_left_out():
    formatter = ContextFormatter("%(message)s")

    assert formatter.format(_record(error="", email="ada@example.com")) == "Availability loaded"


def test_configure_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        handler = configure_logging("debug")
        assert root.handlers == [handler]
        assert root.level == logging.DEBUG
        assert isinstance(handler.formatter, ContextFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
