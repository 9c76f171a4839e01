# examplan/tests/unit/test_logging_config.py

import logging

from examplan.logging_config import RequestIdFilter, build_logging_config


def test_debug_only_raises_app_verbosity():
    config = build_logging_config("WARNING", debug=True)

    assert config["loggers"][""]["level"] == "WARNING"
    assert config["loggers"]["examplan"]["level"] == "DEBUG"
    assert config["loggers"]["examplan"]["propagate"] is False


def test_errors_handler_writes_to_stderr():
    handler = build_logging_config("INFO")["handlers"]["errors"]

    assert handler["stream"] == "ext://sys.stderr"
    assert handler["level"] == "ERROR"


def test_request_id_filter_fills_default():
    record = logging.LogRecord("examplan", logging.INFO, __file__, 1, "msg", None, None)

    assert RequestIdFilter().filter(record) is True
    assert record.request_id == "no-request-id"
