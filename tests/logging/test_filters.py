import logging

from chainsql.logging.filters import (
    ContextFilter,
    clear_request_context,
    set_logging_context,
    set_request_context,
)
from chainsql.__version__ import __version__


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="chainsql.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )


def test_context_filter_respects_static_environment():
    set_logging_context(environment="qa", extra={"region": "us-east"})
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert getattr(record, "environment") == "qa"
        assert getattr(record, "region") == "us-east"
    finally:
        set_logging_context(environment=None, extra=None)


def test_context_filter_uses_request_context():
    set_logging_context(environment=None, extra=None)
    set_request_context(request_id="req-1", user_id="user-7")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.user_id == "user-7"
    finally:
        clear_request_context()


def test_context_filter_no_config_is_graceful():
    set_logging_context(environment=None, extra=None)
    record = _record()
    assert ContextFilter().filter(record)
    assert not hasattr(record, "environment")
    assert record.request_id is None
    assert record.sdk_name == "chainsql"
    assert record.sdk_version == __version__


def test_static_context_does_not_override_record_fields():
    set_logging_context(extra={"table": "static"})
    try:
        record = _record()
        record.table = "users"
        ContextFilter().filter(record)
        assert record.table == "users"
    finally:
        set_logging_context(environment=None, extra=None)
