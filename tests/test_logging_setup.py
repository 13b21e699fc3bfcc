"""
Tests for logging configuration and request scoping.
"""
import logging
from unittest.mock import patch

import pytest

from todocore.logging_setup import (
    RequestIDFilter,
    SafeFormatter,
    configure_logging,
    get_request_id,
    request_scope,
)


def _record(msg="hello"):
    return logging.LogRecord("todocore.test", logging.INFO, __file__, 1, msg, None, None)


class TestRequestScope:

    def test_default_is_empty(self):
        assert get_request_id() == ""

    def test_binds_and_resets(self):
        with request_scope("req-1") as request_id:
            assert request_id == "req-1"
            assert get_request_id() == "req-1"
        assert get_request_id() == ""

    def test_generates_id(self):
        with request_scope() as request_id:
            assert len(request_id) == 8
            assert get_request_id() == request_id

    def test_nested_scopes(self):
        with request_scope("outer"):
            with request_scope("inner"):
                assert get_request_id() == "inner"
            assert get_request_id() == "outer"

    def test_reset_on_error(self):
        with pytest.raises(RuntimeError):
            with request_scope("req-err"):
                raise RuntimeError("boom")
        assert get_request_id() == ""


class TestFilterAndFormatter:

    def test_filter_outside_scope(self):
        record = _record()
        assert RequestIDFilter().filter(record) is True
        assert record.request_id == "-"

    def test_filter_inside_scope(self):
        record = _record()
        with request_scope("req-42"):
            RequestIDFilter().filter(record)
        assert record.request_id == "req-42"

    def test_formatter_without_request_id(self):
        formatter = SafeFormatter("[%(request_id)s] %(message)s")
        assert formatter.format(_record()) == "[-] hello"

    def test_configure_logging(self):
        with patch("todocore.logging_setup.logging.basicConfig") as basic_config:
            handler = configure_logging("debug")

        basic_config.assert_called_once_with(level=logging.DEBUG, handlers=[handler], force=True)
        assert isinstance(handler.formatter, SafeFormatter)
        assert any(isinstance(f, RequestIDFilter) for f in handler.filters)

    def test_configure_logging_unknown_level_falls_back_to_info(self):
        with patch("todocore.logging_setup.logging.basicConfig") as basic_config:
            configure_logging("chatty")

        assert basic_config.call_args.kwargs["level"] == logging.INFO
