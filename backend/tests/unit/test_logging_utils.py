"""Unit tests for structured error logging."""

import logging

from cyclonewatch.utils.logging import log_error

logger = logging.getLogger("cyclonewatch.tests")


class TestLogError:
    """Tests for log_error records."""

    def test_record_fields(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="cyclonewatch.tests"):
            record = log_error(logger, "APIClient.fetch", ValueError("bad payload"), "/cyclone/current")

        assert record["operation"] == "APIClient.fetch"
        assert record["message"] == "bad payload"
        assert record["context"] == "/cyclone/current"
        assert record["timestamp"]
        assert record["stack"] is None
        assert "APIClient.fetch: bad payload" in caplog.text
        assert caplog.records[0].error_record is record

    def test_stack_for_raised_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            record = log_error(logger, "op", e)
        assert "RuntimeError: boom" in record["stack"]

    def test_plain_message(self) -> None:
        record = log_error(logger, "op", "HTTP 503")
        assert record["message"] == "HTTP 503"
        assert record["stack"] is None

    def test_empty_exception_message_uses_type(self) -> None:
        assert log_error(logger, "op", TimeoutError())["message"] == "TimeoutError"

    def test_custom_level(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="cyclonewatch.tests"):
            log_error(logger, "op", "degraded", level=logging.WARNING)
        assert caplog.records[0].levelno == logging.WARNING
