"""Tests for retry logic with exponential backoff."""

from unittest.mock import patch

import pytest

from warehouse.common.retry import backoff_delays, retry_with_backoff


class TestRetryLogic:
    """Tests for the retry decorator."""

    def test_retry_succeeds_on_first_attempt(self):
        """Function that succeeds immediately should not retry."""
        call_count = {"count": 0}

        @retry_with_backoff(max_retries=3)
        def successful_function():
            call_count["count"] += 1
            return "success"

        assert successful_function() == "success"
        assert call_count["count"] == 1

    @patch("warehouse.common.retry.time.sleep")
    def test_retry_succeeds_after_failures(self, mock_sleep):
        """Function should retry until it succeeds."""
        call_count = {"count": 0}

        @retry_with_backoff(max_retries=3, initial_delay=1.0, backoff_factor=2.0)
        def fails_twice_then_succeeds():
            call_count["count"] += 1
            if call_count["count"] < 3:
                raise ConnectionError("Temporary failure")
            return "success"

        assert fails_twice_then_succeeds() == "success"
        assert call_count["count"] == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @patch("warehouse.common.retry.time.sleep")
    def test_retry_exhausts_all_attempts(self, mock_sleep):
        """Function should retry max_retries times then raise exception."""
        call_count = {"count": 0}

        @retry_with_backoff(max_retries=2, initial_delay=0.5)
        def always_fails():
            call_count["count"] += 1
            raise ConnectionError("Always fails")

        with pytest.raises(ConnectionError, match="Always fails"):
            always_fails()

        assert call_count["count"] == 3
        assert mock_sleep.call_count == 2

    def test_retry_only_catches_specified_exceptions(self):
        """Exceptions outside the retry list propagate immediately."""
        call_count = {"count": 0}

        @retry_with_backoff(max_retries=3, exceptions=(ConnectionError,))
        def raises_value_error():
            call_count["count"] += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()

        assert call_count["count"] == 1

    @patch("warehouse.common.retry.time.sleep")
    def test_delay_capped_by_max_delay(self, mock_sleep):
        """Waits never exceed max_delay."""

        @retry_with_backoff(max_retries=4, initial_delay=1.0, backoff_factor=3.0, max_delay=5.0)
        def always_fails():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            always_fails()

        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 3.0, 5.0, 5.0]

    def test_backoff_delays_uncapped(self):
        assert list(backoff_delays(3, initial_delay=0.5, backoff_factor=2.0)) == [0.5, 1.0, 2.0]

    @patch("warehouse.common.retry.time.sleep")
    def test_driver_error_code_logged(self, mock_sleep, caplog):
        """The pgcode of a driver error is attached to every retry log record."""

        class OperationalError(Exception):
            pgcode = "57P03"

        @retry_with_backoff(max_retries=1, exceptions=(OperationalError,))
        def connect():
            raise OperationalError("the database system is starting up")

        with caplog.at_level("WARNING", logger="warehouse.common.retry"):
            with pytest.raises(OperationalError):
                connect()

        assert [record.levelname for record in caplog.records] == ["WARNING", "ERROR"]
        assert all(record.pgcode == "57P03" for record in caplog.records)
