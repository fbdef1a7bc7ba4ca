"""
Tests for retry logic.
"""

import pytest
from resumestore.retry import (
    exponential_backoff,
    is_transient_error,
    RetryError,
)


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1

    def test_retry_then_succeed(self):
        """Function that fails then succeeds should retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01)
        def fails_twice():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectionError("Temporary failure")
            return "success"

        assert fails_twice() == "success"
        assert call_count[0] == 3

    def test_all_retries_exhausted(self):
        """Should raise RetryError after all attempts fail."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_only_catches_specified_exceptions(self):
        """Should only retry on specified exception types."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, exceptions=(ConnectionError,))
        def raises_value_error():
            call_count[0] += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()

        assert call_count[0] == 1

    def test_retry_if_rejects(self):
        """Exceptions the predicate rejects are re-raised without retrying."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, retry_if=lambda e: "locked" in str(e))
        def broken():
            call_count[0] += 1
            raise RuntimeError("no such table")

        with pytest.raises(RuntimeError):
            broken()

        assert call_count[0] == 1

    def test_on_retry_callback(self):
        """Callback receives attempt number, exception and capped delay."""
        seen = []

        @exponential_backoff(max_retries=2, base_delay=0.01, max_delay=0.015, on_retry=lambda *a: seen.append(a))
        def always_fails():
            raise ConnectionError("down")

        with pytest.raises(RetryError):
            always_fails()

        assert [(attempt, delay) for attempt, _, delay in seen] == [(1, 0.01), (2, 0.015)]


class TestTransientErrorDetection:
    """Test transient error classification."""

    @pytest.mark.parametrize("message", [
        "database is locked",
        "(sqlite3.OperationalError) database table is locked",
        "deadlock detected",
        "could not serialize access due to concurrent update",
        "Connection reset by peer",
    ])
    def test_transient(self, message):
        assert is_transient_error(Exception(message))

    @pytest.mark.parametrize("message", [
        "no such table: resume_records",
        "UNIQUE constraint failed: resume_records.resume_hash",
        "syntax error",
    ])
    def test_not_transient(self, message):
        assert not is_transient_error(Exception(message))
