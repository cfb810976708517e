"""
Unit tests for the bounded error log.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from linkguard.services.error_log import ErrorLog, UNKNOWN_MESSAGE


class CodedError(Exception):
    """Exception carrying a backend error code."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


@pytest.fixture
def error_log(clock) -> ErrorLog:
    """Create a small error log on the fake clock."""
    return ErrorLog(capacity=5, platform="test", clock=clock)


class TestLogError:
    """Test recording failures."""

    def test_log_exception_captures_fields(self, error_log: ErrorLog, clock):
        """Test message, code, platform and metadata are captured."""
        record = error_log.log_error(
            CodedError("Invalid credential", "auth/invalid-credential"),
            "Login",
            {"email_domain": "example.com"}
        )

        assert record.message == "Invalid credential"
        assert record.code == "auth/invalid-credential"
        assert record.context == "Login"
        assert record.platform == "test"
        assert record.metadata == {"email_domain": "example.com"}
        assert record.timestamp == clock.now
        assert len(error_log) == 1

    def test_log_raised_exception_captures_stack(self, error_log: ErrorLog):
        """Test a raised exception keeps its traceback text."""
        try:
            raise ValueError("bad link")
        except ValueError as e:
            record = error_log.log_error(e, "Link Save")

        assert record.stack is not None
        assert "ValueError: bad link" in record.stack

    def test_log_error_defaults(self, error_log: ErrorLog):
        """Test missing fields fall back to placeholders."""
        record = error_log.log_error(None)

        assert record.message == UNKNOWN_MESSAGE
        assert record.context == "Unknown"
        assert record.code is None
        assert record.stack is None
        assert record.metadata == {}

    def test_log_exception_without_message(self, error_log: ErrorLog):
        """Test an exception with an empty message gets the placeholder."""
        record = error_log.log_error(RuntimeError(), "Auth Initialization")

        assert record.message == UNKNOWN_MESSAGE

    def test_log_string_and_mapping(self, error_log: ErrorLog):
        """Test plain strings and mappings are accepted."""
        from_string = error_log.log_error("sync failed", "Sync")
        from_mapping = error_log.log_error(
            {"message": "denied", "code": "firestore/permission-denied", "stack": "at sync()"},
            "Sync"
        )

        assert from_string.message == "sync failed"
        assert from_mapping.message == "denied"
        assert from_mapping.code == "firestore/permission-denied"
        assert from_mapping.stack == "at sync()"

    def test_log_error_never_raises(self, error_log: ErrorLog):
        """Test an object whose attributes blow up is still recorded."""
        class Hostile:
            @property
            def code(self):
                raise RuntimeError("boom")

            def __str__(self):
                raise RuntimeError("boom")

        record = error_log.log_error(Hostile(), "Render")

        assert record.message == UNKNOWN_MESSAGE
        assert len(error_log) == 1

    def test_record_is_immutable(self, error_log: ErrorLog):
        """Test records cannot be modified after creation."""
        metadata = {"k": 1}
        record = error_log.log_error(ValueError("x"), "Login", metadata)

        with pytest.raises(ValidationError):
            record.message = "changed"
        with pytest.raises(TypeError):
            record.metadata["k"] = 999

        metadata["k"] = 2
        stored = error_log.get_recent_errors(1)[0]
        assert stored.metadata == {"k": 1}
        assert stored.model_dump()["metadata"] == {"k": 1}

    def test_record_ids_are_unique_and_ordered(self, error_log: ErrorLog):
        """Test records created at the same instant still get distinct ids."""
        first = error_log.log_error("a")
        second = error_log.log_error("b")

        assert first.id != second.id
        assert int(first.id.split("-")[1]) < int(second.id.split("-")[1])

    def test_metadata_is_copied(self, error_log: ErrorLog):
        """Test later mutation of the caller's metadata does not leak in."""
        metadata = {"attempt": 1}
        record = error_log.log_error("x", "Login", metadata)
        metadata["attempt"] = 2

        assert record.metadata == {"attempt": 1}


class TestBoundedLog:
    """Test capacity and eviction."""

    def test_capacity_is_never_exceeded(self, error_log: ErrorLog):
        """Test the log keeps exactly the last capacity records."""
        records = [error_log.log_error(f"error {i}") for i in range(12)]

        assert len(error_log) == 5
        assert error_log.get_recent_errors(5) == records[-5:]

    def test_get_recent_errors_order(self, error_log: ErrorLog, clock):
        """Test recent errors come back oldest first."""
        for i in range(3):
            error_log.log_error(f"error {i}")
            clock.advance(1000)

        recent = error_log.get_recent_errors(2)

        assert [r.message for r in recent] == ["error 1", "error 2"]
        assert recent[1].timestamp - recent[0].timestamp == timedelta(seconds=1)

    def test_get_recent_errors_with_fewer_records(self, error_log: ErrorLog):
        """Test asking for more than stored returns everything."""
        error_log.log_error("only")

        assert len(error_log.get_recent_errors(10)) == 1
        assert error_log.get_recent_errors(0) == []

    def test_default_count_is_ten(self, clock):
        """Test get_recent_errors defaults to 10 records."""
        log = ErrorLog(capacity=50, clock=clock)
        for i in range(20):
            log.log_error(f"error {i}")

        assert len(log.get_recent_errors()) == 10

    def test_invalid_capacity(self):
        """Test capacity must be positive."""
        with pytest.raises(ValueError):
            ErrorLog(capacity=0)


class TestClearAndSummary:
    """Test clearing and diagnostics."""

    def test_clear_errors_is_idempotent(self, error_log: ErrorLog):
        """Test clearing twice behaves like clearing once."""
        error_log.log_error("a")
        error_log.log_error("b")

        error_log.clear_errors()
        assert error_log.get_recent_errors(100) == []

        error_log.clear_errors()
        assert error_log.get_recent_errors(100) == []
        assert len(error_log) == 0

    def test_error_summary(self, error_log: ErrorLog):
        """Test summary keys prefer the code over the message."""
        error_log.log_error(CodedError("wrong", "auth/wrong-password"), "Login")
        error_log.log_error(CodedError("wrong again", "auth/wrong-password"), "Login")
        error_log.log_error("timeout", "Sync")

        summary = error_log.get_error_summary()

        assert summary == {
            "Login: auth/wrong-password": 2,
            "Sync: timeout": 1,
        }
