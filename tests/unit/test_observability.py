"""Unit tests for the gateway observability module."""

from __future__ import annotations

import datetime as dt

import pytest

from porter.observability import (
    ErrorCategory,
    GatewayEventLogger,
    GatewayEventType,
    short_sha,
)
from tests.helpers.femtologging_capture import capture_femto_logs

LOGGER_NAME = "porter.observability"
SHA = "4f7a2c1e9b8d6f5a3c2e1d0b9a8f7e6d5c4b3a21"


def test_short_sha_keeps_seven_characters() -> None:
    """Commit SHAs are abbreviated to seven characters."""
    assert short_sha(SHA) == "4f7a2c1"
    assert short_sha("abc") == "abc"


def test_error_categories_are_stable_strings() -> None:
    """Category values are the strings returned to webhook producers."""
    assert ErrorCategory.KEY_IMPORT_FAILURE == "key-import-failure"
    assert ErrorCategory.REPOSITORY_NOT_COVERED == (
        "repository-not-covered-by-installation"
    )
    assert ErrorCategory.INVALID_TOKEN == "invalid-token"


class TestGatewayEventLogger:
    """Tests for the GatewayEventLogger structured logging."""

    @pytest.fixture
    def events(self) -> GatewayEventLogger:
        """Return a fresh event logger instance."""
        return GatewayEventLogger()

    def test_received_is_info_with_short_sha(self, events: GatewayEventLogger) -> None:
        """Receipt logs the repository, abbreviated commit and pusher."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_received("octo/reef", SHA, "tuha")

        capture.wait_for_count(1)
        record = capture.records[0]
        assert record.level == "INFO"
        assert GatewayEventType.RECEIVED in record.message
        assert "repository=octo/reef" in record.message
        assert "commit=4f7a2c1 " in record.message
        assert SHA not in record.message

    def test_rejected_is_warning(self, events: GatewayEventLogger) -> None:
        """Signature rejections are logged at WARN with the category."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_rejected(ErrorCategory.INVALID_SIGNATURE, delivery="d-1")

        capture.wait_for_count(1)
        record = capture.records[0]
        assert record.level in {"WARN", "WARNING"}
        assert "category=invalid-signature" in record.message
        assert "delivery=d-1" in record.message

    def test_ignored_includes_reason(self, events: GatewayEventLogger) -> None:
        """Skips log their reason."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_ignored("no tracked file changed", repository="octo/reef")

        capture.wait_for_count(1)
        assert "reason=no tracked file changed" in capture.records[0].message

    def test_token_minted_never_logs_token(self, events: GatewayEventLogger) -> None:
        """Token events carry the installation and expiry only."""
        expires = dt.datetime(2025, 1, 15, 13, 0, tzinfo=dt.UTC)
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_token_minted(4242, expires, cached=True)

        capture.wait_for_count(1)
        message = capture.records[0].message
        assert GatewayEventType.TOKEN_MINTED in message
        assert "installation_id=4242" in message
        assert "expires_at=2025-01-15T13:00:00+00:00" in message
        assert "cached=True" in message

    def test_dispatched_names_target(self, events: GatewayEventLogger) -> None:
        """Dispatch events name the automation repository."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_dispatched("octo/reef", SHA, "octo/publisher")

        capture.wait_for_count(1)
        assert "target=octo/publisher" in capture.records[0].message

    def test_failed_is_error_with_category(self, events: GatewayEventLogger) -> None:
        """Failures are logged at ERROR with their category and detail."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            events.log_failed(
                ErrorCategory.REPOSITORY_NOT_COVERED,
                repository="octo/reef",
                detail="installation does not include octo/publisher",
            )

        capture.wait_for_count(1)
        record = capture.records[0]
        assert record.level == "ERROR"
        assert GatewayEventType.FAILED in record.message
        assert "category=repository-not-covered-by-installation" in record.message
