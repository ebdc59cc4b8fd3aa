"""Observability primitives for the webhook gateway.

Every pipeline outcome is emitted as a single structured log line tagged with
a :class:`GatewayEventType`, and every failure carries an
:class:`ErrorCategory` so operators can tell "rotate the key" apart from
"reinstall the App" without reading tracebacks. Log lines only ever contain
category names, repository slugs and commit SHAs.
"""

from __future__ import annotations

import enum
import typing as typ

from porter.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)

_SHORT_SHA_LENGTH = 7


class GatewayEventType(enum.StrEnum):
    """Structured log event types for the webhook pipeline."""

    RECEIVED = "webhook.received"
    REJECTED = "webhook.rejected"
    IGNORED = "webhook.ignored"
    TOKEN_MINTED = "webhook.token.minted"
    DISPATCHED = "webhook.dispatched"
    FAILED = "webhook.failed"


class ErrorCategory(enum.StrEnum):
    """Non-sensitive failure categories surfaced to callers and operators."""

    INVALID_SIGNATURE = "invalid-signature"
    MALFORMED_PAYLOAD = "malformed-payload"
    KEY_IMPORT_FAILURE = "key-import-failure"
    KEY_CONTENT_INVALID = "key-content-invalid"
    APP_CREDENTIALS_REJECTED = "app-credentials-rejected"
    APP_NOT_INSTALLED = "app-not-installed"
    INSTALLATION_UNAVAILABLE = "installation-unavailable"
    REPOSITORY_NOT_COVERED = "repository-not-covered-by-installation"
    INVALID_TOKEN = "invalid-token"
    DISPATCH_TARGET_NOT_FOUND = "dispatch-target-not-found"
    DISPATCH_REJECTED = "dispatch-rejected"
    UPSTREAM_UNAVAILABLE = "upstream-unavailable"
    INTERNAL_ERROR = "internal-error"


def short_sha(sha: str) -> str:
    """Return the abbreviated form of a commit SHA used in logs and bodies."""
    return sha[:_SHORT_SHA_LENGTH]


class GatewayEventLogger:
    """Emit structured gateway events via femtologging.

    Events are logged at INFO for receipt, skips and successful dispatches,
    WARNING for rejected signatures, and ERROR for pipeline failures.
    """

    def log_received(self, repository: str, sha: str, pusher: str) -> None:
        """Log receipt of a push event."""
        log_info(
            logger,
            "[%s] repository=%s commit=%s pusher=%s",
            GatewayEventType.RECEIVED,
            repository,
            short_sha(sha),
            pusher,
        )

    def log_rejected(self, category: ErrorCategory, *, delivery: str | None) -> None:
        """Log a request rejected before any payload processing."""
        log_warning(
            logger,
            "[%s] category=%s delivery=%s",
            GatewayEventType.REJECTED,
            category,
            delivery,
        )

    def log_ignored(self, reason: str, *, repository: str | None) -> None:
        """Log an event that was intentionally not dispatched."""
        log_info(
            logger,
            "[%s] repository=%s reason=%s",
            GatewayEventType.IGNORED,
            repository,
            reason,
        )

    def log_token_minted(
        self,
        installation_id: int,
        expires_at: dt.datetime,
        *,
        cached: bool,
    ) -> None:
        """Log that an installation token is available, without the token."""
        log_info(
            logger,
            "[%s] installation_id=%d expires_at=%s cached=%s",
            GatewayEventType.TOKEN_MINTED,
            installation_id,
            expires_at.isoformat(),
            cached,
        )

    def log_dispatched(self, repository: str, sha: str, target: str) -> None:
        """Log a successful repository dispatch."""
        log_info(
            logger,
            "[%s] repository=%s commit=%s target=%s",
            GatewayEventType.DISPATCHED,
            repository,
            short_sha(sha),
            target,
        )

    def log_failed(
        self,
        category: ErrorCategory,
        *,
        repository: str | None,
        detail: str,
    ) -> None:
        """Log a pipeline failure with its diagnostic category."""
        log_error(
            logger,
            "[%s] category=%s repository=%s detail=%s",
            GatewayEventType.FAILED,
            category,
            repository,
            detail,
        )
