"""Webhook payload errors."""

from __future__ import annotations


class MalformedPayloadError(ValueError):
    """Raised when a signed push body cannot be decoded as a push event."""

    def __init__(self, detail: str, *, delivery_id: str | None = None) -> None:
        """Initialise with a decode detail and the delivery identifier."""
        self.detail = detail
        self.delivery_id = delivery_id
        super().__init__(f"Push payload is malformed: {detail}")
