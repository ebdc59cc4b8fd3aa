"""HMAC-SHA256 verification of webhook deliveries.

GitHub signs every delivery with the shared webhook secret and sends the
result as ``X-Hub-Signature-256: sha256=<hex digest>``. Verification runs on
the raw body bytes before any parsing.
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the prefixed signature GitHub would send for ``raw_body``."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify(raw_body: bytes, signature_header: str | None, secret: str | None) -> bool:
    """Return True when ``signature_header`` matches the body's HMAC.

    A missing header or secret never verifies. The comparison is
    constant-time over the full prefixed value.
    """
    if not signature_header or not secret:
        return False
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(
        expected.encode("ascii"),
        signature_header.strip().encode("utf-8"),
    )
