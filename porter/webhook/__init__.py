"""Inbound webhook verification, parsing and relevance filtering."""

from __future__ import annotations

from .errors import MalformedPayloadError
from .filter import FilterDecision, SkipReason, filter_relevant, matches_tracked
from .models import PushEvent, decode_push_event
from .signature import SIGNATURE_HEADER, compute_signature, verify

__all__ = [
    "SIGNATURE_HEADER",
    "FilterDecision",
    "MalformedPayloadError",
    "PushEvent",
    "SkipReason",
    "compute_signature",
    "decode_push_event",
    "filter_relevant",
    "matches_tracked",
    "verify",
]
