"""Relevance filtering for push events.

A push is relevant when it is a ``push`` event, at least one added or
modified path matches the tracked glob, and the repository has an active
entry in the allow-list. The decision is a pure function of the payload and
a registry snapshot; only :func:`filter_relevant` performs the registry read,
and it fails closed when that read breaks.
"""

from __future__ import annotations

import dataclasses
import enum
import fnmatch
import typing as typ

from porter.logging import get_logger, log_warning
from porter.registry.errors import RegistryUnavailableError
from porter.registry.models import find_active_entry

if typ.TYPE_CHECKING:
    from porter.registry.client import RepositoryRegistry
    from porter.registry.models import RepositoryRegistryEntry

    from .models import PushEvent

logger = get_logger(__name__)

PUSH_EVENT = "push"
_ANY_DIRECTORY_PREFIX = "**/"


class SkipReason(enum.StrEnum):
    """Why an event was not dispatched. None of these are errors."""

    EVENT_NOT_HANDLED = "event type not handled"
    NO_TRACKED_CHANGE = "no tracked file changed"
    NOT_REGISTERED = "repository not registered/disabled"
    REGISTRY_UNAVAILABLE = "repository registry unavailable"


RELEVANT_REASON = "tracked file changed"


@dataclasses.dataclass(frozen=True, slots=True)
class FilterDecision:
    """Outcome of relevance filtering."""

    relevant: bool
    reason: str
    matched_paths: tuple[str, ...] = ()

    @classmethod
    def skip(cls, reason: SkipReason) -> FilterDecision:
        """Return a not-relevant decision."""
        return cls(relevant=False, reason=reason.value)


def is_push_event(event_type: str | None) -> bool:
    """Return True for the only event type the gateway handles."""
    return (event_type or "").strip().lower() == PUSH_EVENT


def matches_tracked(path: str, pattern: str) -> bool:
    """Return True when ``path`` matches the tracked glob.

    ``*`` crosses directory separators, as with :mod:`fnmatch`. A leading
    ``**/`` additionally matches files at the repository root.

    Examples
    --------
    >>> matches_tracked("packages/foo/package.json", "**/package.json")
    True
    >>> matches_tracked("package.json", "**/package.json")
    True
    >>> matches_tracked("README.md", "**/package.json")
    False

    """
    if fnmatch.fnmatchcase(path, pattern):
        return True
    if pattern.startswith(_ANY_DIRECTORY_PREFIX):
        return fnmatch.fnmatchcase(path, pattern.removeprefix(_ANY_DIRECTORY_PREFIX))
    return False


def tracked_changes(push: PushEvent, pattern: str) -> tuple[str, ...]:
    """Return the added or modified paths matching ``pattern``."""
    return tuple(
        path for path in push.changed_paths() if matches_tracked(path, pattern)
    )


def decide(
    event_type: str | None,
    push: PushEvent,
    tracked_pattern: str,
    entries: typ.Iterable[RepositoryRegistryEntry],
) -> FilterDecision:
    """Decide relevance against a registry snapshot without any I/O."""
    if not is_push_event(event_type):
        return FilterDecision.skip(SkipReason.EVENT_NOT_HANDLED)

    matched = tracked_changes(push, tracked_pattern)
    if not matched:
        return FilterDecision.skip(SkipReason.NO_TRACKED_CHANGE)

    if find_active_entry(entries, push.repository.full_name) is None:
        return FilterDecision.skip(SkipReason.NOT_REGISTERED)

    return FilterDecision(relevant=True, reason=RELEVANT_REASON, matched_paths=matched)


async def filter_relevant(
    push: PushEvent,
    tracked_pattern: str,
    registry: RepositoryRegistry,
    *,
    event_type: str | None = PUSH_EVENT,
) -> FilterDecision:
    """Decide relevance, reading the registry only when the push qualifies.

    A registry read that raises for any reason yields a not-relevant decision;
    the exception is logged and never propagated.
    """
    # With an empty snapshot, NOT_REGISTERED means every cheap check passed.
    precheck = decide(event_type, push, tracked_pattern, ())
    if precheck.reason != SkipReason.NOT_REGISTERED:
        return precheck

    try:
        entries = await registry.fetch_entries()
    except RegistryUnavailableError as exc:
        log_warning(
            logger,
            "Repository registry read failed for %s: %s (status=%s)",
            push.repository.full_name,
            exc,
            exc.status_code,
        )
        return FilterDecision.skip(SkipReason.REGISTRY_UNAVAILABLE)
    except Exception as exc:  # noqa: BLE001 - registry failures must fail closed
        log_warning(
            logger,
            "Repository registry read failed for %s: %s",
            push.repository.full_name,
            type(exc).__name__,
        )
        return FilterDecision.skip(SkipReason.REGISTRY_UNAVAILABLE)

    return decide(event_type, push, tracked_pattern, entries)
