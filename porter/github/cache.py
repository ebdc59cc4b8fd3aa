"""Optional in-memory cache of installation tokens.

Each organization owns one slot; the last writer wins and concurrent
refreshes are tolerated. Tokens are treated as expired a fixed margin before
GitHub's ``expires_at`` so a cached token never expires mid-dispatch.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

from porter.common.time import utcnow

if typ.TYPE_CHECKING:
    from porter.common.time import Clock

    from .models import InstallationToken

DEFAULT_REFRESH_MARGIN = dt.timedelta(minutes=5)


class TokenCache(typ.Protocol):
    """Slot store for installation tokens keyed by organization."""

    def get(self, organization: str) -> InstallationToken | None:
        """Return a still-usable token, if one is cached."""
        ...

    def set(self, organization: str, token: InstallationToken) -> None:
        """Store ``token`` for ``organization``."""
        ...

    def invalidate(self, organization: str) -> None:
        """Drop any token cached for ``organization``."""
        ...


class InMemoryTokenCache:
    """Process-local :class:`TokenCache` with an injectable clock."""

    def __init__(
        self,
        *,
        clock: Clock = utcnow,
        refresh_margin: dt.timedelta = DEFAULT_REFRESH_MARGIN,
    ) -> None:
        """Initialise an empty cache."""
        self._clock = clock
        self._refresh_margin = refresh_margin
        self._slots: dict[str, InstallationToken] = {}

    @staticmethod
    def _key(organization: str) -> str:
        return organization.casefold()

    def get(self, organization: str) -> InstallationToken | None:
        """Return the cached token unless it is inside the refresh margin."""
        key = self._key(organization)
        token = self._slots.get(key)
        if token is None:
            return None
        if self._clock() >= token.expires_at - self._refresh_margin:
            self._slots.pop(key, None)
            return None
        return token

    def set(self, organization: str, token: InstallationToken) -> None:
        """Store ``token``, replacing whatever the slot held."""
        self._slots[self._key(organization)] = token

    def invalidate(self, organization: str) -> None:
        """Drop the slot for ``organization``."""
        self._slots.pop(self._key(organization), None)

    def __len__(self) -> int:
        """Return the number of occupied slots, expired or not."""
        return len(self._slots)
