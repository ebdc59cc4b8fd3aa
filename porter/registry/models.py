"""Repository registry document models."""

from __future__ import annotations

import typing as typ

import msgspec

from porter.common.slug import slug_from_url, slugs_equal

ACTIVE_STATUS = "active"


class RepositoryRegistryEntry(msgspec.Struct, kw_only=True, frozen=True):
    """One allow-listed repository.

    Entries identify their repository either by ``fullName`` (``owner/name``)
    or by its GitHub ``url``. An entry without a ``status`` is inactive.
    """

    status: str = ""
    full_name: str | None = msgspec.field(default=None, name="fullName")
    url: str | None = None

    @property
    def slug(self) -> str | None:
        """Return the ``owner/name`` slug this entry refers to."""
        if self.full_name:
            return self.full_name.strip()
        if self.url:
            return slug_from_url(self.url)
        return None

    @property
    def is_active(self) -> bool:
        """Return True when dispatch is enabled for the repository."""
        return self.status.strip().lower() == ACTIVE_STATUS


class RegistryDocument(msgspec.Struct, kw_only=True):
    """Top-level shape of the allow-list JSON document."""

    repositories: list[RepositoryRegistryEntry] = msgspec.field(default_factory=list)


def find_active_entry(
    entries: typ.Iterable[RepositoryRegistryEntry],
    full_name: str,
) -> RepositoryRegistryEntry | None:
    """Return the active entry for ``full_name``, if one exists."""
    for entry in entries:
        slug = entry.slug
        if slug is not None and slugs_equal(slug, full_name) and entry.is_active:
            return entry
    return None
