"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, even though they use ``/`` as a separator, so they should be
parsed using these helpers rather than ``pathlib``.
"""

from __future__ import annotations

_GITHUB_WEB_PREFIXES = ("https://github.com/", "http://github.com/")


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Parse a repository slug into owner and name.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("The1Studio/UPMAutoPublisher")
    ('The1Studio', 'UPMAutoPublisher')

    """
    if slug.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = slug.split("/")
    if not owner or not name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def slug_from_url(url: str) -> str:
    """Return the ``owner/name`` slug for a GitHub web URL.

    Values that are not GitHub web URLs are returned stripped but otherwise
    untouched, so a bare slug passes through.

    Examples
    --------
    >>> slug_from_url("https://github.com/octo/reef")
    'octo/reef'
    >>> slug_from_url("https://github.com/octo/reef.git/")
    'octo/reef'

    """
    value = url.strip()
    for prefix in _GITHUB_WEB_PREFIXES:
        if value.startswith(prefix):
            value = value.removeprefix(prefix)
            break
    value = value.rstrip("/")
    return value.removesuffix(".git")


def slugs_equal(left: str, right: str) -> bool:
    """Compare slugs the way GitHub does: case-insensitively."""
    return left.casefold() == right.casefold()
