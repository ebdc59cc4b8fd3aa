"""Typed views of GitHub push-event payloads.

Only the fields the gateway reads are declared; msgspec ignores the rest of
GitHub's (large) payload during decoding.
"""

from __future__ import annotations

import msgspec

_BRANCH_REF_PREFIX = "refs/heads/"


class PushCommit(msgspec.Struct, kw_only=True):
    """A commit listed in a push payload with its touched paths."""

    id: str = ""
    message: str | None = None
    added: list[str] = msgspec.field(default_factory=list)
    modified: list[str] = msgspec.field(default_factory=list)
    removed: list[str] = msgspec.field(default_factory=list)


class PushRepository(msgspec.Struct, kw_only=True):
    """Repository the push landed in."""

    full_name: str


class PushActor(msgspec.Struct, kw_only=True):
    """Pusher identity; GitHub only guarantees ``name``."""

    name: str | None = None


class PushSender(msgspec.Struct, kw_only=True):
    """Account that triggered the delivery."""

    login: str | None = None


class PushEvent(msgspec.Struct, kw_only=True):
    """Structured view of a ``push`` webhook body."""

    ref: str
    after: str
    repository: PushRepository
    commits: list[PushCommit] = msgspec.field(default_factory=list)
    head_commit: PushCommit | None = None
    pusher: PushActor | None = None
    sender: PushSender | None = None

    @property
    def head_sha(self) -> str:
        """Return the SHA the ref points to after the push."""
        return self.after

    @property
    def branch(self) -> str:
        """Return the branch name with the ``refs/heads/`` prefix removed."""
        return self.ref.removeprefix(_BRANCH_REF_PREFIX)

    @property
    def author(self) -> str:
        """Return the best available identity of who pushed."""
        if self.pusher is not None and self.pusher.name:
            return self.pusher.name
        if self.sender is not None and self.sender.login:
            return self.sender.login
        return "unknown"

    @property
    def head_message(self) -> str:
        """Return the head commit message, or a placeholder."""
        if self.head_commit is not None and self.head_commit.message:
            return self.head_commit.message
        return "No message"

    def changed_paths(self) -> list[str]:
        """Return added and modified paths across all commits, in order."""
        paths: dict[str, None] = {}
        for commit in self.commits:
            for path in (*commit.added, *commit.modified):
                paths.setdefault(path, None)
        return list(paths)


def decode_push_event(raw_body: bytes) -> PushEvent:
    """Decode a raw push body.

    Raises
    ------
    msgspec.DecodeError
        If the body is not JSON or does not fit the push schema.

    """
    return msgspec.json.decode(raw_body, type=PushEvent)
