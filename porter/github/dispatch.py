"""Repository dispatch delivery.

A successful dispatch only means GitHub accepted the event; the downstream
workflow's outcome is never observed. Failures are classified so an
installation that simply does not cover the target repository (403) is never
confused with a bad or expired token (401).
"""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

from porter.common.slug import parse_repo_slug

from .errors import GitHubTransportError
from .models import ClientPayload, DispatchPayload
from .rest import (
    HTTP_FORBIDDEN,
    HTTP_NOT_FOUND,
    HTTP_UNAUTHORIZED,
    is_error,
    is_server_error,
    send,
)

if typ.TYPE_CHECKING:
    import httpx

    from porter.webhook.models import PushEvent

    from .models import InstallationToken


@dataclasses.dataclass(frozen=True, slots=True)
class Dispatched:
    """GitHub accepted the dispatch event."""

    status_code: int


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryNotCovered:
    """The installation's repository grant excludes the target."""

    repository: str


@dataclasses.dataclass(frozen=True, slots=True)
class TokenRejected:
    """The installation token was invalid or expired."""


@dataclasses.dataclass(frozen=True, slots=True)
class TargetNotFound:
    """The target repository does not exist or is invisible to the App."""

    repository: str


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchRejected:
    """GitHub refused the request for another client-side reason."""

    status_code: int


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchUnavailable:
    """Network failure or 5xx; the webhook producer's redelivery covers it."""

    detail: str
    status_code: int | None = None


DispatchResult = (
    Dispatched
    | RepositoryNotCovered
    | TokenRejected
    | TargetNotFound
    | DispatchRejected
    | DispatchUnavailable
)


def build_dispatch_payload(
    push: PushEvent,
    *,
    event_type: str,
    package_path: str = "",
) -> DispatchPayload:
    """Describe ``push`` for the downstream publish workflow.

    ``package_path`` is left empty so the workflow detects changed packages
    itself.
    """
    return DispatchPayload(
        event_type=event_type,
        client_payload=ClientPayload(
            repository=push.repository.full_name,
            commit_sha=push.head_sha,
            commit_message=push.head_message,
            commit_author=push.author,
            branch=push.branch,
            package_path=package_path,
        ),
    )


class DispatchClient:
    """Send ``repository_dispatch`` events with an installation token."""

    def __init__(self, *, http_client: httpx.AsyncClient, api_url: str) -> None:
        """Initialise the client."""
        self._client = http_client
        self._api_url = api_url.rstrip("/")

    async def dispatch(
        self,
        token: InstallationToken,
        target_repository: str,
        payload: DispatchPayload,
    ) -> DispatchResult:
        """Deliver ``payload`` to ``target_repository`` exactly once."""
        owner, name = parse_repo_slug(target_repository)
        try:
            response = await send(
                self._client,
                "POST",
                f"{self._api_url}/repos/{owner}/{name}/dispatches",
                bearer=token.token,
                content=msgspec.json.encode(payload),
            )
        except GitHubTransportError as exc:
            return DispatchUnavailable(str(exc))

        status = response.status_code
        if not is_error(status):
            return Dispatched(status)
        if status == HTTP_UNAUTHORIZED:
            return TokenRejected()
        if status == HTTP_FORBIDDEN:
            return RepositoryNotCovered(target_repository)
        if status == HTTP_NOT_FOUND:
            return TargetNotFound(target_repository)
        if is_server_error(status):
            return DispatchUnavailable(f"dispatch failed with HTTP {status}", status)
        return DispatchRejected(status)
