"""Typed domain models for GitHub App authentication and dispatch."""

from __future__ import annotations

import dataclasses
import datetime as dt

import msgspec


@dataclasses.dataclass(frozen=True, slots=True)
class AppIdentity:
    """Credentials identifying the gateway as a registered GitHub App.

    The private key is PEM text and is never included in ``repr()``.
    """

    app_id: int
    private_key_pem: str = dataclasses.field(repr=False)


@dataclasses.dataclass(frozen=True, slots=True)
class SignedAppJWT:
    """A compact RS256 JWT asserting the App identity."""

    header: dict[str, str]
    claims: dict[str, int]
    signing_input: str
    signature: str = dataclasses.field(repr=False)

    @property
    def token(self) -> str:
        """Return the three-segment compact serialisation."""
        return f"{self.signing_input}.{self.signature}"


@dataclasses.dataclass(frozen=True, slots=True)
class InstallationToken:
    """Installation-scoped bearer token returned by GitHub."""

    token: str = dataclasses.field(repr=False)
    expires_at: dt.datetime
    installation_id: int


class InstallationAccount(msgspec.Struct, kw_only=True):
    """Account an App installation is bound to.

    Enterprise installations carry a ``slug`` instead of a ``login``.
    """

    login: str | None = None


class Installation(msgspec.Struct, kw_only=True):
    """Entry from ``GET /app/installations``."""

    id: int
    account: InstallationAccount | None = None


class AccessTokenResponse(msgspec.Struct, kw_only=True):
    """Body of ``POST /app/installations/{id}/access_tokens``."""

    token: str
    expires_at: dt.datetime


class ClientPayload(msgspec.Struct, kw_only=True):
    """Source-change description consumed by the downstream workflow."""

    repository: str
    commit_sha: str
    commit_message: str
    commit_author: str
    branch: str
    package_path: str = ""


class DispatchPayload(msgspec.Struct, kw_only=True):
    """Body of ``POST /repos/{owner}/{repo}/dispatches``."""

    event_type: str
    client_payload: ClientPayload
