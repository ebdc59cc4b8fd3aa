"""Exchange of App JWTs for installation access tokens.

The exchange has two hops, each with its own failure meaning:

1. **Discover**: ``GET /app/installations`` finds the installation bound to
   the organization. No match means the App is not installed there.
2. **Mint**: ``POST /app/installations/{id}/access_tokens`` returns a token
   valid for about an hour. A 4xx here means the installation was removed or
   covers no repositories.

Results are returned as tagged dataclasses rather than raised, so callers
branch on the exact outcome with ``match``. The broker never retries.
"""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

from porter.logging import get_logger, log_warning

from .errors import GitHubTransportError
from .models import AccessTokenResponse, Installation, InstallationToken
from .rest import (
    HTTP_FORBIDDEN,
    HTTP_UNAUTHORIZED,
    is_error,
    is_server_error,
    send,
)

if typ.TYPE_CHECKING:
    import httpx

    from .cache import TokenCache
    from .models import SignedAppJWT

logger = get_logger(__name__)

INSTALLATIONS_PAGE_SIZE = 100
_MAX_INSTALLATION_PAGES = 10


@dataclasses.dataclass(frozen=True, slots=True)
class Minted:
    """An installation token is available."""

    token: InstallationToken
    cached: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class NotInstalled:
    """The App has no installation on the organization."""

    organization: str


@dataclasses.dataclass(frozen=True, slots=True)
class InstallationUnavailable:
    """The installation exists but GitHub refused to mint a token for it."""

    installation_id: int
    status_code: int


@dataclasses.dataclass(frozen=True, slots=True)
class CredentialsRejected:
    """GitHub did not accept the App JWT."""

    status_code: int
    stage: typ.Literal["discover", "mint"]


@dataclasses.dataclass(frozen=True, slots=True)
class TokenServiceUnavailable:
    """GitHub could not be reached or answered unusably."""

    detail: str
    status_code: int | None = None

    @property
    def transient(self) -> bool:
        """Return True when a single retry may succeed."""
        return self.status_code is None or is_server_error(self.status_code)


TokenResult = (
    Minted
    | NotInstalled
    | InstallationUnavailable
    | CredentialsRejected
    | TokenServiceUnavailable
)


@dataclasses.dataclass(frozen=True, slots=True)
class _Discovered:
    installation_id: int


class InstallationTokenBroker:
    """Resolve and mint installation tokens for an organization.

    Parameters
    ----------
    http_client
        Shared client carrying the gateway timeout.
    api_url
        Base URL of the GitHub REST API.
    cache
        Optional token cache; when omitted every call performs both hops.

    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        api_url: str,
        cache: TokenCache | None = None,
    ) -> None:
        """Initialise the broker."""
        self._client = http_client
        self._api_url = api_url.rstrip("/")
        self._cache = cache

    def cached_token(self, organization: str) -> InstallationToken | None:
        """Return a cached, still-usable token for ``organization``."""
        if self._cache is None:
            return None
        return self._cache.get(organization)

    def invalidate(self, organization: str) -> None:
        """Forget any cached token for ``organization``."""
        if self._cache is not None:
            self._cache.invalidate(organization)

    async def get_installation_token(
        self,
        app_jwt: SignedAppJWT,
        organization: str,
    ) -> TokenResult:
        """Return an installation token for ``organization``."""
        cached = self.cached_token(organization)
        if cached is not None:
            return Minted(cached, cached=True)

        try:
            discovered = await self._discover(app_jwt, organization)
            if not isinstance(discovered, _Discovered):
                return discovered
            result = await self._mint(app_jwt, discovered.installation_id)
        except GitHubTransportError as exc:
            return TokenServiceUnavailable(str(exc))

        if isinstance(result, Minted) and self._cache is not None:
            self._cache.set(organization, result.token)
        return result

    async def _discover(
        self,
        app_jwt: SignedAppJWT,
        organization: str,
    ) -> _Discovered | TokenResult:
        wanted = organization.casefold()
        for page in range(1, _MAX_INSTALLATION_PAGES + 1):
            response = await send(
                self._client,
                "GET",
                f"{self._api_url}/app/installations",
                bearer=app_jwt.token,
                params={"per_page": INSTALLATIONS_PAGE_SIZE, "page": page},
            )
            status = response.status_code
            if status in {HTTP_UNAUTHORIZED, HTTP_FORBIDDEN}:
                return CredentialsRejected(status, "discover")
            if is_error(status):
                return TokenServiceUnavailable(
                    f"listing installations failed with HTTP {status}", status
                )
            try:
                installations = msgspec.json.decode(
                    response.content, type=list[Installation]
                )
            except msgspec.DecodeError:
                return TokenServiceUnavailable(
                    "installations response was malformed", status
                )

            for installation in installations:
                account = installation.account
                if (
                    account is not None
                    and account.login
                    and account.login.casefold() == wanted
                ):
                    return _Discovered(installation.id)
            if len(installations) < INSTALLATIONS_PAGE_SIZE:
                break
        else:
            log_warning(
                logger,
                "Stopped scanning installations after %d pages",
                _MAX_INSTALLATION_PAGES,
            )
        return NotInstalled(organization)

    async def _mint(self, app_jwt: SignedAppJWT, installation_id: int) -> TokenResult:
        response = await send(
            self._client,
            "POST",
            f"{self._api_url}/app/installations/{installation_id}/access_tokens",
            bearer=app_jwt.token,
        )
        status = response.status_code
        if status == HTTP_UNAUTHORIZED:
            return CredentialsRejected(status, "mint")
        if is_server_error(status):
            return TokenServiceUnavailable(
                f"minting installation token failed with HTTP {status}", status
            )
        if is_error(status):
            return InstallationUnavailable(installation_id, status)
        try:
            body = msgspec.json.decode(response.content, type=AccessTokenResponse)
        except msgspec.DecodeError:
            return TokenServiceUnavailable(
                "access token response was malformed", status
            )
        return Minted(
            InstallationToken(
                token=body.token,
                expires_at=body.expires_at,
                installation_id=installation_id,
            )
        )
