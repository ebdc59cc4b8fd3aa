"""HTTP client for the repository allow-list."""

from __future__ import annotations

import typing as typ

import httpx
import msgspec

from .errors import RegistryUnavailableError
from .models import RegistryDocument, RepositoryRegistryEntry

_HTTP_ERROR_STATUS_THRESHOLD = 400


class RepositoryRegistry(typ.Protocol):
    """Source of allow-listed repositories."""

    async def fetch_entries(self) -> list[RepositoryRegistryEntry]:
        """Return the current allow-list entries."""
        ...


class HTTPRepositoryRegistry:
    """Fetch the allow-list document from a URL on every call.

    Parameters
    ----------
    url
        Location of the JSON registry document.
    http_client
        Shared client carrying the gateway's timeout and user agent.
    token
        Optional bearer token for private registry locations.

    """

    def __init__(
        self,
        url: str,
        *,
        http_client: httpx.AsyncClient,
        token: str | None = None,
    ) -> None:
        """Initialise the registry reader."""
        self._url = url
        self._client = http_client
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def fetch_entries(self) -> list[RepositoryRegistryEntry]:
        """Fetch and decode the registry document.

        Raises
        ------
        RegistryUnavailableError
            If the request fails, returns an error status, or the body is not
            a registry document.

        """
        try:
            response = await self._client.get(self._url, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise RegistryUnavailableError.timeout() from exc
        except httpx.RequestError as exc:
            raise RegistryUnavailableError.network_error(type(exc).__name__) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise RegistryUnavailableError.http_error(response.status_code)

        try:
            document = msgspec.json.decode(response.content, type=RegistryDocument)
        except msgspec.DecodeError as exc:
            raise RegistryUnavailableError.invalid_document(str(exc)) from exc
        return document.repositories
