"""Shared plumbing for GitHub REST calls."""

from __future__ import annotations

import typing as typ

import httpx

from porter import __version__

from .errors import GitHubTransportError

API_VERSION = "2022-11-28"
USER_AGENT = f"porter/{__version__}"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_SERVER_ERROR_THRESHOLD = 500


def is_error(status_code: int) -> bool:
    """Return True for 4xx and 5xx statuses."""
    return status_code >= _HTTP_ERROR_STATUS_THRESHOLD


def is_server_error(status_code: int) -> bool:
    """Return True for 5xx statuses."""
    return status_code >= _HTTP_SERVER_ERROR_THRESHOLD


def github_headers(bearer: str) -> dict[str, str]:
    """Return the headers GitHub expects on every REST call."""
    return {
        "Authorization": f"Bearer {bearer}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
        "User-Agent": USER_AGENT,
    }


async def send(  # noqa: PLR0913 - mirrors httpx.AsyncClient.request
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    bearer: str,
    params: dict[str, typ.Any] | None = None,
    content: bytes | None = None,
) -> httpx.Response:
    """Send a REST request, translating transport failures.

    Raises
    ------
    GitHubTransportError
        If the request times out or never reaches GitHub.

    """
    headers = github_headers(bearer)
    if content is not None:
        headers["Content-Type"] = "application/json"
    path = httpx.URL(url).path
    try:
        return await client.request(
            method,
            url,
            headers=headers,
            params=params,
            content=content,
        )
    except httpx.TimeoutException as exc:
        raise GitHubTransportError.timeout(path) from exc
    except httpx.RequestError as exc:
        raise GitHubTransportError.network_error(path, type(exc).__name__) from exc
