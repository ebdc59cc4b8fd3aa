"""HTTP client lifecycle middleware for Falcon ASGI applications.

The registry reader, token broker and dispatch client share one
``httpx.AsyncClient`` so connections to GitHub are pooled across requests.
This middleware closes that client when the ASGI server shuts down.

Usage
-----
Register the middleware when creating the Falcon app::

    from porter.api.middleware import HTTPClientLifecycle

    app = falcon.asgi.App(middleware=[HTTPClientLifecycle(http_client)])

"""

from __future__ import annotations

import typing as typ

import httpx

from porter.logging import get_logger, log_exception, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["HTTPClientLifecycle"]

logger = get_logger(__name__)


class HTTPClientLifecycle:
    """Falcon middleware owning the shared outbound HTTP client.

    Parameters
    ----------
    http_client
        Client closed on lifespan shutdown.

    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        """Initialise the middleware with the client it owns."""
        self._client = http_client

    async def process_startup(
        self,
        _scope: cabc.Mapping[str, typ.Any],
        _event: cabc.Mapping[str, typ.Any],
    ) -> None:
        """Log that outbound calls are ready."""
        log_info(logger, "Outbound HTTP client ready")

    async def process_shutdown(
        self,
        _scope: cabc.Mapping[str, typ.Any],
        _event: cabc.Mapping[str, typ.Any],
    ) -> None:
        """Close the shared client, returning pooled connections."""
        try:
            await self._client.aclose()
        except httpx.HTTPError as exc:
            log_exception(logger, "Closing the outbound HTTP client failed", exc)
            raise
