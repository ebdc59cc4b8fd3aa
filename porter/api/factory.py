"""Factory for building a GatewayService from configuration.

This module provides ``build_gateway_service()`` which wires the registry
reader, App JWT minter, installation token broker and dispatch client around
one shared ``httpx.AsyncClient``.

Usage
-----
Build a service for the API layer::

    from porter.api.factory import build_gateway_service

    service, http_client = build_gateway_service(GatewayConfig.from_env())

"""

from __future__ import annotations

import typing as typ

import httpx

from porter.github import (
    AppCredentialMinter,
    DispatchClient,
    InMemoryTokenCache,
    InstallationTokenBroker,
)
from porter.github.rest import USER_AGENT
from porter.observability import GatewayEventLogger
from porter.registry import HTTPRepositoryRegistry
from porter.service import GatewayService, GatewayServiceDependencies

if typ.TYPE_CHECKING:
    from porter.config import GatewayConfig
    from porter.github import TokenCache

__all__ = ["build_gateway_service", "build_http_client"]


def build_http_client(config: GatewayConfig) -> httpx.AsyncClient:
    """Return the shared outbound client with the configured timeout."""
    return httpx.AsyncClient(
        timeout=config.timeout_s,
        headers={"User-Agent": USER_AGENT},
    )


def build_gateway_service(
    config: GatewayConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> tuple[GatewayService, httpx.AsyncClient]:
    """Build a ``GatewayService`` and return it with its HTTP client.

    Parameters
    ----------
    config
        Loaded gateway configuration.
    http_client
        Client to use for every outbound call; one is created from
        ``config`` when omitted.

    Returns
    -------
    tuple[GatewayService, httpx.AsyncClient]
        The service and the client the caller is responsible for closing.

    """
    client = http_client or build_http_client(config)
    cache: TokenCache | None = (
        InMemoryTokenCache() if config.token_cache_enabled else None
    )
    dependencies = GatewayServiceDependencies(
        registry=HTTPRepositoryRegistry(
            config.registry_url,
            http_client=client,
            token=config.registry_token,
        ),
        minter=AppCredentialMinter(config.app_identity),
        broker=InstallationTokenBroker(
            http_client=client,
            api_url=config.api_url,
            cache=cache,
        ),
        dispatcher=DispatchClient(http_client=client, api_url=config.api_url),
    )
    service = GatewayService(config, dependencies, event_logger=GatewayEventLogger())
    return service, client
