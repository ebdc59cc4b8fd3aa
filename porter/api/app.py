"""Application factory for the Porter Falcon ASGI application.

This module provides ``create_app()`` which builds and configures the
Falcon ASGI application with health endpoints and, when gateway
dependencies are available, the GitHub webhook endpoint.

Usage
-----
Create a health-only app (no configuration)::

    app = create_app()

Create a full app with the webhook endpoint::

    from porter.api.app import AppDependencies, create_app

    service, http_client = build_gateway_service(config)
    deps = AppDependencies(service=service, http_client=http_client)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from porter.api.errors import handle_malformed_payload, handle_unexpected_error
from porter.api.health.resources import HealthResource, ReadyResource
from porter.config import DEFAULT_WEBHOOK_ROUTE
from porter.webhook import MalformedPayloadError

if typ.TYPE_CHECKING:
    import httpx

    from porter.service import GatewayService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    service
        Gateway pipeline handling webhook deliveries.
    http_client
        Shared outbound client; when given, the app closes it on shutdown.
    webhook_route
        Route for the webhook resource. ``/`` is always registered too.

    """

    service: GatewayService
    http_client: httpx.AsyncClient | None = None
    webhook_route: str = DEFAULT_WEBHOOK_ROUTE


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    When *dependencies* is provided the app serves ``POST`` on both ``/``
    and the configured webhook route, and ``/ready`` checks the App private
    key. Otherwise only ``/health`` and ``/ready`` are registered.

    Parameters
    ----------
    dependencies
        Optional application dependencies.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = []
    if dependencies is not None and dependencies.http_client is not None:
        from porter.api.middleware import HTTPClientLifecycle

        middleware.append(HTTPClientLifecycle(dependencies.http_client))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    if dependencies is None:
        app.add_route("/ready", ReadyResource())
    else:
        from porter.api.webhook.resources import WebhookResource

        app.add_route("/ready", ReadyResource(dependencies.service.minter))
        webhook = WebhookResource(dependencies.service)
        app.add_route("/", webhook)
        if dependencies.webhook_route != "/":
            app.add_route(dependencies.webhook_route, webhook)

    # Falcon resolves handlers by the most specific exception type.
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)

    return app
