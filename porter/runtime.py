"""Porter runtime entrypoint for container deployments.

This module provides the ASGI application factory used by Granian. It loads
:class:`~porter.config.GatewayConfig` from the environment, builds the
gateway service and delegates to :func:`porter.api.app.create_app`, keeping
the ``porter.runtime:create_app`` entrypoint stable.

Server configuration is driven by environment variables:

- ``PORTER_HOST``: Bind address (default ``0.0.0.0``)
- ``PORTER_PORT``: Listen port (default ``8080``)
- ``PORTER_LOG_LEVEL``: Log level (default ``INFO``)

Gateway configuration (webhook secret, App credentials, dispatch target) is
documented on :meth:`porter.config.GatewayConfig.from_env`.

Run the service directly with ``python -m porter.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from porter.config import GatewayConfig
from porter.errors import GatewayConfigError
from porter.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid PORTER_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the gateway application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application serving the webhook endpoint.

    Raises
    ------
    GatewayConfigError
        If a required variable is missing or a value is invalid. The error is
        logged before it propagates so startup fails loudly.

    """
    from porter.api.app import AppDependencies
    from porter.api.app import create_app as _create_api_app
    from porter.api.factory import build_gateway_service

    try:
        config = GatewayConfig.from_env()
    except GatewayConfigError as exc:
        log_error(logger, "Gateway configuration is invalid: %s", exc)
        raise

    service, http_client = build_gateway_service(config)
    log_info(
        logger,
        "Gateway configured for organization %s dispatching to %s",
        config.organization,
        config.dispatch_repository,
    )
    deps = AppDependencies(
        service=service,
        http_client=http_client,
        webhook_route=config.webhook_route,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Porter runtime server using Granian.

    Reads ``PORTER_HOST``, ``PORTER_PORT``, and ``PORTER_LOG_LEVEL`` from
    the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("PORTER_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("PORTER_PORT", "8080")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("PORTER_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid PORTER_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Porter runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "porter.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
