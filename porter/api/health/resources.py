"""Health probe resources for liveness and readiness checks.

Liveness never touches configuration. Readiness imports the GitHub App
private key, so a deployment with an unconverted PKCS1 key is reported as
not ready before the first webhook fails.

Usage
-----
Register health endpoints on the Falcon app::

    from porter.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(minter))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from porter.github import KeyFormatError, KeyImportError
from porter.observability import ErrorCategory

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from porter.github import AppCredentialMinter

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Responds ``{"status": "ready"}`` when the App private key imports (or when
    no minter is configured), and HTTP 503 with the key failure category
    otherwise.

    Parameters
    ----------
    minter
        App JWT minter whose key is checked; ``None`` in health-only mode.

    """

    def __init__(self, minter: AppCredentialMinter | None = None) -> None:
        """Initialise the probe."""
        self._minter = minter

    def _not_ready_reason(self) -> ErrorCategory | None:
        if self._minter is None:
            return None
        try:
            self._minter.check_key()
        except KeyFormatError:
            return ErrorCategory.KEY_IMPORT_FAILURE
        except KeyImportError:
            return ErrorCategory.KEY_CONTENT_INVALID
        return None

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        reason = self._not_ready_reason()
        if reason is None:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return
        resp.media = {"status": "not-ready", "reason": reason.value}
        resp.status = HTTPStatus.SERVICE_UNAVAILABLE
