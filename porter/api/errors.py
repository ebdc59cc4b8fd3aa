"""Falcon error handlers for the API layer.

Handlers translate exceptions that escape a resource into JSON bodies
carrying only an :class:`~porter.observability.ErrorCategory`; exception text
and tracebacks go to the log, never to the webhook producer.

Usage
-----
Register error handlers on the Falcon app::

    from porter.api.errors import handle_malformed_payload, handle_unexpected_error

    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)
    app.add_error_handler(Exception, handle_unexpected_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from porter.logging import get_logger, log_exception
from porter.observability import ErrorCategory

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from porter.webhook import MalformedPayloadError

__all__ = ["handle_malformed_payload", "handle_unexpected_error"]

logger = get_logger(__name__)


async def handle_malformed_payload(
    _req: Request,
    resp: Response,
    ex: MalformedPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``MalformedPayloadError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The decode failure, including the delivery identifier.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {"error": ErrorCategory.MALFORMED_PAYLOAD.value}
    if ex.delivery_id is not None:
        media["delivery"] = ex.delivery_id
    resp.media = media


async def handle_unexpected_error(
    req: Request,
    resp: Response,
    ex: Exception,
    _params: dict[str, typ.Any],
) -> None:
    """Map any other exception to an HTTP 500 ``internal-error`` response.

    Falcon picks the most specific registered handler, so ``HTTPError``
    subclasses such as 405 keep their own handling.
    """
    log_exception(logger, f"Unhandled error for {req.method} {req.path}", ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": ErrorCategory.INTERNAL_ERROR.value}
