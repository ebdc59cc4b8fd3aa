"""Webhook receiver resource.

The resource reads the raw body before anything else touches it, because the
HMAC signature covers the exact bytes GitHub sent, then hands the delivery to
:class:`~porter.service.GatewayService` and renders its response.

Usage
-----
Register the resource on the Falcon app::

    from porter.api.webhook.resources import WebhookResource

    app.add_route("/webhooks/github", WebhookResource(service))

"""

from __future__ import annotations

import typing as typ

from porter.service import WebhookDelivery
from porter.webhook import SIGNATURE_HEADER

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from porter.service import GatewayService

__all__ = ["DELIVERY_HEADER", "EVENT_HEADER", "WebhookResource"]

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


class WebhookResource:
    """Receive GitHub webhook deliveries on POST."""

    def __init__(self, service: GatewayService) -> None:
        """Initialise the resource with the gateway pipeline."""
        self._service = service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle a webhook delivery.

        Parameters
        ----------
        req
            Falcon request carrying the signed body and GitHub headers.
        resp
            Falcon response populated from the pipeline outcome.

        """
        body = await req.stream.read()
        delivery = WebhookDelivery(
            body=body,
            signature=req.get_header(SIGNATURE_HEADER),
            event_type=req.get_header(EVENT_HEADER),
            delivery_id=req.get_header(DELIVERY_HEADER),
        )
        result = await self._service.handle(delivery)
        resp.status = result.status
        resp.media = result.body
