"""Webhook handling pipeline.

This module provides :class:`GatewayService`, which runs one webhook delivery
through the gateway stages in order:

1. Verify the ``X-Hub-Signature-256`` HMAC over the raw body
2. Ignore anything that is not a ``push`` event
3. Decode the push payload and decide relevance (tracked files, allow-list)
4. Mint an App JWT and exchange it for an installation token
5. Send the ``repository_dispatch`` event to the publish automation

Each stage can short-circuit with its own response; filtering outcomes are
200s so GitHub does not redeliver them, failures are 500s carrying an
:class:`~porter.observability.ErrorCategory`.

Usage
-----
>>> dependencies = GatewayServiceDependencies(
...     registry=registry,
...     minter=AppCredentialMinter(config.app_identity),
...     broker=InstallationTokenBroker(http_client=client, api_url=config.api_url),
...     dispatcher=DispatchClient(http_client=client, api_url=config.api_url),
... )
>>> service = GatewayService(config, dependencies)
>>> response = await service.handle(delivery)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from http import HTTPStatus

import msgspec

from porter.github import (
    CredentialsRejected,
    Dispatched,
    DispatchRejected,
    DispatchUnavailable,
    InstallationUnavailable,
    KeyFormatError,
    KeyImportError,
    Minted,
    NotInstalled,
    RepositoryNotCovered,
    TargetNotFound,
    TokenRejected,
    TokenServiceUnavailable,
    build_dispatch_payload,
)
from porter.github.errors import PKCS8_CONVERSION_HINT
from porter.observability import ErrorCategory, GatewayEventLogger, short_sha
from porter.webhook import (
    MalformedPayloadError,
    decode_push_event,
    filter_relevant,
    verify,
)
from porter.webhook.filter import SkipReason, is_push_event

if typ.TYPE_CHECKING:
    from porter.config import GatewayConfig
    from porter.github import (
        AppCredentialMinter,
        DispatchClient,
        DispatchResult,
        InstallationToken,
        InstallationTokenBroker,
        TokenResult,
    )
    from porter.registry import RepositoryRegistry
    from porter.webhook import PushEvent


@dc.dataclass(frozen=True, slots=True)
class WebhookDelivery:
    """The parts of an inbound request the pipeline needs.

    Attributes
    ----------
    body
        Raw request body, exactly as signed.
    signature
        Value of ``X-Hub-Signature-256``, if present.
    event_type
        Value of ``X-GitHub-Event``, if present.
    delivery_id
        Value of ``X-GitHub-Delivery``, used only for log correlation.

    """

    body: bytes
    signature: str | None
    event_type: str | None
    delivery_id: str | None = None


@dc.dataclass(frozen=True, slots=True)
class GatewayResponse:
    """HTTP status and JSON body returned to the webhook producer."""

    status: HTTPStatus
    body: dict[str, object]
    category: ErrorCategory | None = None


@dc.dataclass(frozen=True, slots=True)
class GatewayServiceDependencies:
    """Collaborators of :class:`GatewayService`.

    Attributes
    ----------
    registry
        Source of the repository allow-list.
    minter
        Signs App JWTs.
    broker
        Exchanges App JWTs for installation tokens.
    dispatcher
        Delivers repository dispatch events.

    """

    registry: RepositoryRegistry
    minter: AppCredentialMinter
    broker: InstallationTokenBroker
    dispatcher: DispatchClient


@dc.dataclass(frozen=True, slots=True)
class _Failure:
    category: ErrorCategory
    detail: str
    hint: str | None = None


class GatewayService:
    """Authenticate, filter and dispatch push webhooks."""

    def __init__(
        self,
        config: GatewayConfig,
        dependencies: GatewayServiceDependencies,
        event_logger: GatewayEventLogger | None = None,
    ) -> None:
        """Configure the service.

        Parameters
        ----------
        config
            Gateway configuration (secret, organization, dispatch target).
        dependencies
            Registry, minter, broker and dispatcher collaborators.
        event_logger
            Structured event logger; a default instance is used when omitted.

        """
        self._config = config
        self._registry = dependencies.registry
        self._minter = dependencies.minter
        self._broker = dependencies.broker
        self._dispatcher = dependencies.dispatcher
        self._events = event_logger or GatewayEventLogger()

    @property
    def minter(self) -> AppCredentialMinter:
        """Return the App JWT minter, used by the readiness probe."""
        return self._minter

    async def handle(self, delivery: WebhookDelivery) -> GatewayResponse:
        """Run ``delivery`` through the pipeline.

        Raises
        ------
        MalformedPayloadError
            If a correctly signed push body cannot be decoded.

        """
        if not verify(delivery.body, delivery.signature, self._config.webhook_secret):
            self._events.log_rejected(
                ErrorCategory.INVALID_SIGNATURE, delivery=delivery.delivery_id
            )
            return GatewayResponse(
                HTTPStatus.UNAUTHORIZED,
                {"error": ErrorCategory.INVALID_SIGNATURE.value},
                ErrorCategory.INVALID_SIGNATURE,
            )

        if not is_push_event(delivery.event_type):
            self._events.log_ignored(SkipReason.EVENT_NOT_HANDLED, repository=None)
            return GatewayResponse(
                HTTPStatus.OK,
                {
                    "message": "ignored",
                    "reason": SkipReason.EVENT_NOT_HANDLED.value,
                    "event": delivery.event_type,
                },
            )

        push = self._decode(delivery)
        repository = push.repository.full_name
        self._events.log_received(repository, push.head_sha, push.author)

        decision = await filter_relevant(
            push,
            self._config.tracked_pattern,
            self._registry,
            event_type=delivery.event_type,
        )
        if not decision.relevant:
            self._events.log_ignored(decision.reason, repository=repository)
            return GatewayResponse(
                HTTPStatus.OK,
                {
                    "message": "ignored",
                    "reason": decision.reason,
                    "repository": repository,
                },
            )

        return await self._authorize_and_dispatch(push)

    def _decode(self, delivery: WebhookDelivery) -> PushEvent:
        try:
            return decode_push_event(delivery.body)
        except msgspec.DecodeError as exc:
            self._events.log_rejected(
                ErrorCategory.MALFORMED_PAYLOAD, delivery=delivery.delivery_id
            )
            raise MalformedPayloadError(
                str(exc), delivery_id=delivery.delivery_id
            ) from exc

    async def _authorize_and_dispatch(self, push: PushEvent) -> GatewayResponse:
        token = await self._obtain_token()
        if isinstance(token, _Failure):
            return self._failure(push, token)

        payload = build_dispatch_payload(
            push, event_type=self._config.dispatch_event_type
        )
        target = self._config.dispatch_repository
        result = await self._dispatcher.dispatch(token, target, payload)
        outcome = self._dispatch_outcome(result)
        if isinstance(outcome, _Failure):
            return self._failure(push, outcome)

        self._events.log_dispatched(push.repository.full_name, push.head_sha, target)
        return GatewayResponse(
            HTTPStatus.OK,
            {
                "message": "Publish triggered",
                "repository": push.repository.full_name,
                "commit": short_sha(push.head_sha),
                "dispatched": True,
            },
        )

    async def _obtain_token(self) -> InstallationToken | _Failure:
        organization = self._config.organization
        cached = self._broker.cached_token(organization)
        if cached is not None:
            self._events.log_token_minted(
                cached.installation_id, cached.expires_at, cached=True
            )
            return cached

        try:
            app_jwt = self._minter.mint()
        except KeyFormatError as exc:
            return _Failure(
                ErrorCategory.KEY_IMPORT_FAILURE, str(exc), PKCS8_CONVERSION_HINT
            )
        except KeyImportError as exc:
            return _Failure(ErrorCategory.KEY_CONTENT_INVALID, str(exc))

        result = await self._broker.get_installation_token(app_jwt, organization)
        if isinstance(result, TokenServiceUnavailable) and result.transient:
            result = await self._broker.get_installation_token(app_jwt, organization)
        return self._token_outcome(result)

    def _token_outcome(self, result: TokenResult) -> InstallationToken | _Failure:
        match result:
            case Minted(token=token, cached=cached):
                self._events.log_token_minted(
                    token.installation_id, token.expires_at, cached=cached
                )
                return token
            case NotInstalled(organization=organization):
                return _Failure(
                    ErrorCategory.APP_NOT_INSTALLED,
                    f"App not installed on organization {organization}",
                )
            case InstallationUnavailable(installation_id=iid, status_code=status):
                return _Failure(
                    ErrorCategory.INSTALLATION_UNAVAILABLE,
                    f"installation {iid} refused token minting with HTTP {status}",
                )
            case CredentialsRejected(status_code=status, stage=stage):
                return _Failure(
                    ErrorCategory.APP_CREDENTIALS_REJECTED,
                    f"App JWT rejected with HTTP {status} during {stage}",
                )
            case TokenServiceUnavailable(detail=detail):
                return _Failure(ErrorCategory.UPSTREAM_UNAVAILABLE, detail)
        typ.assert_never(result)

    def _dispatch_outcome(self, result: DispatchResult) -> None | _Failure:
        match result:
            case Dispatched():
                return None
            case RepositoryNotCovered(repository=target):
                return _Failure(
                    ErrorCategory.REPOSITORY_NOT_COVERED,
                    f"installation does not include {target}",
                )
            case TokenRejected():
                self._broker.invalidate(self._config.organization)
                return _Failure(
                    ErrorCategory.INVALID_TOKEN, "installation token was rejected"
                )
            case TargetNotFound(repository=target):
                return _Failure(
                    ErrorCategory.DISPATCH_TARGET_NOT_FOUND,
                    f"dispatch target {target} not found",
                )
            case DispatchRejected(status_code=status):
                return _Failure(
                    ErrorCategory.DISPATCH_REJECTED,
                    f"dispatch rejected with HTTP {status}",
                )
            case DispatchUnavailable(detail=detail):
                return _Failure(ErrorCategory.UPSTREAM_UNAVAILABLE, detail)
        typ.assert_never(result)

    def _failure(self, push: PushEvent, failure: _Failure) -> GatewayResponse:
        """Log ``failure`` and build its 500 response.

        The body carries the category, repository and short SHA. A fixed
        remediation hint is added only for failures that have one, such as
        the PKCS8 conversion command for a key in the wrong format.
        """
        repository = push.repository.full_name
        self._events.log_failed(
            failure.category,
            repository=repository,
            detail=failure.detail,
        )
        body: dict[str, object] = {
            "error": failure.category.value,
            "repository": repository,
            "commit": short_sha(push.head_sha),
        }
        if failure.hint is not None:
            body["hint"] = failure.hint
        return GatewayResponse(
            HTTPStatus.INTERNAL_SERVER_ERROR, body, failure.category
        )
