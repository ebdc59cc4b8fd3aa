"""Unit tests for the porter.runtime module."""

from __future__ import annotations

from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from porter.errors import GatewayConfigError
from porter.runtime import _parse_port, create_app


@pytest.fixture
def gateway_env(monkeypatch: pytest.MonkeyPatch, pkcs8_pem: str) -> None:
    """Provide the minimum environment for the gateway."""
    monkeypatch.setenv("PORTER_WEBHOOK_SECRET", "s3cret")
    monkeypatch.setenv("PORTER_GITHUB_APP_ID", "123456")
    monkeypatch.setenv("PORTER_GITHUB_APP_PRIVATE_KEY", pkcs8_pem)
    monkeypatch.setenv("PORTER_GITHUB_ORG", "The1Studio")
    monkeypatch.setenv("PORTER_DISPATCH_REPOSITORY", "The1Studio/UPMAutoPublisher")
    monkeypatch.setenv("PORTER_REGISTRY_URL", "https://registry.test/repos.json")
    monkeypatch.delenv("PORTER_WEBHOOK_ROUTE", raising=False)
    monkeypatch.delenv("PORTER_TOKEN_CACHE", raising=False)
    monkeypatch.delenv("PORTER_HTTP_TIMEOUT_S", raising=False)


@pytest.mark.usefixtures("gateway_env")
class TestCreateApp:
    """Tests for the runtime create_app factory."""

    def test_returns_falcon_app(self) -> None:
        """create_app returns a Falcon ASGI App instance."""
        assert isinstance(create_app(), falcon.asgi.App)

    def test_health_and_ready(self) -> None:
        """The configured app serves both probes."""
        client = falcon.testing.TestClient(create_app())
        assert client.simulate_get("/health").json == {"status": "ok"}
        assert client.simulate_get("/ready").json == {"status": "ready"}

    def test_webhook_route_rejects_unsigned_post(self) -> None:
        """The webhook route is mounted and enforces signatures."""
        client = falcon.testing.TestClient(create_app())
        result = client.simulate_post("/webhooks/github", body=b"{}")
        assert result.status_code == HTTPStatus.UNAUTHORIZED


def test_create_app_fails_without_configuration(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Missing configuration aborts startup."""
    monkeypatch.delenv("PORTER_DISPATCH_REPOSITORY", raising=False)
    with pytest.raises(GatewayConfigError, match="PORTER_DISPATCH_REPOSITORY"):
        create_app()


class TestParsePort:
    """Tests for _parse_port."""

    @pytest.mark.parametrize("value", ["1", "8080", "65535"])
    def test_accepts_valid_ports(self, value: str) -> None:
        """Ports inside 1-65535 are returned as integers."""
        assert _parse_port(value) == int(value)

    @pytest.mark.parametrize("value", ["0", "65536", "http", ""])
    def test_rejects_invalid_ports(self, value: str) -> None:
        """Anything else exits the process."""
        with pytest.raises(SystemExit):
            _parse_port(value)
