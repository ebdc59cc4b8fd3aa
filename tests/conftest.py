"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from porter.config import GatewayConfig
from porter.github import AppIdentity
from tests.helpers.github_stub import (
    API_URL,
    APP_ID,
    DISPATCH_REPOSITORY,
    ORGANIZATION,
    REGISTRY_URL,
    GitHubStub,
)
from tests.helpers.push_events import WEBHOOK_SECRET

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _private_pem(
    key: rsa.RSAPrivateKey, private_format: serialization.PrivateFormat
) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=private_format,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Return one RSA key shared by the whole session; generation is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """Return the session key as ``BEGIN PRIVATE KEY`` PEM."""
    return _private_pem(rsa_private_key, serialization.PrivateFormat.PKCS8)


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """Return the session key as ``BEGIN RSA PRIVATE KEY`` PEM."""
    return _private_pem(rsa_private_key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture
def make_config(pkcs8_pem: str) -> cabc.Callable[..., GatewayConfig]:
    """Return a factory for gateway configs pointing at the GitHub stub."""

    def _make(**overrides: typ.Any) -> GatewayConfig:  # noqa: ANN401
        private_key = overrides.pop("private_key_pem", pkcs8_pem)
        values: dict[str, typ.Any] = {
            "webhook_secret": WEBHOOK_SECRET,
            "app_identity": AppIdentity(app_id=APP_ID, private_key_pem=private_key),
            "organization": ORGANIZATION,
            "dispatch_repository": DISPATCH_REPOSITORY,
            "registry_url": REGISTRY_URL,
            "api_url": API_URL,
        }
        values.update(overrides)
        return GatewayConfig(**values)

    return _make


@pytest.fixture
def gateway_config(make_config: cabc.Callable[..., GatewayConfig]) -> GatewayConfig:
    """Return a gateway config using the PKCS8 session key."""
    return make_config()


@pytest.fixture
def github_stub() -> GitHubStub:
    """Return a GitHub stub with the App installed and the test repo active."""
    return GitHubStub(organization=ORGANIZATION)


@pytest.fixture
def stub_client(github_stub: GitHubStub) -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient`` routed to the GitHub stub."""
    return github_stub.client()
