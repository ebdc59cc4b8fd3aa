"""GitHub App authentication and repository dispatch primitives."""

from __future__ import annotations

from .app_jwt import AppCredentialMinter, build_claims, mint_app_jwt
from .cache import InMemoryTokenCache, TokenCache
from .dispatch import (
    DispatchClient,
    Dispatched,
    DispatchRejected,
    DispatchResult,
    DispatchUnavailable,
    RepositoryNotCovered,
    TargetNotFound,
    TokenRejected,
    build_dispatch_payload,
)
from .errors import KeyContentError, KeyFormatError, KeyImportError
from .keys import RSASigner, Signer
from .models import AppIdentity, DispatchPayload, InstallationToken, SignedAppJWT
from .tokens import (
    CredentialsRejected,
    InstallationTokenBroker,
    InstallationUnavailable,
    Minted,
    NotInstalled,
    TokenResult,
    TokenServiceUnavailable,
)

__all__ = [
    "AppCredentialMinter",
    "AppIdentity",
    "CredentialsRejected",
    "DispatchClient",
    "DispatchPayload",
    "DispatchRejected",
    "DispatchResult",
    "DispatchUnavailable",
    "Dispatched",
    "InMemoryTokenCache",
    "InstallationToken",
    "InstallationTokenBroker",
    "InstallationUnavailable",
    "KeyContentError",
    "KeyFormatError",
    "KeyImportError",
    "Minted",
    "NotInstalled",
    "RSASigner",
    "RepositoryNotCovered",
    "SignedAppJWT",
    "Signer",
    "TargetNotFound",
    "TokenCache",
    "TokenRejected",
    "TokenResult",
    "TokenServiceUnavailable",
    "build_claims",
    "build_dispatch_payload",
    "mint_app_jwt",
]
