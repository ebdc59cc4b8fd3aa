"""Construction of GitHub App JWTs from cryptographic primitives.

The token is assembled by hand: base64url-encoded JSON header and claims,
joined with ``.``, signed with RS256 through a :class:`~.keys.Signer`. Each
step is a separate function so encoding, claims and signing can be checked
independently.

GitHub rejects tokens whose ``iss`` claim is a JSON string, so the App ID is
always coerced to an integer before encoding.
"""

from __future__ import annotations

import base64
import datetime as dt
import typing as typ

import msgspec

from porter.common.time import epoch_seconds, utcnow

from .keys import RSASigner
from .models import SignedAppJWT

if typ.TYPE_CHECKING:
    from porter.common.time import Clock

    from .keys import Signer
    from .models import AppIdentity

JWT_HEADER: dict[str, str] = {"alg": "RS256", "typ": "JWT"}
CLOCK_SKEW_BACKDATE = dt.timedelta(seconds=60)
JWT_LIFETIME = dt.timedelta(seconds=600)


def base64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(segment: str) -> bytes:
    """Decode unpadded base64url text."""
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def encode_segment(value: typ.Mapping[str, object]) -> str:
    """Serialise a JSON object to a compact base64url JWT segment."""
    return base64url_encode(msgspec.json.encode(value))


def build_claims(app_id: int | str, now: dt.datetime) -> dict[str, int]:
    """Return App JWT claims issued at ``now``.

    ``iat`` is backdated to absorb clock drift against GitHub, and ``exp`` is
    exactly :data:`JWT_LIFETIME` after ``iat``.

    Raises
    ------
    ValueError
        If ``app_id`` is not an integer or integer string.

    """
    issuer = int(str(app_id).strip())
    issued_at = epoch_seconds(now - CLOCK_SKEW_BACKDATE)
    return {
        "iat": issued_at,
        "exp": issued_at + int(JWT_LIFETIME.total_seconds()),
        "iss": issuer,
    }


def sign_jwt(claims: dict[str, int], signer: Signer) -> SignedAppJWT:
    """Sign ``claims`` under the RS256 header and return the JWT."""
    signing_input = f"{encode_segment(JWT_HEADER)}.{encode_segment(claims)}"
    signature = signer.sign(signing_input.encode("ascii"))
    return SignedAppJWT(
        header=dict(JWT_HEADER),
        claims=claims,
        signing_input=signing_input,
        signature=base64url_encode(signature),
    )


class AppCredentialMinter:
    """Mint short-lived JWTs for a GitHub App identity.

    The private key is imported on first use and the resulting signer is
    reused. Import failures propagate as
    :class:`~porter.github.errors.KeyImportError` on every attempt, so a
    misconfigured key fails each request the same way.

    Parameters
    ----------
    identity
        App ID and PKCS8 private key.
    clock
        Source of the current time; injectable for tests.
    signer
        Pre-built signer; when omitted one is imported from the identity.

    """

    def __init__(
        self,
        identity: AppIdentity,
        *,
        clock: Clock = utcnow,
        signer: Signer | None = None,
    ) -> None:
        """Initialise the minter without touching the key."""
        self._identity = identity
        self._clock = clock
        self._signer = signer

    def _get_signer(self) -> Signer:
        if self._signer is None:
            self._signer = RSASigner.from_pem(self._identity.private_key_pem)
        return self._signer

    def check_key(self) -> None:
        """Import the key if needed, raising if it is unusable."""
        self._get_signer()

    def mint(self) -> SignedAppJWT:
        """Return a freshly signed App JWT.

        Raises
        ------
        KeyImportError
            If the configured private key cannot be imported.

        """
        claims = build_claims(self._identity.app_id, self._clock())
        return sign_jwt(claims, self._get_signer())


def mint_app_jwt(
    identity: AppIdentity,
    *,
    clock: Clock = utcnow,
) -> SignedAppJWT:
    """Mint a single App JWT without keeping the imported key."""
    return AppCredentialMinter(identity, clock=clock).mint()
