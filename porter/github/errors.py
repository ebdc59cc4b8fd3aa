"""GitHub App credential errors."""

from __future__ import annotations

PKCS8_CONVERSION_HINT = (
    "Convert it with: openssl pkcs8 -topk8 -inform PEM -outform PEM -nocrypt "
    "-in private-key.pem -out private-key-pkcs8.pem"
)


class KeyImportError(RuntimeError):
    """Base class for failures importing the App private key.

    Messages describe the key's format or structure only; key material is
    never included.
    """


class KeyFormatError(KeyImportError):
    """Raised when the key is not PKCS8, so it cannot be imported at all."""

    @classmethod
    def pkcs1(cls) -> KeyFormatError:
        """Return an error for a PKCS1 (``BEGIN RSA PRIVATE KEY``) key."""
        return cls(
            "GitHub App private key is PKCS1 but PKCS8 is required. "
            f"{PKCS8_CONVERSION_HINT}"
        )

    @classmethod
    def encrypted(cls) -> KeyFormatError:
        """Return an error for a passphrase-protected PKCS8 key."""
        return cls(
            "GitHub App private key is encrypted; an unencrypted PKCS8 key is "
            f"required. {PKCS8_CONVERSION_HINT}"
        )

    @classmethod
    def unsupported_label(cls, label: str) -> KeyFormatError:
        """Return an error for PEM armour that is not a private key."""
        return cls(
            f"GitHub App private key has unsupported PEM type {label!r}; "
            f"expected 'PRIVATE KEY'. {PKCS8_CONVERSION_HINT}"
        )


class KeyContentError(KeyImportError):
    """Raised when a PKCS8-shaped key cannot be decoded or is not RSA."""

    @classmethod
    def empty(cls) -> KeyContentError:
        """Return an error when no key material is present."""
        return cls("GitHub App private key is empty")

    @classmethod
    def not_base64(cls) -> KeyContentError:
        """Return an error when the PEM body is not valid base64."""
        return cls("GitHub App private key body is not valid base64")

    @classmethod
    def unreadable(cls) -> KeyContentError:
        """Return an error when the DER structure cannot be parsed."""
        return cls("GitHub App private key could not be parsed as PKCS8 DER")

    @classmethod
    def not_rsa(cls, algorithm: str) -> KeyContentError:
        """Return an error for a well-formed key of the wrong algorithm."""
        return cls(f"GitHub App private key is {algorithm}, RS256 requires RSA")


class GitHubTransportError(RuntimeError):
    """Raised when a GitHub REST call fails before a response arrives."""

    @classmethod
    def timeout(cls, path: str) -> GitHubTransportError:
        """Return an error for a request that exceeded its timeout."""
        return cls(f"GitHub API request timed out: {path}")

    @classmethod
    def network_error(cls, path: str, detail: str) -> GitHubTransportError:
        """Return an error for DNS, connection or TLS failures."""
        return cls(f"GitHub API network error on {path}: {detail}")
