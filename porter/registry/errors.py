"""Repository registry errors."""

from __future__ import annotations


class RegistryUnavailableError(RuntimeError):
    """Raised when the allow-list cannot be fetched or decoded."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> RegistryUnavailableError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Repository registry HTTP {status_code}", status_code=status_code)

    @classmethod
    def timeout(cls) -> RegistryUnavailableError:
        """Return an error for a read that exceeded its timeout."""
        return cls("Repository registry request timed out")

    @classmethod
    def network_error(cls, detail: str) -> RegistryUnavailableError:
        """Return an error for a transport-level failure."""
        return cls(f"Repository registry unreachable: {detail}")

    @classmethod
    def invalid_document(cls, detail: str) -> RegistryUnavailableError:
        """Return an error for a body that is not a registry document."""
        return cls(f"Repository registry document is invalid: {detail}")
