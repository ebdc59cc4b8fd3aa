"""Gateway configuration errors."""

from __future__ import annotations


class GatewayConfigError(RuntimeError):
    """Raised when gateway configuration is missing or invalid."""

    @classmethod
    def missing(cls, env_var: str) -> GatewayConfigError:
        """Return an error for a required variable that is unset or blank."""
        return cls(f"{env_var} is required")

    @classmethod
    def invalid(cls, env_var: str, reason: str) -> GatewayConfigError:
        """Return an error for a variable whose value cannot be used."""
        return cls(f"{env_var} is invalid: {reason}")

    @classmethod
    def unreadable_key_file(cls, path: str) -> GatewayConfigError:
        """Return an error when the private key file cannot be read."""
        return cls(f"GitHub App private key file could not be read: {path}")
