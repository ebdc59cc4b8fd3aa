"""Porter: GitHub push-webhook authentication and dispatch gateway."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
