"""Read-only access to the repository allow-list."""

from __future__ import annotations

from .client import HTTPRepositoryRegistry, RepositoryRegistry
from .errors import RegistryUnavailableError
from .models import RegistryDocument, RepositoryRegistryEntry, find_active_entry

__all__ = [
    "HTTPRepositoryRegistry",
    "RegistryDocument",
    "RegistryUnavailableError",
    "RepositoryRegistry",
    "RepositoryRegistryEntry",
    "find_active_entry",
]
