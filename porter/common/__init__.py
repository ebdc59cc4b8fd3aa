"""Shared helpers with no gateway-specific dependencies."""
