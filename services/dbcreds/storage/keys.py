"""
Key path helpers for durable storage.

Provides consistent key naming for all stored records.
"""

ROLE_PREFIX = "role/"

CONNECTION_CONFIG_KEY = "config/connection"


def role_key(name: str) -> str:
    """Key for a role definition."""
    return ROLE_PREFIX + name


def role_name_from_key(key: str) -> str:
    """Inverse of role_key()."""
    return key.removeprefix(ROLE_PREFIX)
