"""
API key resolution utilities.

Resolution order:
1. Explicit value
2. The ``DIFY_API_KEY`` environment variable
"""

from __future__ import annotations

import os

API_KEY_ENV = "DIFY_API_KEY"


def resolve_api_key(explicit_key: str | None = None) -> str | None:
    """Resolve the app API key.

    Args:
        explicit_key: Explicitly provided API key

    Returns:
        Resolved API key or None if not found
    """
    if explicit_key:
        return explicit_key
    return os.getenv(API_KEY_ENV) or None


def bearer_header(api_key: str) -> dict[str, str]:
    """Build the Authorization header for an API key."""
    return {"Authorization": f"Bearer {api_key}"}
