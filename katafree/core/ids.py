"""Identifier generator for records created in the embedded store."""

from __future__ import annotations

import secrets

ID_BYTES = 16


def new_id() -> str:
    """Return an opaque, URL-safe identifier (22 characters)."""
    return secrets.token_urlsafe(ID_BYTES)
