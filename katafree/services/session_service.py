"""Bearer token helpers (issue tokens, resolve the caller's identity)."""
from __future__ import annotations

from dataclasses import dataclass

from katafree.core.config import Settings
from katafree.core.errors import MissingToken
from katafree.core.security import decode_token, sign_token

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


def issue_token(user: dict, settings: Settings) -> str:
    return sign_token(user, settings.jwt_secret, settings.jwt_ttl_seconds)


def resolve_identity(authorization: str | None, settings: Settings) -> Identity:
    """Map an ``Authorization`` header onto the identity stored in its token."""
    header = authorization or ""
    token = header[len(BEARER_PREFIX):].strip() if header.startswith(BEARER_PREFIX) else ""
    if not token:
        raise MissingToken()
    payload = decode_token(token, settings.jwt_secret)
    return Identity(id=str(payload["id"]), email=payload["email"])
