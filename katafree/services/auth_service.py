"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from katafree.core.config import Settings, get_settings
from katafree.core.errors import DuplicateEmail, InvalidCredentials, ValidationError
from katafree.core.security import hash_password, verify_password
from katafree.repositories.base import DEFAULT_PLAN, Repository
from katafree.services.session_service import issue_token

logger = logging.getLogger(__name__)


def public_user(user: dict) -> dict:
    """Client-facing view of a user record; the password hash never leaves here."""
    email = user.get("email") or ""
    return {
        "id": str(user["id"]),
        "email": email,
        "name": user.get("name") or email.split("@")[0],
        "plan": user.get("plan") or DEFAULT_PLAN,
    }


@dataclass
class AuthService:
    """Handles registration and login."""

    repository: Repository
    settings: Settings = field(default_factory=get_settings)

    def _session(self, user: dict) -> dict:
        shown = public_user(user)
        return {"token": issue_token(shown, self.settings), "user": shown}

    # -------------------------------------- registration --------------------------------------
    def register(self, email: Optional[str], password: Optional[str], name: Optional[str] = None) -> dict:
        if not email or not password:
            raise ValidationError("Email & password required")
        # Check-then-create is not atomic; the embedded store can admit a
        # duplicate under concurrent registrations, the external store's
        # unique index rejects it with DuplicateEmail.
        if self.repository.find_user_by_email(email):
            raise DuplicateEmail()
        user = self.repository.create_user(
            email,
            hash_password(password),
            name or email.split("@")[0],
        )
        logger.info("Registered user %s", user["id"])
        return self._session(user)

    # -------------------------------------- login --------------------------------------
    def login(self, email: Optional[str], password: Optional[str]) -> dict:
        if not email or not password:
            raise ValidationError("Email & password required")
        user = self.repository.find_user_by_email(email)
        if not user or not verify_password(password, user.get("passwordHash")):
            raise InvalidCredentials()
        return self._session(user)
