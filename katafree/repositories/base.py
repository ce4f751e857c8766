"""
Storage Adapter contract.

Both backends return plain dicts with camelCase keys and a string ``id`` so
services never need to know which backend is active.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PLAN = "free"
DEFAULT_TASK_TITLE = "New Task"
DEFAULT_TASK_SCHEDULE = "manual"
DEFAULT_WEBHOOK_EVENT = "task.fired"

COLLECTIONS = ("users", "tasks", "webhooks")
PATCHABLE_TASK_FIELDS = ("title", "schedule", "enabled")


def task_changes(fields: dict | None) -> dict:
    """Keep only fields a patch may overwrite; id, ownerId and createdAt are immutable."""
    changes = {
        key: value
        for key, value in (fields or {}).items()
        if key in PATCHABLE_TASK_FIELDS and value is not None
    }
    if "enabled" in changes:
        changes["enabled"] = bool(changes["enabled"])
    return changes


class Repository(ABC):
    """Uniform CRUD interface over the users, tasks and webhooks collections."""

    backend: str = "abstract"

    # -------------------------- users --------------------------
    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[dict]:
        ...

    @abstractmethod
    def create_user(self, email: str, password_hash: str, name: str) -> dict:
        ...

    # -------------------------- tasks --------------------------
    @abstractmethod
    def list_tasks(self, owner_id: str) -> list[dict]:
        ...

    @abstractmethod
    def create_task(
        self,
        owner_id: str,
        title: str = DEFAULT_TASK_TITLE,
        schedule: str = DEFAULT_TASK_SCHEDULE,
        enabled: bool = False,
    ) -> dict:
        ...

    @abstractmethod
    def patch_task(self, owner_id: str, task_id: str, fields: dict) -> dict:
        """Merge ``fields`` into the owned task; raise NotFound otherwise."""

    @abstractmethod
    def delete_task(self, owner_id: str, task_id: str) -> bool:
        """Remove the owned task; raise NotFound otherwise."""

    # -------------------------- webhooks --------------------------
    @abstractmethod
    def create_webhook(self, owner_id: str, url: str, event: str = DEFAULT_WEBHOOK_EVENT) -> dict:
        ...

    @abstractmethod
    def list_webhooks(self, owner_id: str) -> list[dict]:
        ...

    @abstractmethod
    def find_webhook(self, owner_id: str, webhook_id: str) -> Optional[dict]:
        ...

    def close(self) -> None:
        """Release backend resources, if any."""


def isoformat(value: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp; naive datetimes are taken as UTC."""
    value = value or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
