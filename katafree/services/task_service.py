"""Task use cases, always scoped to the caller's identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from katafree.repositories.base import DEFAULT_TASK_SCHEDULE, DEFAULT_TASK_TITLE, Repository
from katafree.services.session_service import Identity


@dataclass
class TaskService:
    repository: Repository

    def list_tasks(self, identity: Identity) -> list[dict]:
        return self.repository.list_tasks(identity.id)

    def create(
        self,
        identity: Identity,
        title: Optional[str] = None,
        schedule: Optional[str] = None,
        enabled: Optional[bool] = None,
    ) -> dict:
        return self.repository.create_task(
            identity.id,
            title or DEFAULT_TASK_TITLE,
            schedule or DEFAULT_TASK_SCHEDULE,
            bool(enabled),
        )

    def patch(self, identity: Identity, task_id: str, fields: dict) -> dict:
        return self.repository.patch_task(identity.id, task_id, fields)

    def delete(self, identity: Identity, task_id: str) -> dict:
        self.repository.delete_task(identity.id, task_id)
        return {"ok": True}
