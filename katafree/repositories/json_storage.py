"""
Embedded JSON persistence adapter.

The whole document lives in a single file and is read from disk before every
operation and written back after every mutation. Nothing is cached between
calls, and no lock guards the read-modify-write cycle: two concurrent
mutations can interleave and the later write wins.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from katafree.core.errors import EmbeddedStoreError, NotFound
from katafree.core.ids import new_id
from katafree.repositories.base import (
    COLLECTIONS,
    DEFAULT_PLAN,
    DEFAULT_TASK_SCHEDULE,
    DEFAULT_TASK_TITLE,
    DEFAULT_WEBHOOK_EVENT,
    Repository,
    isoformat,
    task_changes,
)

logger = logging.getLogger(__name__)


def db_defaults(db: dict) -> dict:
    for name in COLLECTIONS:
        db.setdefault(name, [])
    return db


def load(path: Path) -> dict:
    try:
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                return db_defaults(json.load(f))
    except (OSError, ValueError) as exc:
        raise EmbeddedStoreError(f"Cannot read {path}: {exc}") from exc
    return db_defaults({})


def save(path: Path, db: dict) -> None:
    """Replace the document atomically through a sibling temp file."""
    tmp_name = None
    try:
        body = json.dumps(db, ensure_ascii=False, indent=2)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(body)
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, TypeError, ValueError) as exc:
        raise EmbeddedStoreError(f"Cannot write {path}: {exc}") from exc
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)


class JsonRepository(Repository):
    """Storage Adapter backed by one JSON file ``{users, tasks, webhooks}``."""

    backend = "embedded"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EmbeddedStoreError(f"Cannot create {self.path.parent}: {exc}") from exc
        if not self.path.exists():
            save(self.path, db_defaults({}))
        logger.info("Embedded store ready at %s", self.path)

    def _load(self) -> dict:
        return load(self.path)

    def _save(self, db: dict) -> None:
        save(self.path, db)

    @staticmethod
    def _owned(records: list[dict], owner_id: str, record_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == record_id and record.get("ownerId") == owner_id:
                return index
        return -1

    # -------------------------- users --------------------------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        db = self._load()
        for user in db["users"]:
            if user.get("email") == email:
                return copy.deepcopy(user)
        return None

    def create_user(self, email: str, password_hash: str, name: str) -> dict:
        # Uniqueness is checked by the caller; see AuthService.register.
        user = {
            "id": new_id(),
            "email": email,
            "passwordHash": password_hash,
            "name": name,
            "plan": DEFAULT_PLAN,
            "createdAt": isoformat(),
        }
        db = self._load()
        db["users"].append(user)
        self._save(db)
        return copy.deepcopy(user)

    # -------------------------- tasks --------------------------
    def list_tasks(self, owner_id: str) -> list[dict]:
        db = self._load()
        return [task for task in db["tasks"] if task.get("ownerId") == owner_id]

    def create_task(
        self,
        owner_id: str,
        title: str = DEFAULT_TASK_TITLE,
        schedule: str = DEFAULT_TASK_SCHEDULE,
        enabled: bool = False,
    ) -> dict:
        task = {
            "id": new_id(),
            "ownerId": owner_id,
            "title": title,
            "schedule": schedule,
            "enabled": bool(enabled),
            "createdAt": isoformat(),
        }
        db = self._load()
        db["tasks"].append(task)
        self._save(db)
        return copy.deepcopy(task)

    def patch_task(self, owner_id: str, task_id: str, fields: dict) -> dict:
        db = self._load()
        index = self._owned(db["tasks"], owner_id, task_id)
        if index == -1:
            raise NotFound()
        db["tasks"][index].update(task_changes(fields))
        self._save(db)
        return copy.deepcopy(db["tasks"][index])

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        db = self._load()
        index = self._owned(db["tasks"], owner_id, task_id)
        if index == -1:
            raise NotFound()
        del db["tasks"][index]
        self._save(db)
        return True

    # -------------------------- webhooks --------------------------
    def create_webhook(self, owner_id: str, url: str, event: str = DEFAULT_WEBHOOK_EVENT) -> dict:
        hook = {
            "id": new_id(),
            "ownerId": owner_id,
            "url": url,
            "event": event,
            "createdAt": isoformat(),
        }
        db = self._load()
        db["webhooks"].append(hook)
        self._save(db)
        return copy.deepcopy(hook)

    def list_webhooks(self, owner_id: str) -> list[dict]:
        db = self._load()
        return [hook for hook in db["webhooks"] if hook.get("ownerId") == owner_id]

    def find_webhook(self, owner_id: str, webhook_id: str) -> Optional[dict]:
        db = self._load()
        index = self._owned(db["webhooks"], owner_id, webhook_id)
        return db["webhooks"][index] if index != -1 else None
