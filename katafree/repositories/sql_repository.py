"""External store adapter backed by SQLAlchemy.

Primary keys are generated by the database (integers) and handed out as
strings; anything that does not parse as a native key simply matches nothing.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from katafree.core.errors import DuplicateEmail, ExternalStoreError, NotFound
from katafree.db.create_tables import create_all
from katafree.db.models import Task, User, Webhook
from katafree.db.session import create_db_engine, make_sessionmaker, session_scope
from katafree.repositories.base import (
    DEFAULT_PLAN,
    DEFAULT_TASK_SCHEDULE,
    DEFAULT_TASK_TITLE,
    DEFAULT_WEBHOOK_EVENT,
    Repository,
    isoformat,
    task_changes,
)

logger = logging.getLogger(__name__)


def _native_id(value) -> Optional[int]:
    try:
        native = int(str(value))
    except (TypeError, ValueError):
        return None
    return native if native > 0 else None


def _user_record(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "passwordHash": user.password_hash,
        "name": user.name,
        "plan": user.plan or DEFAULT_PLAN,
        "createdAt": isoformat(user.created_at),
    }


def _task_record(task: Task) -> dict:
    return {
        "id": str(task.id),
        "ownerId": str(task.owner_id),
        "title": task.title,
        "schedule": task.schedule,
        "enabled": bool(task.enabled),
        "createdAt": isoformat(task.created_at),
    }


def _webhook_record(hook: Webhook) -> dict:
    return {
        "id": str(hook.id),
        "ownerId": str(hook.owner_id),
        "url": hook.url,
        "event": hook.event,
        "createdAt": isoformat(hook.created_at),
    }


class SQLRepository(Repository):
    """Storage Adapter over a SQL database reached through DATABASE_URL."""

    backend = "external"

    def __init__(self, database_url: str):
        self._engine = create_db_engine(database_url)
        self._sessions = make_sessionmaker(self._engine)

    def connect(self) -> None:
        """Open a connection and make sure the schema exists; raises on failure."""
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        create_all(self._engine)
        logger.info("External store ready (%s)", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with session_scope(self._sessions) as session:
                yield session
        except SQLAlchemyError as exc:
            raise ExternalStoreError(f"External store failure: {exc}") from exc

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # -------------------------- users --------------------------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        with self._session() as session:
            user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
            return _user_record(user) if user else None

    def create_user(self, email: str, password_hash: str, name: str) -> dict:
        entity = User(
            email=email,
            password_hash=password_hash,
            name=name,
            plan=DEFAULT_PLAN,
            created_at=self._now(),
        )
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEmail() from exc
            session.refresh(entity)
            return _user_record(entity)

    # -------------------------- tasks --------------------------
    def list_tasks(self, owner_id: str) -> list[dict]:
        owner = _native_id(owner_id)
        if owner is None:
            return []
        with self._session() as session:
            stmt = select(Task).where(Task.owner_id == owner).order_by(Task.id)
            return [_task_record(task) for task in session.execute(stmt).scalars().all()]

    def create_task(
        self,
        owner_id: str,
        title: str = DEFAULT_TASK_TITLE,
        schedule: str = DEFAULT_TASK_SCHEDULE,
        enabled: bool = False,
    ) -> dict:
        owner = _native_id(owner_id)
        if owner is None:
            raise NotFound("Owner not found")
        entity = Task(owner_id=owner, title=title, schedule=schedule, enabled=bool(enabled), created_at=self._now())
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return _task_record(entity)

    def _owned_task(self, session: Session, owner_id: str, task_id: str) -> Optional[Task]:
        owner, native = _native_id(owner_id), _native_id(task_id)
        if owner is None or native is None:
            return None
        stmt = select(Task).where(Task.id == native, Task.owner_id == owner)
        return session.execute(stmt).scalar_one_or_none()

    def patch_task(self, owner_id: str, task_id: str, fields: dict) -> dict:
        changes = task_changes(fields)
        with self._session() as session:
            task = self._owned_task(session, owner_id, task_id)
            if not task:
                raise NotFound()
            for key, value in changes.items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _task_record(task)

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        owner, native = _native_id(owner_id), _native_id(task_id)
        if owner is None or native is None:
            raise NotFound()
        with self._session() as session:
            result = session.execute(delete(Task).where(Task.id == native, Task.owner_id == owner))
            session.commit()
            if not result.rowcount:
                raise NotFound()
            return True

    # -------------------------- webhooks --------------------------
    def create_webhook(self, owner_id: str, url: str, event: str = DEFAULT_WEBHOOK_EVENT) -> dict:
        owner = _native_id(owner_id)
        if owner is None:
            raise NotFound("Owner not found")
        entity = Webhook(owner_id=owner, url=url, event=event, created_at=self._now())
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return _webhook_record(entity)

    def list_webhooks(self, owner_id: str) -> list[dict]:
        owner = _native_id(owner_id)
        if owner is None:
            return []
        with self._session() as session:
            stmt = select(Webhook).where(Webhook.owner_id == owner).order_by(Webhook.id)
            return [_webhook_record(hook) for hook in session.execute(stmt).scalars().all()]

    def find_webhook(self, owner_id: str, webhook_id: str) -> Optional[dict]:
        owner, native = _native_id(owner_id), _native_id(webhook_id)
        if owner is None or native is None:
            return None
        with self._session() as session:
            stmt = select(Webhook).where(Webhook.id == native, Webhook.owner_id == owner)
            hook = session.execute(stmt).scalar_one_or_none()
            return _webhook_record(hook) if hook else None
