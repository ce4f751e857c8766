"""One-off migration script: embedded JSON document -> SQL external store."""
from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
import sys
from datetime import datetime, timezone

# Make the katafree package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import select

from katafree.db.create_tables import create_all
from katafree.db.models import Task, User, Webhook
from katafree.db.session import create_db_engine, make_sessionmaker, session_scope
from katafree.repositories.base import (
    DEFAULT_PLAN,
    DEFAULT_TASK_SCHEDULE,
    DEFAULT_TASK_TITLE,
    DEFAULT_WEBHOOK_EVENT,
)


def _to_datetime(value) -> datetime:
    """Accept ISO strings and epoch milliseconds; anything else means now."""
    if isinstance(value, (int, float)) and value > 0:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            parsed = None
        if parsed:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def _load_json(path: Path) -> dict:
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("users", [])
    data.setdefault("tasks", [])
    data.setdefault("webhooks", [])
    return data


def migrate(json_path: Path, database_url: str) -> dict:
    """Copy users, tasks and webhooks; returns how many of each were inserted.

    Users whose email already exists in the target are skipped together with
    their tasks and webhooks, so re-running the migration inserts nothing new.
    """
    db = _load_json(json_path)
    engine = create_db_engine(database_url)
    create_all(engine)
    factory = make_sessionmaker(engine)
    counts = {"users": 0, "tasks": 0, "webhooks": 0}
    id_map: dict[str, int] = {}
    try:
        with session_scope(factory) as session:
            for meta in db["users"]:
                email = meta.get("email")
                if not email:
                    continue
                existing = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
                if existing:
                    continue
                user = User(
                    email=email,
                    password_hash=meta.get("passwordHash") or "",
                    name=meta.get("name") or email.split("@")[0],
                    plan=meta.get("plan") or DEFAULT_PLAN,
                    created_at=_to_datetime(meta.get("createdAt")),
                )
                session.add(user)
                session.flush()
                id_map[str(meta.get("id"))] = user.id
                counts["users"] += 1

            for meta in db["tasks"]:
                owner = id_map.get(str(meta.get("ownerId")))
                if owner is None:
                    continue
                session.add(
                    Task(
                        owner_id=owner,
                        title=meta.get("title") or DEFAULT_TASK_TITLE,
                        schedule=meta.get("schedule") or DEFAULT_TASK_SCHEDULE,
                        enabled=bool(meta.get("enabled")),
                        created_at=_to_datetime(meta.get("createdAt")),
                    )
                )
                counts["tasks"] += 1

            for meta in db["webhooks"]:
                owner = id_map.get(str(meta.get("ownerId")))
                if owner is None or not meta.get("url"):
                    continue
                session.add(
                    Webhook(
                        owner_id=owner,
                        url=meta["url"],
                        event=meta.get("event") or DEFAULT_WEBHOOK_EVENT,
                        created_at=_to_datetime(meta.get("createdAt")),
                    )
                )
                counts["webhooks"] += 1
            session.commit()
    finally:
        engine.dispose()
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Copy the embedded JSON store into DATABASE_URL.")
    parser.add_argument("--data-file", default=os.getenv("DATA_FILE", os.path.join("data", "db.json")))
    parser.add_argument("--database-url", default=os.getenv("DATABASE_URL", ""))
    args = parser.parse_args()
    counts = migrate(Path(args.data_file), args.database_url)
    print(f"Migrated {counts['users']} users, {counts['tasks']} tasks, {counts['webhooks']} webhooks.")


if __name__ == "__main__":
    main()
