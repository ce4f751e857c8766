"""Utility script to create the external store schema."""
from __future__ import annotations

import os

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .session import Base, create_db_engine
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    try:
        create_all(create_db_engine(os.getenv("DATABASE_URL", "")))
        print("Database tables created successfully.")
    except (SQLAlchemyError, RuntimeError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
