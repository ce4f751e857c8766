"""Database helpers for the external store (engine/session export)."""

from .session import Base, create_db_engine, session_scope

__all__ = ["Base", "create_db_engine", "session_scope"]
