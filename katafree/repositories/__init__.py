"""
Persistence adapters.

Services depend on the Repository interface; which backend sits behind it is
decided once, when the application is built.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from katafree.core.config import Settings
from katafree.core.errors import StorageError
from katafree.repositories.base import Repository
from katafree.repositories.json_storage import JsonRepository
from katafree.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

__all__ = ["Repository", "JsonRepository", "SQLRepository", "build_repository"]


def build_repository(settings: Settings) -> Repository:
    """Pick the external store when DATABASE_URL is set and reachable, else the embedded one."""
    if settings.database_url:
        repo = None
        try:
            repo = SQLRepository(settings.database_url)
            repo.connect()
            logger.info("Using external store")
            return repo
        except (SQLAlchemyError, StorageError, ImportError, ValueError) as exc:
            if repo is not None:
                repo.close()
            logger.warning(
                "External store unavailable (%s: %s); falling back to embedded store at %s",
                type(exc).__name__,
                exc,
                settings.data_file,
            )
    else:
        logger.info("DATABASE_URL not set; using embedded store")
    return JsonRepository(settings.data_file)
