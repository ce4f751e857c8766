"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from katafree.core.config import Settings
from katafree.repositories.base import Repository
from katafree.services.auth_service import AuthService
from katafree.services.session_service import Identity, resolve_identity
from katafree.services.task_service import TaskService
from katafree.services.webhook_service import WebhookService


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_auth_service(request: Request) -> AuthService:
    return AuthService(repository=get_repository(request), settings=get_settings_dep(request))


def get_task_service(request: Request) -> TaskService:
    return TaskService(repository=get_repository(request))


def get_webhook_service(request: Request) -> WebhookService:
    return WebhookService(repository=get_repository(request), dispatcher=request.app.state.dispatcher)


def current_identity(request: Request, authorization: Optional[str] = Header(None)) -> Identity:
    return resolve_identity(authorization, get_settings_dep(request))
