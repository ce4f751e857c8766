"""
Pydantic request bodies for the HTTP surface.

Every field is optional at the schema level; required-field checks live in the
services so they surface as ValidationError with the API's own messages.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None


class TaskCreateRequest(_Body):
    title: Optional[str] = None
    schedule: Optional[str] = None
    enabled: Optional[bool] = None


class TaskPatchRequest(_Body):
    title: Optional[str] = None
    schedule: Optional[str] = None
    enabled: Optional[bool] = None


class WebhookRegisterRequest(_Body):
    url: Optional[str] = None
    event: Optional[str] = None
