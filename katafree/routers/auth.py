from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from katafree.routers.deps import get_auth_service
from katafree.schemas import LoginRequest, RegisterRequest
from katafree.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register")
def register(payload: Optional[RegisterRequest] = None, service: AuthService = Depends(get_auth_service)):
    body = payload or RegisterRequest()
    return service.register(body.email, body.password, body.name)


@router.post("/login")
def login(payload: Optional[LoginRequest] = None, service: AuthService = Depends(get_auth_service)):
    body = payload or LoginRequest()
    return service.login(body.email, body.password)
