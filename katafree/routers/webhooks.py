from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from katafree.routers.deps import current_identity, get_webhook_service
from katafree.schemas import WebhookRegisterRequest
from katafree.services.session_service import Identity
from katafree.services.webhook_service import WebhookService

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/register")
def register_webhook(
    payload: Optional[WebhookRegisterRequest] = None,
    identity: Identity = Depends(current_identity),
    service: WebhookService = Depends(get_webhook_service),
):
    body = payload or WebhookRegisterRequest()
    return service.register(identity, body.url, body.event)


@router.get("")
def list_webhooks(identity: Identity = Depends(current_identity), service: WebhookService = Depends(get_webhook_service)):
    return service.list_webhooks(identity)


@router.post("/test/{webhook_id}")
def test_webhook(webhook_id: str, identity: Identity = Depends(current_identity), service: WebhookService = Depends(get_webhook_service)):
    return service.send_test(identity, webhook_id)
