"""Webhook registration, listing and simulated test delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from katafree.core.errors import NotFound, ValidationError
from katafree.repositories.base import DEFAULT_WEBHOOK_EVENT, Repository
from katafree.services.notifications import SimulatedDispatcher, WebhookDispatcher, build_sample_payload
from katafree.services.session_service import Identity

logger = logging.getLogger(__name__)


@dataclass
class WebhookService:
    repository: Repository
    dispatcher: WebhookDispatcher = field(default_factory=SimulatedDispatcher)

    def register(self, identity: Identity, url: Optional[str], event: Optional[str] = None) -> dict:
        if not url:
            raise ValidationError("url required")
        return self.repository.create_webhook(identity.id, url, event or DEFAULT_WEBHOOK_EVENT)

    def list_webhooks(self, identity: Identity) -> list[dict]:
        return self.repository.list_webhooks(identity.id)

    def send_test(self, identity: Identity, webhook_id: str) -> dict:
        hook = self.repository.find_webhook(identity.id, webhook_id)
        if not hook:
            raise NotFound()
        payload = build_sample_payload(hook)
        logger.info("Simulated delivery of %s to webhook %s", payload["event"], hook["id"])
        return self.dispatcher.dispatch(hook, payload)
