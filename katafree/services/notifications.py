"""
Webhook notification payloads and the delivery extension point.

Only the simulated dispatcher exists: a "test" call builds the payload a real
delivery would send and reports it as delivered without opening a connection.
A live dispatcher (signed HTTP POST honouring a RetryPolicy) would implement
WebhookDispatcher and be handed to WebhookService instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 1
    backoff_seconds: float = 0.0


class WebhookDispatcher(Protocol):
    def dispatch(self, webhook: dict, payload: dict) -> dict:
        ...


def build_sample_payload(webhook: dict, now: Optional[datetime] = None) -> dict:
    moment = now or datetime.now(timezone.utc)
    return {
        "event": webhook["event"],
        "sample": {"hello": "world", "at": moment.isoformat()},
    }


class SimulatedDispatcher:
    """Reports every payload as delivered; performs no network I/O."""

    def __init__(self, retry_policy: RetryPolicy | None = None):
        self.retry_policy = retry_policy or RetryPolicy()

    def dispatch(self, webhook: dict, payload: dict) -> dict:
        return {"delivered": True, "to": webhook["url"], "payload": payload}
