"""
Payment domain events.

Dataclass events record reconciliation facts for downstream handling
(logging today, messaging later). Domain remains free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class PaymentEvent:
    order_id: Optional[int]
    provider_ref: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PaymentAttemptRecorded(PaymentEvent):
    attempt_id: Optional[int] = None
    provider: str = ""
    status: str = ""


@dataclass
class PaymentStatusSynced(PaymentEvent):
    status: str = ""
    matched: int = 0


@dataclass
class OrderPaid(PaymentEvent):
    external_ref: str = ""
