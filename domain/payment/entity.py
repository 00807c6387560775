"""
Payment attempt entity - one provider-side attempt to collect payment for an order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from domain.common.exceptions import DomainValidationException


class PaymentProvider(str, Enum):
    POINT = "point"  # card-present terminal
    PIX = "pix"      # QR code


class ProviderStatus(str, Enum):
    """Classification of the provider's status vocabulary.

    The attempt keeps the raw string; this enum is only used to make
    decisions. Statuses the provider adds later classify as UNKNOWN.
    """
    CREATED = "created"
    PENDING = "pending"
    IN_PROCESS = "in_process"
    PROCESSING = "processing"
    ACTION_REQUIRED = "action_required"
    AUTHORIZED = "authorized"
    APPROVED = "approved"
    PROCESSED = "processed"
    REJECTED = "rejected"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    REFUNDED = "refunded"
    CHARGED_BACK = "charged_back"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, raw: Optional[str]) -> "ProviderStatus":
        value = (raw or "").strip().lower()
        if value == "canceled":
            value = "cancelled"
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class PaymentAttempt:
    """
    Business rules:
    1. belongs to exactly one order; an order may have many attempts
    2. terminal_id is only meaningful for point attempts
    3. status and raw_payload are overwritten in place by later events
    """

    id: Optional[int]
    order_id: int
    provider: PaymentProvider
    status: str = ProviderStatus.CREATED.value
    provider_order_id: Optional[str] = None
    provider_payment_id: Optional[str] = None
    terminal_id: Optional[str] = None
    raw_payload: Optional[dict[str, Any]] = field(default=None)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.provider, PaymentProvider):
            self.provider = PaymentProvider(self.provider)
        if self.provider is PaymentProvider.POINT and not self.terminal_id:
            raise DomainValidationException("terminal_id is required for point payments", field="terminalId")
        if self.provider is PaymentProvider.PIX:
            self.terminal_id = None
        self.created_at = _ensure_utc(self.created_at)
        self.updated_at = _ensure_utc(self.updated_at)

    @property
    def provider_status(self) -> ProviderStatus:
        return ProviderStatus.classify(self.status)
