"""
Order entity: a locally tracked purchase intent.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException


class OrderStatus(str, Enum):
    CREATED = "created"
    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Order:
    """
    Business rules:
    1. external_ref is unique across all orders (enforced by the store)
    2. amount is positive and never changes after creation
    3. status only moves forward, see OrderStateMachine
    """

    id: Optional[int]
    external_ref: str
    amount: Decimal
    status: OrderStatus = OrderStatus.CREATED
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount <= 0:
            raise DomainValidationException(
                f"Order amount must be greater than zero: {self.amount}",
                field="amount",
            )
        if not isinstance(self.status, OrderStatus):
            self.status = OrderStatus(self.status)
        self.created_at = _ensure_utc(self.created_at)

    @property
    def is_paid(self) -> bool:
        return self.status is OrderStatus.PAID
