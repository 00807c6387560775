"""
Order lifecycle state machine.

created -> awaiting_payment -> paid. Re-entering awaiting_payment is allowed
(a new attempt on an order that already has one); nothing leaves paid.
The store never checks transitions, so every status write goes through here.
"""
from __future__ import annotations

from typing import Optional

from domain.common.exceptions import InvalidOrderTransitionException
from domain.order.entity import OrderStatus


_ALLOWED: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.AWAITING_PAYMENT, OrderStatus.PAID}),
    OrderStatus.AWAITING_PAYMENT: frozenset({OrderStatus.AWAITING_PAYMENT, OrderStatus.PAID}),
    OrderStatus.PAID: frozenset({OrderStatus.PAID}),
}


class OrderStateMachine:
    """Emits only forward-valid order transitions."""

    @staticmethod
    def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
        return target in _ALLOWED[current]

    @classmethod
    def transition(cls, current: OrderStatus, target: OrderStatus) -> OrderStatus:
        if not cls.can_transition(current, target):
            raise InvalidOrderTransitionException(current.value, target.value)
        return target

    @classmethod
    def on_attempt_created(cls, current: OrderStatus) -> OrderStatus:
        return cls.transition(current, OrderStatus.AWAITING_PAYMENT)

    @classmethod
    def on_payment_approved(cls, current: OrderStatus) -> Optional[OrderStatus]:
        """Return the status to write, or None when the order is already paid."""
        target = cls.transition(current, OrderStatus.PAID)
        return None if target is current else target
