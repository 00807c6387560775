"""
Reconciliation domain service - maps provider outcomes onto order and
payment attempt state.

Two rules live here:
1. a recorded provider attempt moves its order to awaiting_payment
2. an approved provider payment moves the order holding its external
   reference to paid

Both are idempotent: replaying the same input rewrites the same values.
"""
from typing import Any, List, Optional

from .entity import PaymentAttempt, PaymentProvider, ProviderStatus
from .repository import PaymentAttemptRepository
from .events import PaymentAttemptRecorded, PaymentStatusSynced, OrderPaid
from domain.order.entity import Order, OrderStatus
from domain.order.repository import OrderRepository
from domain.order.state_machine import OrderStateMachine
from domain.common.exceptions import OrderAlreadyPaidException, OrderNotFoundException


class ReconciliationDomainService:
    """
    Responsibilities:
    1. guard attempt creation (order exists, not paid yet)
    2. persist provider results and advance the order
    3. apply webhook-fetched payment state
    4. collect domain events
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        payment_repository: PaymentAttemptRepository,
    ):
        self.order_repository = order_repository
        self.payment_repository = payment_repository
        self.state_machine = OrderStateMachine()
        self.events: List = []

    async def get_payable_order(self, order_id: int) -> Order:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.is_paid:
            raise OrderAlreadyPaidException(order_id)
        return order

    async def open_attempt(
        self,
        order: Order,
        provider: PaymentProvider,
        terminal_id: Optional[str] = None,
    ) -> PaymentAttempt:
        """Insert the attempt row before the provider is called."""
        attempt = PaymentAttempt(
            id=None,
            order_id=order.id,
            provider=provider,
            terminal_id=terminal_id,
        )
        return await self.payment_repository.create(attempt)

    async def record_attempt_result(
        self,
        attempt: PaymentAttempt,
        provider_order_id: Optional[str],
        provider_payment_id: Optional[str],
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> PaymentAttempt:
        """Store the provider's answer and advance the order to awaiting_payment."""
        updated = await self.payment_repository.record_provider_result(
            attempt.id,
            provider_order_id,
            provider_payment_id,
            status,
            raw_payload,
        )
        order = await self.order_repository.get_by_id(attempt.order_id)
        if order is None:
            raise OrderNotFoundException(attempt.order_id)
        # a webhook may have settled the order while the provider call was in flight
        if not order.is_paid:
            target = self.state_machine.on_attempt_created(order.status)
            await self.order_repository.set_status(order.id, target)

        self.events.append(PaymentAttemptRecorded(
            order_id=order.id,
            provider_ref=provider_order_id,
            attempt_id=updated.id,
            provider=updated.provider.value,
            status=status,
        ))
        return updated

    async def mark_attempt_failed(
        self,
        attempt: PaymentAttempt,
        raw_payload: Optional[dict[str, Any]],
    ) -> PaymentAttempt:
        """Provider definitively refused the attempt; the order is left untouched."""
        return await self.payment_repository.record_provider_result(
            attempt.id,
            None,
            None,
            ProviderStatus.FAILED.value,
            raw_payload,
        )

    async def apply_payment_update(
        self,
        provider_payment_id: str,
        status: str,
        raw_payload: Optional[dict[str, Any]],
        external_ref: Optional[str],
    ) -> Optional[Order]:
        """
        Apply an authoritative payment snapshot fetched after a webhook.

        Returns the order moved to (or already in) paid, otherwise None.
        """
        matched = await self.payment_repository.update_status_by_provider_order_id(
            provider_payment_id, status, raw_payload
        )
        if matched == 0:
            matched = await self.payment_repository.update_status_by_provider_payment_id(
                provider_payment_id, status, raw_payload
            )
        self.events.append(PaymentStatusSynced(
            order_id=None,
            provider_ref=provider_payment_id,
            status=status,
            matched=matched,
        ))

        if ProviderStatus.classify(status) is not ProviderStatus.APPROVED or not external_ref:
            return None

        order = await self.order_repository.get_by_external_ref(external_ref)
        if order is None:
            return None
        target = self.state_machine.on_payment_approved(order.status)
        if target is not None:
            await self.order_repository.set_status(order.id, target)
            order.status = OrderStatus(target)
            self.events.append(OrderPaid(
                order_id=order.id,
                provider_ref=provider_payment_id,
                external_ref=order.external_ref,
            ))
        return order

    def get_domain_events(self) -> List:
        """Return and clear collected events."""
        events = self.events.copy()
        self.events.clear()
        return events
