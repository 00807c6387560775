"""
Webhook reconciliation.

Runs after the HTTP acknowledgement has been sent, so nothing raised here can
reach the provider: every failure is logged and the event is dropped. The
provider re-delivers notifications, and reapplying a payment snapshot is
idempotent, so a dropped event is repaired by the next delivery.
"""
from __future__ import annotations

import hmac
from typing import Callable, Mapping, Optional

from application.dtos.payments import WebhookNotification
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from core.settings import WebhookSettings, payment_settings
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.service import ReconciliationDomainService


logger = get_logger(__name__)


class WebhookOutcome:
    REJECTED = "rejected"
    IGNORED = "ignored"
    MISSING_ID = "missing_id"
    FAILED = "failed"
    APPLIED = "applied"
    PAID = "paid"


class WebhookApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway_factory: Callable[[], PaymentGateway],
        config: Optional[WebhookSettings] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway_factory = gateway_factory
        self._config = config or payment_settings.webhook

    def verify_secret(self, headers: Mapping[str, str]) -> bool:
        """Shared-secret check; always passes when no secret is configured."""
        secret = self._config.secret
        if not secret:
            return True
        wanted = self._config.secret_header.lower()
        supplied = next((v for k, v in headers.items() if k.lower() == wanted), None)
        if supplied is None:
            return False
        return hmac.compare_digest(supplied.encode("utf-8"), secret.encode("utf-8"))

    async def process(self, notification: WebhookNotification, headers: Mapping[str, str]) -> str:
        """Reconcile one notification. Never raises; returns a WebhookOutcome value."""
        try:
            return await self._process(notification, headers)
        except Exception as exc:
            logger.error(
                "webhook_processing_failed",
                event_type=notification.event_type,
                resource_id=notification.resource_id,
                error=str(exc),
                exc_info=True,
            )
            return WebhookOutcome.FAILED

    async def _process(self, notification: WebhookNotification, headers: Mapping[str, str]) -> str:
        if not self.verify_secret(headers):
            logger.warning("webhook_secret_mismatch", event_type=notification.event_type)
            return WebhookOutcome.REJECTED

        if not notification.is_payment_event:
            logger.info(
                "webhook_ignored",
                event_type=notification.event_type,
                resource_id=notification.resource_id,
            )
            return WebhookOutcome.IGNORED

        payment_id = notification.resource_id
        if not payment_id:
            logger.warning("webhook_missing_payment_id", event_type=notification.event_type)
            return WebhookOutcome.MISSING_ID

        gateway = self._gateway_factory()
        try:
            payment = await gateway.fetch_payment(payment_id)
        finally:
            await gateway.aclose()

        async with self._uow_factory() as uow:
            domain = ReconciliationDomainService(uow.order_repository, uow.payment_repository)
            order = await domain.apply_payment_update(
                payment_id,
                payment.status,
                payment.raw,
                payment.external_reference,
            )
            events = domain.get_domain_events()

        for event in events:
            logger.info(
                "domain_event",
                event_name=type(event).__name__,
                event_id=event.event_id,
                order_id=event.order_id,
                provider_ref=event.provider_ref,
            )
        logger.info(
            "webhook_payment_reconciled",
            payment_id=payment_id,
            status=payment.status,
            external_reference=payment.external_reference,
            order_id=order.id if order else None,
        )
        return WebhookOutcome.PAID if order is not None and order.is_paid else WebhookOutcome.APPLIED
