"""
Application service orchestrating payment attempt use-cases.

Depends only on the PaymentGateway port and the unit of work; the gateway is
injected from the composition root (API layer).

Every attempt row is written before the provider is called, in its own
transaction, so a crash or timeout mid-call still leaves a trace of the
attempt. The provider outcome is then recorded in a second transaction.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from application.dtos.payments import (
    CreatePixPaymentRequest,
    CreatePointPaymentRequest,
    PixPaymentResult,
    PointPaymentResult,
)
from application.ports.payment_gateway import PaymentGateway
from domain.common.exceptions import GatewayException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.entity import Order
from domain.payment.entity import PaymentAttempt, PaymentProvider
from domain.payment.service import ReconciliationDomainService
from core.logging_config import get_logger


logger = get_logger(__name__)


class PaymentApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: PaymentGateway,
    ) -> None:
        self._uow_factory = uow_factory
        self.gateway = gateway

    async def _open_attempt(
        self, order_id: int, provider: PaymentProvider, terminal_id: Optional[str] = None
    ) -> tuple[Order, PaymentAttempt]:
        async with self._uow_factory() as uow:
            domain = ReconciliationDomainService(uow.order_repository, uow.payment_repository)
            order = await domain.get_payable_order(order_id)
            attempt = await domain.open_attempt(order, provider, terminal_id=terminal_id)
        return order, attempt

    async def _record_failure(self, attempt: PaymentAttempt, exc: GatewayException) -> None:
        """Definitive refusals mark the row failed; ambiguous outcomes leave it untouched."""
        if not getattr(exc, "is_definitive", False):
            logger.warning(
                "payment_attempt_outcome_unknown",
                attempt_id=attempt.id,
                order_id=attempt.order_id,
                provider=attempt.provider.value,
            )
            return
        body = getattr(exc, "body", None)
        raw: dict[str, Any] = body if isinstance(body, dict) else {"body": body}
        async with self._uow_factory() as uow:
            domain = ReconciliationDomainService(uow.order_repository, uow.payment_repository)
            await domain.mark_attempt_failed(attempt, raw)
        logger.warning(
            "payment_attempt_failed",
            attempt_id=attempt.id,
            order_id=attempt.order_id,
            provider=attempt.provider.value,
            status_code=getattr(exc, "status_code", None),
        )

    async def _record_result(
        self,
        attempt: PaymentAttempt,
        provider_order_id: Optional[str],
        provider_payment_id: Optional[str],
        status: str,
        raw_payload: dict[str, Any],
    ) -> None:
        async with self._uow_factory() as uow:
            domain = ReconciliationDomainService(uow.order_repository, uow.payment_repository)
            await domain.record_attempt_result(
                attempt, provider_order_id, provider_payment_id, status, raw_payload
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

    async def create_point_payment(self, req: CreatePointPaymentRequest) -> PointPaymentResult:
        order, attempt = await self._open_attempt(req.order_id, PaymentProvider.POINT, req.terminal_id)
        logger.info(
            "point_payment_create_request",
            order_id=order.id,
            attempt_id=attempt.id,
            terminal_id=req.terminal_id,
        )
        try:
            result = await self.gateway.create_point_payment(order, req.terminal_id, req.title)
        except GatewayException as exc:
            await self._record_failure(attempt, exc)
            raise

        await self._record_result(attempt, result.id, result.payment_id, result.status, result.raw)
        logger.info(
            "point_payment_create_response",
            order_id=order.id,
            provider_order_id=result.id,
            provider_payment_id=result.payment_id,
            status=result.status,
        )
        return PointPaymentResult(
            provider_order_id=result.id,
            provider_payment_id=result.payment_id,
            status=result.status,
            provider_order=result.raw,
        )

    async def create_pix_payment(
        self, req: CreatePixPaymentRequest, notification_url: Optional[str] = None
    ) -> PixPaymentResult:
        order, attempt = await self._open_attempt(req.order_id, PaymentProvider.PIX)
        logger.info("pix_payment_create_request", order_id=order.id, attempt_id=attempt.id)
        try:
            result = await self.gateway.create_pix_payment(order, req.description, notification_url)
        except GatewayException as exc:
            await self._record_failure(attempt, exc)
            raise

        if not result.id:
            # accepted but unidentifiable: the webhook could never find this row
            logger.error("pix_payment_missing_id", order_id=order.id, attempt_id=attempt.id)
            raise GatewayException()

        # a PIX payment is its own order on the provider side
        await self._record_result(attempt, result.id, result.id, result.status, result.raw)
        logger.info(
            "pix_payment_create_response",
            order_id=order.id,
            provider_payment_id=result.id,
            status=result.status,
        )
        return PixPaymentResult(
            payment_id=result.id,
            status=result.status,
            qr_code=result.qr_code,
            qr_code_base64=result.qr_code_base64,
            ticket_url=result.ticket_url,
        )

    async def fetch_provider_order(self, provider_order_id: str) -> dict[str, Any]:
        logger.info("provider_order_fetch_request", provider_order_id=provider_order_id)
        result = await self.gateway.fetch_order(provider_order_id)
        return result.raw

    async def cancel_provider_order(self, provider_order_id: str) -> dict[str, Any]:
        logger.info("provider_order_cancel_request", provider_order_id=provider_order_id)
        result = await self.gateway.cancel_order(provider_order_id)
        logger.info(
            "provider_order_cancel_response",
            provider_order_id=provider_order_id,
            status=result.status,
        )
        return result.raw

    async def aclose(self) -> None:
        # Best-effort close underlying resources
        close = getattr(self.gateway, "aclose", None)
        if callable(close):
            await close()
