"""
API dependencies - composition root for application services
"""
from typing import AsyncGenerator, Callable

from fastapi import Depends, Request

from application.ports.payment_gateway import PaymentGateway
from application.services.order_service import OrderApplicationService
from application.services.payment_service import PaymentApplicationService
from application.services.webhook_service import WebhookApplicationService
from api.middleware.request_id import resolve_client_ip
from core.exceptions import RateLimitException
from core.logging_config import get_logger
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.external.payments import get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


logger = get_logger(__name__)


def get_uow_factory() -> Callable[..., AbstractUnitOfWork]:
    return SQLAlchemyUnitOfWork


def get_gateway_factory() -> Callable[[], PaymentGateway]:
    """Factory rather than instance, for work that outlives the request."""
    return get_payment_gateway


async def get_gateway(
    factory: Callable[[], PaymentGateway] = Depends(get_gateway_factory),
) -> AsyncGenerator[PaymentGateway, None]:
    gateway = factory()
    try:
        yield gateway
    finally:
        await gateway.aclose()


async def get_order_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> OrderApplicationService:
    return OrderApplicationService(uow_factory=uow_factory)


async def get_payment_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway: PaymentGateway = Depends(get_gateway),
) -> PaymentApplicationService:
    return PaymentApplicationService(uow_factory=uow_factory, gateway=gateway)


async def get_webhook_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway_factory: Callable[[], PaymentGateway] = Depends(get_gateway_factory),
) -> WebhookApplicationService:
    # background work runs after yield-dependencies are torn down, so the
    # service builds and closes its own gateway
    return WebhookApplicationService(uow_factory=uow_factory, gateway_factory=gateway_factory)


async def enforce_webhook_rate_limit(request: Request) -> None:
    """Per-source-address limit on the webhook route; no-op when disabled."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return
    client_ip = resolve_client_ip(request)
    decision = await limiter.hit(f"webhook:{client_ip}")
    if not decision.allowed:
        logger.warning("webhook_rate_limited", client_ip=client_ip, retry_after=decision.retry_after)
        raise RateLimitException(retry_after=decision.retry_after)
