"""
Payment routes.

Keep this thin: provider payloads live in the gateway adapter, state rules in
the reconciliation service.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Request

from api.dependencies import get_payment_service
from application.dtos.payments import CreatePixPaymentRequest, CreatePointPaymentRequest
from application.services.payment_service import PaymentApplicationService
from core.logging_config import get_logger
from core.response import success_response
from core.settings import payment_settings


router = APIRouter(tags=["Payments"])
logger = get_logger(__name__)

_PROVIDER_ID = Path(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")


def _notification_url(request: Request) -> Optional[str]:
    configured = payment_settings.mercadopago.notification_url
    if configured:
        return configured
    return str(request.url_for("mercadopago_webhook"))


@router.post("/payments/point", summary="Create a card-terminal payment")
async def create_point_payment(
    payload: CreatePointPaymentRequest,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    result = await service.create_point_payment(payload)
    return success_response(data=result.model_dump(mode="json"), message="Point payment created")


@router.post("/payments/pix", summary="Create a PIX QR payment")
async def create_pix_payment(
    payload: CreatePixPaymentRequest,
    request: Request,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    result = await service.create_pix_payment(payload, notification_url=_notification_url(request))
    return success_response(data=result.model_dump(mode="json"), message="PIX payment created")


@router.get("/provider/orders/{provider_order_id}", summary="Fetch a provider order")
async def fetch_provider_order(
    provider_order_id: str = _PROVIDER_ID,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    data = await service.fetch_provider_order(provider_order_id)
    return success_response(data=data)


@router.post("/provider/orders/{provider_order_id}/cancel", summary="Cancel a provider order")
async def cancel_provider_order(
    provider_order_id: str = _PROVIDER_ID,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    data = await service.cancel_provider_order(provider_order_id)
    return success_response(data=data, message="Provider order cancelled")
