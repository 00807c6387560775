"""
Mercado Pago webhook ingress.

Acknowledges immediately; reconciliation is scheduled as a background task
after the response is sent.
"""
from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from api.dependencies import enforce_webhook_rate_limit, get_webhook_service
from application.dtos.payments import WebhookNotification
from application.services.webhook_service import WebhookApplicationService
from core.logging_config import get_logger
from core.response import success_response


router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
logger = get_logger(__name__)


@router.post(
    "/mercadopago",
    name="mercadopago_webhook",
    summary="Mercado Pago notifications",
    dependencies=[Depends(enforce_webhook_rate_limit)],
)
async def mercadopago_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    service: WebhookApplicationService = Depends(get_webhook_service),
):
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else {}
    except ValueError:
        logger.warning("webhook_body_not_json", size=len(raw))
        body = {}

    notification = WebhookNotification.from_request(body, dict(request.query_params))
    headers = dict(request.headers)
    logger.info(
        "webhook_received",
        event_type=notification.event_type,
        resource_id=notification.resource_id,
    )
    background_tasks.add_task(service.process, notification, headers)
    return success_response(message="Received")
