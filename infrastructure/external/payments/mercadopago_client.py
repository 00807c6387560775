"""
Mercado Pago adapter over plain httpx.

Point (card terminal) payments use the Orders API (``/v1/orders``); PIX uses
the Payments API (``/v1/payments``). Write calls carry a fresh
``X-Idempotency-Key`` so a client-side retry can never double-charge.
"""
from __future__ import annotations

import uuid
from typing import Any, Optional

import httpx

from application.dtos.payments import ProviderOrderResult, ProviderPaymentResult
from core.settings import MercadoPagoSettings, PaymentTimeouts, payment_settings
from domain.order.entity import Order
from domain.order.value_objects import to_amount_string
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.credentials import resolve_access_token


class MercadoPagoClient(BasePaymentClient):
    provider = "mercadopago"

    def __init__(
        self,
        access_token: Optional[str] = None,
        *,
        config: Optional[MercadoPagoSettings] = None,
        timeouts: Optional[PaymentTimeouts] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or payment_settings.mercadopago
        token = access_token or resolve_access_token(self._config)
        super().__init__(
            base_url=self._config.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeouts=(timeouts or payment_settings.timeouts).model_dump(),
            transport=transport,
        )

    @staticmethod
    def _idempotency_headers() -> dict[str, str]:
        return {"X-Idempotency-Key": str(uuid.uuid4())}

    def build_point_payload(
        self, order: Order, terminal_id: str, description: Optional[str] = None
    ) -> dict[str, Any]:
        return {
            "type": "point",
            "external_reference": order.external_ref,
            "expiration_time": self._config.order_expiration,
            "transactions": {
                "payments": [{"amount": to_amount_string(order.amount)}],
            },
            "config": {
                "point": {
                    "terminal_id": terminal_id,
                    "print_on_terminal": self._config.print_on_terminal,
                },
            },
            "description": description or f"Pedido {order.external_ref}",
        }

    def build_pix_payload(
        self,
        order: Order,
        description: Optional[str] = None,
        notification_url: Optional[str] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            # the Payments API takes a JSON number here, unlike the Orders API
            "transaction_amount": float(order.amount),
            "description": description or f"Pedido {order.external_ref}",
            "payment_method_id": "pix",
            "external_reference": order.external_ref,
            "payer": {"email": self._config.payer_email},
        }
        url = notification_url or self._config.notification_url
        if url:
            payload["notification_url"] = url
        return payload

    async def create_point_payment(
        self, order: Order, terminal_id: str, description: Optional[str] = None
    ) -> ProviderOrderResult:
        payload = self.build_point_payload(order, terminal_id, description)
        self._log("point_order_create_request", external_reference=order.external_ref, terminal_id=terminal_id)
        body = await self._request("POST", "/v1/orders", json=payload, headers=self._idempotency_headers())
        result = ProviderOrderResult.from_provider(body)
        self._log(
            "point_order_create_response",
            external_reference=order.external_ref,
            provider_order_id=result.id,
            status=result.status,
        )
        return result

    async def create_pix_payment(
        self,
        order: Order,
        description: Optional[str] = None,
        notification_url: Optional[str] = None,
    ) -> ProviderPaymentResult:
        payload = self.build_pix_payload(order, description, notification_url)
        self._log("pix_payment_create_request", external_reference=order.external_ref)
        body = await self._request("POST", "/v1/payments", json=payload, headers=self._idempotency_headers())
        result = ProviderPaymentResult.from_provider(body)
        self._log(
            "pix_payment_create_response",
            external_reference=order.external_ref,
            provider_payment_id=result.id,
            status=result.status,
        )
        return result

    async def fetch_order(self, provider_order_id: str) -> ProviderOrderResult:
        body = await self._request("GET", f"/v1/orders/{provider_order_id}")
        return ProviderOrderResult.from_provider(body)

    async def cancel_order(self, provider_order_id: str) -> ProviderOrderResult:
        body = await self._request(
            "POST",
            f"/v1/orders/{provider_order_id}/cancel",
            headers=self._idempotency_headers(),
        )
        return ProviderOrderResult.from_provider(body)

    async def fetch_payment(self, provider_payment_id: str) -> ProviderPaymentResult:
        body = await self._request("GET", f"/v1/payments/{provider_payment_id}")
        # a fetched payment without status is one the provider has only acknowledged
        return ProviderPaymentResult.from_provider(body, default_status="updated")
