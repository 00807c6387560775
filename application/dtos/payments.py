"""
Order/payment DTOs (Pydantic v2) used at application boundaries.

Request models accept the camelCase names the totem client sends
(``externalRef``, ``orderId``, ``terminalId``) as well as snake_case.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_serializer

from domain.order.entity import Order
from domain.payment.entity import PaymentAttempt


_RESOURCE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


class DTOBase(BaseModel):
    """Base DTO: serialize datetimes as UTC with a Z suffix."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    external_ref: Any = Field(alias="externalRef")
    # raw value; normalize_amount decides what is numeric
    amount: Any


class OrderView(DTOBase):
    id: int
    external_ref: str
    status: str
    amount: Decimal
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order: Order) -> "OrderView":
        return cls(
            id=order.id,
            external_ref=order.external_ref,
            status=order.status.value,
            amount=order.amount,
            created_at=order.created_at,
        )


class PaymentAttemptView(DTOBase):
    id: int
    order_id: int
    provider: str
    provider_order_id: Optional[str] = None
    provider_payment_id: Optional[str] = None
    status: str
    terminal_id: Optional[str] = None
    raw_payload: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, attempt: PaymentAttempt) -> "PaymentAttemptView":
        return cls(
            id=attempt.id,
            order_id=attempt.order_id,
            provider=attempt.provider.value,
            provider_order_id=attempt.provider_order_id,
            provider_payment_id=attempt.provider_payment_id,
            status=attempt.status,
            terminal_id=attempt.terminal_id,
            raw_payload=attempt.raw_payload,
            created_at=attempt.created_at,
            updated_at=attempt.updated_at,
        )


class OrderDetail(DTOBase):
    order: OrderView
    payment: Optional[PaymentAttemptView] = None


class CreatePointPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId", gt=0)
    terminal_id: str = Field(alias="terminalId", min_length=1, max_length=128)
    title: Optional[str] = Field(default=None, max_length=255)

    @field_validator("terminal_id")
    @classmethod
    def _strip_terminal_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("terminalId must not be blank")
        return v


class CreatePixPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId", gt=0)
    description: Optional[str] = Field(default=None, max_length=255)


class PointPaymentResult(BaseModel):
    provider_order_id: Optional[str] = None
    provider_payment_id: Optional[str] = None
    status: str
    provider_order: dict[str, Any]


class PixPaymentResult(BaseModel):
    payment_id: str
    status: str
    qr_code: Optional[str] = None
    qr_code_base64: Optional[str] = None
    ticket_url: Optional[str] = None


class ProviderOrderResult(BaseModel):
    """Mercado Pago order (``/v1/orders``) as returned by the gateway."""

    id: Optional[str] = None
    status: str = "created"
    payment_id: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_provider(cls, body: dict[str, Any]) -> "ProviderOrderResult":
        payments = ((body.get("transactions") or {}).get("payments") or [])
        first = payments[0] if payments and isinstance(payments[0], dict) else {}
        return cls(
            id=_str_or_none(body.get("id")),
            status=str(body.get("status") or "created"),
            payment_id=_str_or_none(first.get("id")),
            raw=body,
        )


class ProviderPaymentResult(BaseModel):
    """Mercado Pago payment (``/v1/payments``) as returned by the gateway."""

    id: Optional[str] = None
    status: str = "created"
    external_reference: Optional[str] = None
    qr_code: Optional[str] = None
    qr_code_base64: Optional[str] = None
    ticket_url: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_provider(cls, body: dict[str, Any], default_status: str = "created") -> "ProviderPaymentResult":
        poi = body.get("point_of_interaction") or {}
        tx = poi.get("transaction_data") or {}
        return cls(
            id=_str_or_none(body.get("id")),
            status=str(body.get("status") or default_status),
            external_reference=_str_or_none(body.get("external_reference")),
            qr_code=tx.get("qr_code"),
            qr_code_base64=tx.get("qr_code_base64"),
            ticket_url=tx.get("ticket_url"),
            raw=body,
        )


class WebhookNotification(BaseModel):
    """Mercado Pago notification; both the webhook and IPN shapes are accepted."""

    model_config = ConfigDict(extra="allow")

    type: Optional[Any] = None
    topic: Optional[Any] = None
    id: Optional[Any] = None
    data: Optional[dict[str, Any]] = None

    @classmethod
    def from_request(cls, body: Any, query: dict[str, str]) -> "WebhookNotification":
        """Merge body and query string; body fields win, query fills gaps."""
        payload = dict(body) if isinstance(body, dict) else {}
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        data = dict(data)
        if not data.get("id") and query.get("data.id"):
            data["id"] = query["data.id"]
        for key in ("type", "topic", "id"):
            if not payload.get(key) and query.get(key):
                payload[key] = query[key]
        payload["data"] = data or None
        return cls.model_validate(payload)

    @property
    def event_type(self) -> Optional[str]:
        value = self.type or self.topic
        return str(value).lower() if value else None

    @property
    def resource_id(self) -> Optional[str]:
        value = (self.data or {}).get("id") or self.id
        if value is None:
            return None
        value = str(value).strip()
        # interpolated into the provider URL path
        if not _RESOURCE_ID_PATTERN.fullmatch(value):
            return None
        return value

    @property
    def is_payment_event(self) -> bool:
        return self.event_type in ("payment", "payments")


def _str_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
