"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so provider credentials and webhook
tuning can be loaded (and overridden in tests) on their own.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 5.0
    read: float = 15.0
    write: float = 15.0
    total: float = 15.0


class WebhookSettings(BaseModel):
    secret: Optional[str] = None
    secret_header: str = "X-Webhook-Secret"
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 30
    rate_limit_window_seconds: int = 60
    # peers allowed to set X-Forwarded-For / X-Real-IP (IPs or CIDRs)
    trusted_proxies: list[str] = Field(default_factory=list)


class MercadoPagoSettings(BaseModel):
    access_token: Optional[str] = None
    access_token_file: Optional[str] = "/run/secrets/mp_access_token"
    base_url: str = "https://api.mercadopago.com"
    # public URL of the webhook route; derived from the request when unset
    notification_url: Optional[str] = None
    payer_email: str = "cliente@teste.com"
    order_expiration: str = "PT10M"
    print_on_terminal: str = "no_ticket"


class PaymentSettings(BaseSettings):
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    mercadopago: MercadoPagoSettings = Field(default_factory=MercadoPagoSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
