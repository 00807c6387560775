"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from application.ports.payment_gateway import PaymentGateway
from .credentials import resolve_access_token
from .exceptions import PaymentProviderError, ProviderCredentialsMissingError


def get_payment_gateway(provider: Optional[str] = None) -> PaymentGateway:
    """Build a new client; the caller owns it and must ``aclose()`` it."""
    name = (provider or "mercadopago").lower()
    if name in {"mercadopago", "mp"}:
        from .mercadopago_client import MercadoPagoClient
        return MercadoPagoClient()
    raise ValueError(f"Unsupported payment provider: {name}")


__all__ = [
    "get_payment_gateway",
    "resolve_access_token",
    "PaymentProviderError",
    "ProviderCredentialsMissingError",
]
