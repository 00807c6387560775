"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from application.dtos.payments import ProviderOrderResult, ProviderPaymentResult
from domain.order.entity import Order


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the payment provider.

    Every call is a single attempt with a bounded timeout. Implementations
    raise a GatewayException subclass on failure and never retry.
    """

    provider: str

    async def create_point_payment(
        self, order: Order, terminal_id: str, description: Optional[str] = None
    ) -> ProviderOrderResult: ...

    async def create_pix_payment(
        self,
        order: Order,
        description: Optional[str] = None,
        notification_url: Optional[str] = None,
    ) -> ProviderPaymentResult: ...

    async def fetch_order(self, provider_order_id: str) -> ProviderOrderResult: ...

    async def cancel_order(self, provider_order_id: str) -> ProviderOrderResult: ...

    async def fetch_payment(self, provider_payment_id: str) -> ProviderPaymentResult: ...

    async def aclose(self) -> None: ...
