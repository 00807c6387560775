"""Pytest bootstrap configuration.

Environment is set before any application module is imported so settings,
the module-level engine and the logging setup pick up test values.
"""
import os

os.environ["DATABASE__URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("MERCADOPAGO__ACCESS_TOKEN", "TEST-access-token")
os.environ.setdefault("DEBUG", "false")

from functools import partial
from typing import Any, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from application.dtos.payments import ProviderOrderResult, ProviderPaymentResult
from domain.order.entity import Order
from infrastructure.database import create_tables
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


class StubGateway:
    """In-memory PaymentGateway; records calls and replays canned answers."""

    provider = "stub"

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.payments: dict[str, dict[str, Any]] = {}
        self.point_response: dict[str, Any] = {
            "id": "ORD-MP-1",
            "status": "created",
            "transactions": {"payments": [{"id": "PAY-MP-1", "amount": "19.90"}]},
        }
        self.pix_response: dict[str, Any] = {
            "id": 1234567890,
            "status": "pending",
            "point_of_interaction": {
                "transaction_data": {
                    "qr_code": "00020126-pix",
                    "qr_code_base64": "iVBORw0KGgo=",
                    "ticket_url": "https://www.mercadopago.com.br/payments/1234567890/ticket",
                }
            },
        }
        self.error: Optional[Exception] = None
        self.closed = 0

    def _raise_if_configured(self) -> None:
        if self.error is not None:
            raise self.error

    async def create_point_payment(self, order: Order, terminal_id: str, description: Optional[str] = None):
        self.calls.append(("create_point_payment", (order.external_ref, terminal_id, description)))
        self._raise_if_configured()
        return ProviderOrderResult.from_provider(dict(self.point_response, external_reference=order.external_ref))

    async def create_pix_payment(self, order: Order, description: Optional[str] = None, notification_url: Optional[str] = None):
        self.calls.append(("create_pix_payment", (order.external_ref, description, notification_url)))
        self._raise_if_configured()
        return ProviderPaymentResult.from_provider(dict(self.pix_response, external_reference=order.external_ref))

    async def fetch_order(self, provider_order_id: str):
        self.calls.append(("fetch_order", (provider_order_id,)))
        self._raise_if_configured()
        return ProviderOrderResult.from_provider({"id": provider_order_id, "status": "created"})

    async def cancel_order(self, provider_order_id: str):
        self.calls.append(("cancel_order", (provider_order_id,)))
        self._raise_if_configured()
        return ProviderOrderResult.from_provider({"id": provider_order_id, "status": "canceled"})

    async def fetch_payment(self, provider_payment_id: str):
        self.calls.append(("fetch_payment", (provider_payment_id,)))
        self._raise_if_configured()
        body = self.payments.get(provider_payment_id, {"id": provider_payment_id})
        return ProviderPaymentResult.from_provider(body, default_status="updated")

    async def aclose(self) -> None:
        self.closed += 1


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def uow_factory(session_factory):
    return partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
def stub_gateway():
    return StubGateway()
