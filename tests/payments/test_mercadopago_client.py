import json
from decimal import Decimal

import httpx
import pytest

from core.settings import MercadoPagoSettings
from domain.common.exceptions import GatewayException
from domain.order.entity import Order
from infrastructure.external.payments.exceptions import PaymentProviderError
from infrastructure.external.payments.mercadopago_client import MercadoPagoClient


ORDER = Order(id=1, external_ref="ORD-1", amount=Decimal("19.90"))


def _client(handler, **config):
    return MercadoPagoClient(
        "TEST-token",
        config=MercadoPagoSettings(**config),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_point_payload_and_headers():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={
            "id": "ORD01J",
            "status": "created",
            "transactions": {"payments": [{"id": "PAY01J", "amount": "19.90"}]},
        })

    client = _client(handler)
    try:
        result = await client.create_point_payment(ORDER, "T1")
        await client.create_point_payment(ORDER, "T1", "Combo 3")
    finally:
        await client.aclose()

    first, second = seen
    assert first.method == "POST"
    assert str(first.url) == "https://api.mercadopago.com/v1/orders"
    assert first.headers["Authorization"] == "Bearer TEST-token"
    body = json.loads(first.content)
    assert body == {
        "type": "point",
        "external_reference": "ORD-1",
        "expiration_time": "PT10M",
        "transactions": {"payments": [{"amount": "19.90"}]},
        "config": {"point": {"terminal_id": "T1", "print_on_terminal": "no_ticket"}},
        "description": "Pedido ORD-1",
    }
    assert json.loads(second.content)["description"] == "Combo 3"
    # fresh idempotency key per call
    assert first.headers["X-Idempotency-Key"] != second.headers["X-Idempotency-Key"]

    assert result.id == "ORD01J"
    assert result.payment_id == "PAY01J"
    assert result.status == "created"


@pytest.mark.asyncio
async def test_pix_payload_and_qr_data():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={
            "id": 555,
            "status": "pending",
            "external_reference": "ORD-1",
            "point_of_interaction": {"transaction_data": {
                "qr_code": "000201",
                "qr_code_base64": "aGVsbG8=",
                "ticket_url": "https://mp/ticket",
            }},
        })

    client = _client(handler, payer_email="caixa@loja.com")
    try:
        result = await client.create_pix_payment(ORDER, notification_url="https://h/api/v1/webhooks/mercadopago")
    finally:
        await client.aclose()

    (request,) = seen
    assert str(request.url) == "https://api.mercadopago.com/v1/payments"
    assert "X-Idempotency-Key" in request.headers
    body = json.loads(request.content)
    assert body["transaction_amount"] == 19.9
    assert body["payment_method_id"] == "pix"
    assert body["external_reference"] == "ORD-1"
    assert body["notification_url"] == "https://h/api/v1/webhooks/mercadopago"
    assert body["payer"] == {"email": "caixa@loja.com"}

    assert result.id == "555"
    assert result.qr_code == "000201"
    assert result.qr_code_base64 == "aGVsbG8="
    assert result.ticket_url == "https://mp/ticket"


@pytest.mark.asyncio
async def test_fetch_cancel_and_payment_paths():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        if request.url.path.startswith("/v1/payments/"):
            return httpx.Response(200, json={"id": 9, "external_reference": "ORD-1"})
        return httpx.Response(200, json={"id": "ORD01J", "status": "canceled"})

    client = _client(handler)
    try:
        order = await client.fetch_order("ORD01J")
        cancelled = await client.cancel_order("ORD01J")
        payment = await client.fetch_payment("9")
    finally:
        await client.aclose()

    assert seen == [
        ("GET", "/v1/orders/ORD01J"),
        ("POST", "/v1/orders/ORD01J/cancel"),
        ("GET", "/v1/payments/9"),
    ]
    assert order.raw["status"] == "canceled"
    assert cancelled.status == "canceled"
    # missing status on a fetched payment
    assert payment.status == "updated"
    assert payment.external_reference == "ORD-1"


@pytest.mark.asyncio
async def test_non_2xx_raises_definitive_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "invalid terminal"})

    client = _client(handler)
    with pytest.raises(PaymentProviderError) as exc:
        await client.create_point_payment(ORDER, "BAD")
    await client.aclose()

    err = exc.value
    assert isinstance(err, GatewayException)
    assert err.status_code == 400
    assert err.body == {"message": "invalid terminal"}
    assert err.is_definitive
    assert err.details is None


@pytest.mark.asyncio
async def test_timeout_is_ambiguous():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(handler)
    with pytest.raises(PaymentProviderError) as exc:
        await client.fetch_payment("1")
    await client.aclose()

    assert exc.value.timeout is True
    assert exc.value.status_code is None
    assert not exc.value.is_definitive


@pytest.mark.asyncio
async def test_non_json_success_body_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    client = _client(handler)
    with pytest.raises(PaymentProviderError) as exc:
        await client.fetch_order("X")
    await client.aclose()
    assert exc.value.status_code == 200
    assert not exc.value.is_definitive
