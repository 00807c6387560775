import pytest

from application.dtos.payments import (
    CreateOrderRequest,
    CreatePixPaymentRequest,
    CreatePointPaymentRequest,
)
from application.services.order_service import OrderApplicationService
from application.services.payment_service import PaymentApplicationService
from domain.common.exceptions import (
    GatewayException,
    OrderAlreadyPaidException,
    OrderNotFoundException,
)
from domain.order.entity import OrderStatus
from infrastructure.external.payments.exceptions import PaymentProviderError


async def _new_order(uow_factory, ref="ORD-1", amount="19.90") -> int:
    return await OrderApplicationService(uow_factory).create_order(
        CreateOrderRequest(externalRef=ref, amount=amount)
    )


@pytest.mark.asyncio
async def test_point_attempt_recorded_and_order_awaiting(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory)
    service = PaymentApplicationService(uow_factory, stub_gateway)

    result = await service.create_point_payment(
        CreatePointPaymentRequest(orderId=order_id, terminalId="T1")
    )

    assert result.provider_order_id == "ORD-MP-1"
    assert result.provider_payment_id == "PAY-MP-1"
    assert result.status == "created"
    assert stub_gateway.calls == [("create_point_payment", ("ORD-1", "T1", None))]

    detail = await OrderApplicationService(uow_factory).get_order(order_id)
    assert detail.order.status == OrderStatus.AWAITING_PAYMENT.value
    assert detail.payment.provider == "point"
    assert detail.payment.terminal_id == "T1"
    assert detail.payment.provider_order_id == "ORD-MP-1"
    assert detail.payment.raw_payload["id"] == "ORD-MP-1"


@pytest.mark.asyncio
async def test_pix_attempt_uses_payment_id_for_both_keys(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory, ref="ORD-PIX")
    service = PaymentApplicationService(uow_factory, stub_gateway)

    result = await service.create_pix_payment(
        CreatePixPaymentRequest(orderId=order_id),
        notification_url="https://totem.example/api/v1/webhooks/mercadopago",
    )

    assert result.payment_id == "1234567890"
    assert result.status == "pending"
    assert result.qr_code == "00020126-pix"
    assert result.ticket_url.endswith("/ticket")

    detail = await OrderApplicationService(uow_factory).get_order(order_id)
    assert detail.order.status == "awaiting_payment"
    assert detail.payment.provider == "pix"
    assert detail.payment.terminal_id is None
    assert detail.payment.provider_order_id == "1234567890"
    assert detail.payment.provider_payment_id == "1234567890"


@pytest.mark.asyncio
async def test_second_attempt_keeps_order_awaiting(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory)
    service = PaymentApplicationService(uow_factory, stub_gateway)
    await service.create_point_payment(CreatePointPaymentRequest(orderId=order_id, terminalId="T1"))
    await service.create_pix_payment(CreatePixPaymentRequest(orderId=order_id))

    detail = await OrderApplicationService(uow_factory).get_order(order_id)
    assert detail.order.status == "awaiting_payment"
    # latest attempt wins
    assert detail.payment.provider == "pix"


@pytest.mark.asyncio
async def test_missing_order_never_calls_provider(uow_factory, stub_gateway):
    service = PaymentApplicationService(uow_factory, stub_gateway)
    with pytest.raises(OrderNotFoundException):
        await service.create_point_payment(CreatePointPaymentRequest(orderId=42, terminalId="T1"))
    assert stub_gateway.calls == []


@pytest.mark.asyncio
async def test_paid_order_rejects_new_attempt(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory)
    async with uow_factory() as uow:
        await uow.order_repository.set_status(order_id, OrderStatus.PAID)

    service = PaymentApplicationService(uow_factory, stub_gateway)
    with pytest.raises(OrderAlreadyPaidException):
        await service.create_pix_payment(CreatePixPaymentRequest(orderId=order_id))
    assert stub_gateway.calls == []


@pytest.mark.asyncio
async def test_provider_refusal_marks_attempt_failed(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory)
    stub_gateway.error = PaymentProviderError(
        "rejected", provider="stub", status_code=400, body={"message": "terminal not in PDV mode"}
    )
    service = PaymentApplicationService(uow_factory, stub_gateway)

    with pytest.raises(GatewayException):
        await service.create_point_payment(CreatePointPaymentRequest(orderId=order_id, terminalId="T9"))

    detail = await OrderApplicationService(uow_factory).get_order(order_id)
    assert detail.order.status == "created"
    assert detail.payment.status == "failed"
    assert detail.payment.raw_payload == {"message": "terminal not in PDV mode"}


@pytest.mark.asyncio
async def test_provider_timeout_leaves_attempt_created(uow_factory, stub_gateway):
    order_id = await _new_order(uow_factory)
    stub_gateway.error = PaymentProviderError("timed out", provider="stub", timeout=True)
    service = PaymentApplicationService(uow_factory, stub_gateway)

    with pytest.raises(GatewayException):
        await service.create_point_payment(CreatePointPaymentRequest(orderId=order_id, terminalId="T1"))

    detail = await OrderApplicationService(uow_factory).get_order(order_id)
    assert detail.order.status == "created"
    assert detail.payment.status == "created"
    assert detail.payment.provider_order_id is None


@pytest.mark.asyncio
async def test_cancel_and_fetch_pass_through(uow_factory, stub_gateway):
    service = PaymentApplicationService(uow_factory, stub_gateway)
    fetched = await service.fetch_provider_order("ORD-MP-1")
    cancelled = await service.cancel_provider_order("ORD-MP-1")
    assert fetched["id"] == "ORD-MP-1"
    assert cancelled["status"] == "canceled"
