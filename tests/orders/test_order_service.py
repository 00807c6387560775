from decimal import Decimal

import pytest

from application.dtos.payments import CreateOrderRequest
from application.services.order_service import OrderApplicationService
from domain.common.exceptions import (
    DomainValidationException,
    DuplicateReferenceException,
    OrderNotFoundException,
)


@pytest.mark.asyncio
async def test_create_and_get_order(uow_factory):
    service = OrderApplicationService(uow_factory=uow_factory)
    order_id = await service.create_order(CreateOrderRequest(externalRef=" ORD-1 ", amount=19.9))

    detail = await service.get_order(order_id)
    assert detail.order.id == order_id
    assert detail.order.external_ref == "ORD-1"
    assert detail.order.status == "created"
    assert detail.order.amount == Decimal("19.90")
    assert detail.payment is None


@pytest.mark.asyncio
async def test_duplicate_reference_rejected(uow_factory):
    service = OrderApplicationService(uow_factory=uow_factory)
    await service.create_order(CreateOrderRequest(externalRef="ORD-DUP", amount="10"))

    with pytest.raises(DuplicateReferenceException):
        await service.create_order(CreateOrderRequest(externalRef="ORD-DUP", amount="12.50"))

    # the store is still usable and only one order exists for the reference
    async with uow_factory(readonly=True) as uow:
        order = await uow.order_repository.get_by_external_ref("ORD-DUP")
    assert order is not None
    assert order.amount == Decimal("10.00")


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_store(uow_factory):
    service = OrderApplicationService(uow_factory=uow_factory)
    with pytest.raises(DomainValidationException):
        await service.create_order(CreateOrderRequest(externalRef="bad ref", amount="1"))
    with pytest.raises(DomainValidationException):
        await service.create_order(CreateOrderRequest(externalRef="ORD-2", amount="0"))


@pytest.mark.asyncio
async def test_get_missing_order(uow_factory):
    service = OrderApplicationService(uow_factory=uow_factory)
    with pytest.raises(OrderNotFoundException):
        await service.get_order(999)
