"""Order use cases: creation and the polling read model."""
from __future__ import annotations

from typing import Callable

from domain.common.unit_of_work import AbstractUnitOfWork
from domain.common.exceptions import OrderNotFoundException
from domain.order.entity import Order
from domain.order.value_objects import normalize_amount, normalize_external_ref
from application.dtos.payments import (
    CreateOrderRequest,
    OrderDetail,
    OrderView,
    PaymentAttemptView,
)
from core.logging_config import get_logger


logger = get_logger(__name__)


class OrderApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def create_order(self, req: CreateOrderRequest) -> int:
        """Normalize, then insert. Uniqueness of the reference is left to the store."""
        external_ref = normalize_external_ref(req.external_ref)
        amount = normalize_amount(req.amount)
        async with self._uow_factory() as uow:
            order = await uow.order_repository.create(
                Order(id=None, external_ref=external_ref, amount=amount)
            )
        logger.info("order_create_completed", order_id=order.id, external_ref=external_ref)
        return order.id

    async def get_order(self, order_id: int) -> OrderDetail:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(order_id)
            attempt = await uow.payment_repository.latest_for_order(order_id)
        return OrderDetail(
            order=OrderView.from_entity(order),
            payment=PaymentAttemptView.from_entity(attempt) if attempt else None,
        )
