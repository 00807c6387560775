"""
Order repository - SQLAlchemy data access
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from domain.order.entity import Order, OrderStatus
from domain.order.repository import OrderRepository
from domain.common.exceptions import DuplicateReferenceException, PersistenceException
from infrastructure.models.order import OrderModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyOrderRepository(OrderRepository):
    """SQLAlchemy implementation of the order store"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: OrderModel) -> Order:
        return Order(
            id=model.id,
            external_ref=model.external_ref,
            amount=Decimal(str(model.amount)),
            status=OrderStatus(model.status),
            created_at=model.created_at,
        )

    def _to_model(self, entity: Order) -> OrderModel:
        return OrderModel(
            id=entity.id,
            external_ref=entity.external_ref,
            amount=entity.amount,
            status=entity.status.value,
            created_at=entity.created_at,
        )

    async def create(self, order: Order) -> Order:
        try:
            db_order = self._to_model(order)
            self.session.add(db_order)
            await self.session.flush()  # assigns the id
            await self.session.refresh(db_order)
            logger.info(
                "order_created",
                order_id=db_order.id,
                external_ref=db_order.external_ref,
                amount=str(db_order.amount),
            )
            return self._to_entity(db_order)
        except IntegrityError as e:
            await self.session.rollback()
            # driver message only; the wrapped SQL text names every column
            msg = str(e.orig).lower()
            if "external_ref" in msg:
                logger.warning("create_order_conflict", external_ref=order.external_ref)
                raise DuplicateReferenceException(order.external_ref)
            logger.error("create_order_failed", error=str(e))
            raise PersistenceException() from e
        except SQLAlchemyError as e:
            logger.error("create_order_failed", error=str(e))
            raise PersistenceException() from e

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        try:
            result = await self.session.execute(
                select(OrderModel).where(OrderModel.id == order_id)
            )
        except SQLAlchemyError as e:
            logger.error("get_order_failed", order_id=order_id, error=str(e))
            raise PersistenceException() from e
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def get_by_external_ref(self, external_ref: str) -> Optional[Order]:
        try:
            result = await self.session.execute(
                select(OrderModel).where(OrderModel.external_ref == external_ref)
            )
        except SQLAlchemyError as e:
            logger.error("get_order_failed", external_ref=external_ref, error=str(e))
            raise PersistenceException() from e
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def set_status(self, order_id: int, status: OrderStatus) -> None:
        value = status.value if isinstance(status, OrderStatus) else str(status)
        try:
            await self.session.execute(
                update(OrderModel)
                .where(OrderModel.id == order_id)
                .values(status=value)
            )
        except SQLAlchemyError as e:
            logger.error("set_order_status_failed", order_id=order_id, error=str(e))
            raise PersistenceException() from e
        logger.info("order_status_set", order_id=order_id, status=value)
