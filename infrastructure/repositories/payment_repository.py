"""
Payment attempt repository - SQLAlchemy data access
"""
from typing import Any, Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from domain.payment.entity import PaymentAttempt, PaymentProvider
from domain.payment.repository import PaymentAttemptRepository
from domain.common.exceptions import PersistenceException
from infrastructure.models.payment import PaymentAttemptModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyPaymentAttemptRepository(PaymentAttemptRepository):
    """SQLAlchemy implementation of the payment attempt store"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentAttemptModel) -> PaymentAttempt:
        return PaymentAttempt(
            id=model.id,
            order_id=model.order_id,
            provider=PaymentProvider(model.provider),
            status=model.status,
            provider_order_id=model.provider_order_id,
            provider_payment_id=model.provider_payment_id,
            terminal_id=model.terminal_id,
            raw_payload=model.raw_payload,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: PaymentAttempt) -> PaymentAttemptModel:
        return PaymentAttemptModel(
            id=entity.id,
            order_id=entity.order_id,
            provider=entity.provider.value,
            status=entity.status,
            provider_order_id=entity.provider_order_id,
            provider_payment_id=entity.provider_payment_id,
            terminal_id=entity.terminal_id,
            raw_payload=entity.raw_payload,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def create(self, attempt: PaymentAttempt) -> PaymentAttempt:
        try:
            db_attempt = self._to_model(attempt)
            self.session.add(db_attempt)
            await self.session.flush()
            await self.session.refresh(db_attempt)
        except SQLAlchemyError as e:
            logger.error("create_payment_attempt_failed", order_id=attempt.order_id, error=str(e))
            raise PersistenceException() from e
        logger.info(
            "payment_attempt_created",
            attempt_id=db_attempt.id,
            order_id=db_attempt.order_id,
            provider=db_attempt.provider,
        )
        return self._to_entity(db_attempt)

    async def record_provider_result(
        self,
        attempt_id: int,
        provider_order_id: Optional[str],
        provider_payment_id: Optional[str],
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> PaymentAttempt:
        try:
            result = await self.session.execute(
                select(PaymentAttemptModel).where(PaymentAttemptModel.id == attempt_id)
            )
            db_attempt = result.scalar_one_or_none()
            if db_attempt is None:
                raise PersistenceException(f"Payment attempt {attempt_id} not found")
            if provider_order_id is not None:
                db_attempt.provider_order_id = provider_order_id
            if provider_payment_id is not None:
                db_attempt.provider_payment_id = provider_payment_id
            db_attempt.status = status
            db_attempt.raw_payload = raw_payload
            db_attempt.updated_at = datetime.now(timezone.utc)
            await self.session.flush()
            await self.session.refresh(db_attempt)
        except SQLAlchemyError as e:
            logger.error("record_provider_result_failed", attempt_id=attempt_id, error=str(e))
            raise PersistenceException() from e

        logger.info(
            "payment_attempt_recorded",
            attempt_id=attempt_id,
            provider_order_id=db_attempt.provider_order_id,
            provider_payment_id=db_attempt.provider_payment_id,
            status=status,
        )
        return self._to_entity(db_attempt)

    async def _update_status_where(self, column, value: str, status: str,
                                   raw_payload: Optional[dict[str, Any]]) -> int:
        try:
            result = await self.session.execute(
                update(PaymentAttemptModel)
                .where(column == value)
                .values(
                    status=status,
                    raw_payload=raw_payload,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("update_payment_status_failed", key=column.key, value=value, error=str(e))
            raise PersistenceException() from e
        return result.rowcount or 0

    async def update_status_by_provider_order_id(
        self,
        provider_order_id: str,
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> int:
        matched = await self._update_status_where(
            PaymentAttemptModel.provider_order_id, provider_order_id, status, raw_payload
        )
        logger.info(
            "payment_status_updated",
            provider_order_id=provider_order_id,
            status=status,
            matched=matched,
        )
        return matched

    async def update_status_by_provider_payment_id(
        self,
        provider_payment_id: str,
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> int:
        matched = await self._update_status_where(
            PaymentAttemptModel.provider_payment_id, provider_payment_id, status, raw_payload
        )
        logger.info(
            "payment_status_updated",
            provider_payment_id=provider_payment_id,
            status=status,
            matched=matched,
        )
        return matched

    async def latest_for_order(self, order_id: int) -> Optional[PaymentAttempt]:
        try:
            result = await self.session.execute(
                select(PaymentAttemptModel)
                .where(PaymentAttemptModel.order_id == order_id)
                .order_by(PaymentAttemptModel.id.desc())
                .limit(1)
            )
        except SQLAlchemyError as e:
            logger.error("latest_payment_attempt_failed", order_id=order_id, error=str(e))
            raise PersistenceException() from e
        db_attempt = result.scalar_one_or_none()
        return self._to_entity(db_attempt) if db_attempt else None
