"""
Order ORM model
Infrastructure detail; business rules live in domain.order.entity.Order
"""
from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric, String, UniqueConstraint
from datetime import datetime, timezone

from .base import Base


# BIGINT autoincrement is not supported by SQLite; fall back to INTEGER there
IdType = BigInteger().with_variant(Integer(), "sqlite")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(IdType, primary_key=True, autoincrement=True)
    external_ref = Column(String(64), nullable=False, comment="Caller-supplied unique reference")
    status = Column(
        String(32),
        nullable=False,
        default="created",
        server_default="created",
        comment="created/awaiting_payment/paid",
    )
    amount = Column(Numeric(precision=10, scale=2), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("external_ref", name="uq_orders_external_ref"),
    )

    def __repr__(self):
        return (
            f"<OrderModel(id={self.id}, external_ref='{self.external_ref}', "
            f"status='{self.status}', amount={self.amount})>"
        )
