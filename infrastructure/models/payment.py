"""
Payment attempt ORM model
Infrastructure detail; business rules live in domain.payment.entity.PaymentAttempt
"""
from sqlalchemy import Column, String, DateTime, JSON, Index, ForeignKey
from datetime import datetime, timezone

from .base import Base
from .order import IdType


class PaymentAttemptModel(Base):
    """One row per provider attempt; updated in place, never replaced."""

    __tablename__ = "payments"

    id = Column(IdType, primary_key=True, autoincrement=True)
    order_id = Column(
        IdType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider = Column(String(32), nullable=False, comment="point/pix")
    provider_order_id = Column(String(64), nullable=True, comment="Mercado Pago order id")
    provider_payment_id = Column(String(64), nullable=True, comment="Mercado Pago payment id")
    status = Column(
        String(32),
        nullable=False,
        default="created",
        server_default="created",
        comment="Provider status, stored verbatim",
    )
    terminal_id = Column(String(128), nullable=True, comment="Point terminal only")
    raw_payload = Column("raw_json", JSON, nullable=True, comment="Last provider response body")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_payments_provider_order_id", "provider_order_id"),
        Index("ix_payments_provider_payment_id", "provider_payment_id"),
    )

    def __repr__(self):
        return (
            f"<PaymentAttemptModel(id={self.id}, order_id={self.order_id}, "
            f"provider='{self.provider}', status='{self.status}')>"
        )
