"""Infrastructure models package exports."""
from .base import Base, metadata
from .order import OrderModel
from .payment import PaymentAttemptModel

__all__ = [
    "Base",
    "metadata",
    "OrderModel",
    "PaymentAttemptModel",
]
