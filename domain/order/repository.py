"""
Order repository port.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import Order, OrderStatus


class OrderRepository(ABC):
    """Persistence for orders. Does not enforce the status lattice."""

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """Insert an order; raises DuplicateReferenceException on a taken external_ref."""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_external_ref(self, external_ref: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def set_status(self, order_id: int, status: OrderStatus) -> None:
        """Unconditional status write."""
        pass
