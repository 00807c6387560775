"""
Payment attempt repository port.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from .entity import PaymentAttempt


class PaymentAttemptRepository(ABC):

    @abstractmethod
    async def create(self, attempt: PaymentAttempt) -> PaymentAttempt:
        """Insert a new attempt (initial status ``created``)."""
        pass

    @abstractmethod
    async def record_provider_result(
        self,
        attempt_id: int,
        provider_order_id: Optional[str],
        provider_payment_id: Optional[str],
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> PaymentAttempt:
        """Store provider-assigned ids and the response snapshot on an attempt."""
        pass

    @abstractmethod
    async def update_status_by_provider_order_id(
        self,
        provider_order_id: str,
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> int:
        """Overwrite status/snapshot of the attempt with this provider order id.

        Returns the number of matched rows; zero is not an error.
        """
        pass

    @abstractmethod
    async def update_status_by_provider_payment_id(
        self,
        provider_payment_id: str,
        status: str,
        raw_payload: Optional[dict[str, Any]],
    ) -> int:
        pass

    @abstractmethod
    async def latest_for_order(self, order_id: int) -> Optional[PaymentAttempt]:
        """Most recently created attempt of an order."""
        pass
