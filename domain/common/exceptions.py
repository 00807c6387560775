"""Business exceptions raised by the domain and infrastructure layers.

The core layer only maps them to HTTP responses; nothing here imports core.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base class for business exceptions."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="ValidationError",
            details=details,
            field=field,
        )


class OrderNotFoundException(BusinessException):
    def __init__(self, order_id: Optional[int] = None):
        details = {"order_id": order_id} if order_id is not None else None
        super().__init__(
            code=BusinessCode.ORDER_NOT_FOUND,
            message="Order not found",
            error_type="NotFound",
            details=details,
        )


class DuplicateReferenceException(BusinessException):
    def __init__(self, external_ref: str):
        super().__init__(
            code=BusinessCode.DUPLICATE_REFERENCE,
            message=f"External reference {external_ref} already exists",
            error_type="DuplicateReference",
            details={"external_ref": external_ref},
            field="externalRef",
        )


class OrderAlreadyPaidException(BusinessException):
    def __init__(self, order_id: int):
        super().__init__(
            code=BusinessCode.ORDER_ALREADY_PAID,
            message="Order is already paid",
            error_type="OrderAlreadyPaid",
            details={"order_id": order_id},
        )


class InvalidOrderTransitionException(BusinessException):
    def __init__(self, current: str, target: str):
        super().__init__(
            code=BusinessCode.INVALID_ORDER_TRANSITION,
            message=f"Cannot move order from {current} to {target}",
            error_type="InvalidOrderTransition",
            details={"current": current, "target": target},
            field="status",
        )


class PersistenceException(BusinessException):
    """Store failure other than a uniqueness violation. Details stay server-side."""

    default_message = "Persistence failure"

    def __init__(self, message: str = default_message):
        super().__init__(
            code=BusinessCode.DATABASE_ERROR,
            message=message,
            error_type="PersistenceError",
        )


class GatewayException(BusinessException):
    """Opaque payment provider failure as seen by synchronous callers."""

    default_message = "Payment provider request failed"

    def __init__(self, message: str = default_message):
        super().__init__(
            code=BusinessCode.GATEWAY_ERROR,
            message=message,
            error_type="GatewayError",
        )
