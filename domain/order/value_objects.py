"""
Normalization of caller-supplied order fields before they reach persistence
or the payment provider.
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from domain.common.exceptions import DomainValidationException


EXTERNAL_REF_MAX_LENGTH = 64
_EXTERNAL_REF_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_CENTS = Decimal("0.01")
# orders.amount is NUMERIC(10, 2)
AMOUNT_MAX = Decimal("99999999.99")


def normalize_external_ref(value: Any) -> str:
    """Trim and validate an external reference.

    Accepted refs are 1-64 characters from ``[A-Za-z0-9_-]``.
    """
    if not isinstance(value, str):
        raise DomainValidationException("externalRef must be a string", field="externalRef")
    ref = value.strip()
    if not ref:
        raise DomainValidationException("externalRef must not be empty", field="externalRef")
    if len(ref) > EXTERNAL_REF_MAX_LENGTH:
        raise DomainValidationException(
            f"externalRef must be at most {EXTERNAL_REF_MAX_LENGTH} characters",
            field="externalRef",
            details={"length": len(ref)},
        )
    if not _EXTERNAL_REF_PATTERN.fullmatch(ref):
        raise DomainValidationException(
            "externalRef may only contain letters, digits, '_' and '-'",
            field="externalRef",
        )
    return ref


def normalize_amount(value: Any) -> Decimal:
    """Validate a monetary amount and quantize it to two decimal places."""
    # bool is an int subclass; True would otherwise become 1.00
    if isinstance(value, bool) or value is None:
        raise DomainValidationException("amount must be numeric", field="amount")
    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        elif isinstance(value, (int, Decimal)):
            amount = Decimal(value)
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            raise DomainValidationException("amount must be numeric", field="amount")
    except InvalidOperation:
        raise DomainValidationException("amount must be numeric", field="amount") from None

    if not amount.is_finite():
        raise DomainValidationException("amount must be finite", field="amount")
    try:
        amount = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise DomainValidationException("amount is out of range", field="amount") from None
    if amount <= 0:
        raise DomainValidationException("amount must be greater than zero", field="amount")
    if amount > AMOUNT_MAX:
        raise DomainValidationException(
            f"amount must be at most {AMOUNT_MAX}",
            field="amount",
            details={"max": str(AMOUNT_MAX)},
        )
    return amount


def to_amount_string(amount: Decimal) -> str:
    """Render an amount the way the Point orders API expects it, e.g. ``"19.90"``."""
    return str(Decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP))
