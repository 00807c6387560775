from decimal import Decimal

import pytest

from domain.common.exceptions import DomainValidationException
from domain.order.value_objects import normalize_amount, normalize_external_ref, to_amount_string


@pytest.mark.parametrize("raw, expected", [
    ("ORD-1", "ORD-1"),
    ("  totem_42  ", "totem_42"),
    ("a" * 64, "a" * 64),
])
def test_external_ref_accepts_charset_and_trims(raw, expected):
    assert normalize_external_ref(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "a" * 65, "ORD 1", "ORD#1", "pedido/1", "ção", 123, None])
def test_external_ref_rejects_invalid(raw):
    with pytest.raises(DomainValidationException) as exc:
        normalize_external_ref(raw)
    assert exc.value.field == "externalRef"


@pytest.mark.parametrize("raw, expected", [
    (19.9, Decimal("19.90")),
    ("19.90", Decimal("19.90")),
    (" 7 ", Decimal("7.00")),
    (10, Decimal("10.00")),
    (Decimal("0.005"), Decimal("0.01")),
    ("1.234", Decimal("1.23")),
    ("1.235", Decimal("1.24")),
])
def test_amount_quantized_to_two_places(raw, expected):
    amount = normalize_amount(raw)
    assert amount == expected
    assert amount.as_tuple().exponent == -2


@pytest.mark.parametrize("raw", [0, -1, "0.004", "-0.50", "abc", "", None, True, float("nan"), float("inf"), "1e999999", [1]])
def test_amount_rejects_non_positive_and_non_numeric(raw):
    with pytest.raises(DomainValidationException) as exc:
        normalize_amount(raw)
    assert exc.value.field == "amount"


def test_amount_string_has_exactly_two_decimals():
    assert to_amount_string(Decimal("19.9")) == "19.90"
    assert to_amount_string(Decimal("5")) == "5.00"


def test_amount_bounded_by_column_precision():
    assert normalize_amount("99999999.99") == Decimal("99999999.99")
    assert normalize_amount("99999999.994") == Decimal("99999999.99")

    for raw in ("100000000", "99999999.995", "123456789012.50"):
        with pytest.raises(DomainValidationException) as exc:
            normalize_amount(raw)
        assert exc.value.field == "amount"
