from decimal import Decimal

import pytest

from jetdb.money import money_to_string, numeric_to_string


def _money_bytes(value):
    return value.to_bytes(8, "little", signed=True)


def _numeric_bytes(magnitude, negative=False):
    ordered = magnitude.to_bytes(16, "little")
    body = ordered[12:16] + ordered[8:12] + ordered[4:8] + ordered[0:4]
    return bytes([0x80 if negative else 0x00]) + body


def test_money_zero():
    assert money_to_string(_money_bytes(0)) == "0.0000"


def test_money_smallest_negative_unit():
    assert money_to_string(_money_bytes(-1)) == "-0.0001"


@pytest.mark.parametrize(
    "value", [1, 9999, 10000, 12345, 987654321, -5, -123456789, 2**63 - 1, -(2**63)]
)
def test_money_matches_value_over_ten_thousand(value):
    text = money_to_string(_money_bytes(value))
    assert Decimal(text) == Decimal(value).scaleb(-4)
    assert len(text.split(".")[1]) == 4


def test_money_has_single_leading_zero_for_fractions():
    text = money_to_string(_money_bytes(42))
    assert text.startswith("0.")
    assert not text.startswith("00")


def test_money_ignores_trailing_bytes():
    data = _money_bytes(250000) + b"\xff\xff"
    assert money_to_string(data) == money_to_string(_money_bytes(250000))


def test_money_too_short():
    with pytest.raises(ValueError):
        money_to_string(b"\x00" * 7)


def test_numeric_precision_zero_has_no_point():
    assert numeric_to_string(_numeric_bytes(123456), 0, 0) == str(123456)


def test_numeric_negative_sign_bit():
    text = numeric_to_string(_numeric_bytes(314, negative=True), 0, 2)
    assert text.startswith("-")
    assert Decimal(text) == Decimal(-314).scaleb(-2)


def test_numeric_zero_with_decimals():
    text = numeric_to_string(_numeric_bytes(0), 0, 3)
    assert Decimal(text) == 0
    assert text.split(".")[1] == "000"


def test_numeric_word_order_matters():
    low_word_only = _numeric_bytes(1)
    high_word_only = _numeric_bytes(1 << 96)
    assert numeric_to_string(low_word_only, 0, 0) == "1"
    assert Decimal(numeric_to_string(high_word_only, 0, 0)) == Decimal(1 << 96)


def test_numeric_too_short():
    with pytest.raises(ValueError):
        numeric_to_string(b"\x00" * 16, 0, 0)