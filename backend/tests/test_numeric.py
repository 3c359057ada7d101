"""
Unit tests for numeric coercion and rounding.
"""
import math
import pytest
from chartchat.services.numeric import coerce_number, is_missing, parse_number, round_half_up


@pytest.mark.unit
def test_parse_number():
    assert parse_number("3.14") == 3.14
    assert parse_number(" 42 ") == 42.0
    assert parse_number("1e3") == 1000.0
    assert parse_number("-.5") == -0.5
    assert parse_number(7) == 7.0


@pytest.mark.unit
def test_parse_number_rejects_non_numbers():
    assert parse_number("abc") is None
    assert parse_number("") is None
    assert parse_number("12abc") is None
    assert parse_number("1_000") is None
    assert parse_number(True) is None
    assert parse_number(None) is None
    assert parse_number("nan") is None
    assert parse_number(float("inf")) is None
    assert parse_number([1]) is None


@pytest.mark.unit
def test_coerce_number_strips_currency():
    assert coerce_number("$1,200.50") == 1200.5
    assert coerce_number("1,000") == 1000.0
    assert coerce_number(15) == 15.0
    assert coerce_number("N/A") is None


@pytest.mark.unit
def test_round_half_up():
    """Halves round away from zero on the decimal form of the value."""
    assert round_half_up(1.005) == 1.01
    assert round_half_up(2.675) == 2.68
    assert round_half_up(-1.005) == -1.01
    assert round_half_up(2.5, 0) == 3.0
    assert round_half_up(0.1235, 3) == 0.124
    assert round_half_up(2.01) == 2.01
    assert math.isnan(round_half_up(float("nan")))


@pytest.mark.unit
def test_is_missing():
    assert is_missing(None)
    assert is_missing(float("nan"))
    assert not is_missing(0)
    assert not is_missing("")


@pytest.mark.unit
def test_round_half_up_large_values():
    """Values beyond the default decimal precision still round."""
    assert round_half_up(1e30) == 1e30
    assert round_half_up(3e30) == 3e30
    assert round_half_up(-1.7e308) == -1.7e308
    assert round_half_up(1e26 + 0.5, 0) == 1e26
    assert round_half_up(float("inf")) == float("inf")
