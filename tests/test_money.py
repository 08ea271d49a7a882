import math

import pytest

from cocina.money import format_cop, parse_money_lenient


@pytest.mark.parametrize(
    "raw, expected",
    [
        (12000, 12000),
        (12000.9, 12000),
        ("13000", 13000),
        (" 4500 ", 4500),
        ("12.5", 12),
        (None, 0),
        ("", 0),
        ("   ", 0),
        ("abc", 0),
        (math.nan, 0),
        (math.inf, 0),
        ([], 0),
        ({"amount": 5}, 0),
    ],
)
def test_parse_money_lenient(raw, expected):
    assert parse_money_lenient(raw) == expected


def test_parse_money_lenient_floors_negative_fractions():
    assert parse_money_lenient(-0.5) == -1


def test_parse_money_lenient_logs_garbage(caplog):
    with caplog.at_level("WARNING", logger="cocina.money"):
        assert parse_money_lenient("doce mil") == 0
    assert "Unparseable amount" in caplog.text


@pytest.mark.parametrize(
    "amount, expected",
    [(0, "$0"), (800, "$800"), (12000, "$12.000"), (1234567, "$1.234.567")],
)
def test_format_cop(amount, expected):
    assert format_cop(amount) == expected
