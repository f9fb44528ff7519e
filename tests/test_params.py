"""Tests for sizing formulas."""
from __future__ import annotations

import pytest

from bf_salted.errors import ConfigurationError
from bf_salted.params import expected_false_positive_rate, optimal_parameters


@pytest.mark.parametrize(
    "items, rate, expected",
    [
        (10000, 0.01, (95850, 6)),
        (1000, 0.01, (9585, 6)),
        (100, 0.1, (479, 3)),
        (1, 0.5, (1, 1)),
    ],
)
def test_optimal_parameters(items, rate, expected):
    assert optimal_parameters(items, rate) == expected


def test_truncates_instead_of_rounding():
    # -ln(0.01) / ln(2) is 6.64
    assert optimal_parameters(10000, 0.01)[1] == 6


def test_rejects_tiny_load():
    # 1 * -ln(0.4) / ln(2)^2 is 1.9, but -ln(0.4) / ln(2) truncates to 1
    assert optimal_parameters(1, 0.4) == (1, 1)
    with pytest.raises(ConfigurationError):
        optimal_parameters(1, 0.9)


def test_expected_false_positive_rate():
    assert expected_false_positive_rate(95850, 6, 0) == 0.0
    assert expected_false_positive_rate(95850, 6, 10000) == pytest.approx(0.01, rel=0.1)
    assert expected_false_positive_rate(95850, 6, 20000) > expected_false_positive_rate(95850, 6, 10000)
