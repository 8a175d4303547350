"""Card label formatting and parsing."""

import math

import pytest

from power_countdown.games.core.numeric import (
    EPSILON, format_number, is_target_reached, label_round_trips, parse_label,
)


@pytest.mark.parametrize("value,label", [
    (80, "80"),
    (80.00000001, "80"),
    (2.99999999, "3"),
    (0, "0"),
    (0.2, "1/5"),
    (1 / 3, "1/3"),
    (0.125, "1/8"),
    (1.5, "1.5"),
    (2.25, "2.25"),
    (math.sqrt(2), "1.414"),
    (15.58845726811, "15.588"),
])
def test_format_number(value, label):
    assert format_number(value) == label


def test_format_near_integer_beats_reciprocal():
    # 1 is both an integer and 1/1
    assert format_number(1.0) == "1"


def test_format_large_integer_is_plain_digits():
    assert format_number(243.0 * 343 * 512) == "42674688"


@pytest.mark.parametrize("value", [80, 0.2, 1 / 7, 1.5, math.sqrt(2), 3.0000000000000004, 65536, 0.001])
def test_format_is_idempotent_through_parse(value):
    label = format_number(value)
    assert format_number(parse_label(label)) == label


@pytest.mark.parametrize("label,value", [
    ("7", 7),
    ("1/5", 0.2),
    ("1.414", 1.414),
    ("243^(1/2)", 243 ** 0.5),
    ("3×(1/7)", 3 / 7),
    ("(1/3)^2", 1 / 9),
])
def test_parse_label(label, value):
    assert parse_label(label) == pytest.approx(value)


@pytest.mark.parametrize("label", ["", "abc", "__import__('os')", "1/0", "(-8)^(1/3)", "2^2000000"])
def test_parse_label_rejects(label):
    with pytest.raises(ValueError):
        parse_label(label)


def test_label_round_trips():
    assert label_round_trips("1/5", 0.2)
    assert not label_round_trips("15.588", 243 ** 0.5)
    assert not label_round_trips("nonsense", 1.0)


def test_is_target_reached():
    assert is_target_reached(3.0000000000000004, 3)
    assert is_target_reached(80 + EPSILON / 2, 80)
    assert not is_target_reached(80 + EPSILON * 2, 80)
