import math

import pytest

from coercion import finite_series, optional_string, safe_int, safe_number, safe_string, sanitize_text


@pytest.mark.parametrize("value", [None, "", "abc", float("nan"), float("inf"), -math.inf, True, {}, [1]])
def test_safe_number_falls_back_to_default(value: object) -> None:
    assert safe_number(value) == 0.0
    assert safe_number(value, default=7.5) == 7.5


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3, 3.0), (2.5, 2.5), (" 12.5 ", 12.5), (-4, -4.0), (0, 0.0)],
)
def test_safe_number_accepts_finite_values(value: object, expected: float) -> None:
    assert safe_number(value) == expected


def test_safe_int_truncates_and_defaults() -> None:
    assert safe_int(3.9) == 3
    assert safe_int("42") == 42
    assert safe_int(None) == 0
    assert safe_int(float("nan"), default=-1) == -1


def test_safe_string_strips_and_defaults() -> None:
    assert safe_string("  shevas ") == "shevas"
    assert safe_string("   ") == ""
    assert safe_string(None, "Other") == "Other"
    assert safe_string(12) == ""
    assert optional_string("") is None
    assert optional_string(" ETH ") == "ETH"


def test_sanitize_text_collapses_whitespace() -> None:
    assert sanitize_text("  gm\n\nfrens \t  ") == "gm frens"
    assert sanitize_text(None) == ""


def test_finite_series_drops_non_finite_entries() -> None:
    assert finite_series([1, 2.5, None, float("nan"), "3", True, float("inf"), 4]) == (1.0, 2.5, 4.0)
    assert finite_series(None) == ()
    assert finite_series("123") == ()


def test_oversized_integers_fall_back_instead_of_raising() -> None:
    huge = 10**400
    assert safe_number(huge) == 0.0
    assert safe_number(huge, default=-1.0) == -1.0
    assert safe_int(huge, default=5) == 5
    assert finite_series([1.0, huge, 2]) == (1.0, 2.0)
