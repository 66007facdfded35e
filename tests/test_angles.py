# tests/test_angles.py
from __future__ import annotations

import math

import pytest
from hypothesis import given, strategies as st

from relchart.core.angles import (
    angular_separation,
    calculate_midpoint,
    degree_in_sign,
    is_valid_number,
    normalize_angle,
    sign_index,
    to_degrees,
    to_radians,
)

finite = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)


@pytest.mark.parametrize("raw,expected", [
    (0.0, 0.0),
    (360.0, 0.0),
    (720.0, 0.0),
    (-30.0, 330.0),
    (359.5, 359.5),
    (-1e-20, 0.0),
    (405, 45.0),
])
def test_normalize_angle(raw, expected):
    assert normalize_angle(raw) == pytest.approx(expected, abs=1e-12)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf"), "12", None, True])
def test_normalize_angle_rejects_non_numeric(bad):
    with pytest.raises(ValueError):
        normalize_angle(bad)


def test_is_valid_number():
    assert is_valid_number(1)
    assert is_valid_number(-2.5)
    assert not is_valid_number(float("nan"))
    assert not is_valid_number(False)
    assert not is_valid_number("3")


def test_separation_examples():
    assert angular_separation(350, 10) == pytest.approx(20.0)
    assert angular_separation(0, 180) == pytest.approx(180.0)
    assert angular_separation(-90, 90) == pytest.approx(180.0)
    assert angular_separation(45, 45) == 0.0


def test_midpoint_wraparound():
    assert calculate_midpoint(350, 10) == pytest.approx(0.0, abs=1e-12)
    assert calculate_midpoint(10, 350) == pytest.approx(0.0, abs=1e-12)
    assert calculate_midpoint(10, 100) == pytest.approx(55.0)
    assert calculate_midpoint(300, 100) == pytest.approx(20.0)


def test_sign_helpers():
    assert sign_index(0) == 0
    assert sign_index(45) == 1
    assert sign_index(359.999) == 11
    assert degree_in_sign(45) == pytest.approx(15.0)
    assert degree_in_sign(-10) == pytest.approx(20.0)


def test_radian_roundtrip_constants():
    assert to_radians(180.0) == pytest.approx(math.pi)
    assert to_degrees(math.pi / 2) == pytest.approx(90.0)


@given(finite)
def test_normalize_range(a):
    v = normalize_angle(a)
    assert 0.0 <= v < 360.0


@given(finite, finite)
def test_separation_symmetric_and_bounded(a, b):
    s = angular_separation(a, b)
    assert 0.0 <= s <= 180.0
    assert s == angular_separation(b, a)


@given(finite, finite)
def test_midpoint_symmetric(a, b):
    assert calculate_midpoint(a, b) == calculate_midpoint(b, a)


@given(finite, finite)
def test_midpoint_is_equidistant(a, b):
    m = calculate_midpoint(a, b)
    assert angular_separation(m, a) == pytest.approx(angular_separation(m, b), abs=1e-6)
    # never further than a quarter turn from either end
    assert angular_separation(m, a) <= 90.0 + 1e-6
