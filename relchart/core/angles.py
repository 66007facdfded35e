# relchart/core/angles.py
from __future__ import annotations

import math
from typing import Any

__all__ = [
    "normalize_angle",
    "angular_separation",
    "calculate_midpoint",
    "to_radians",
    "to_degrees",
    "is_valid_number",
    "sign_index",
    "degree_in_sign",
]


def is_valid_number(v: Any) -> bool:
    """True for finite real numbers (bools are rejected)."""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def normalize_angle(a: float) -> float:
    """Fold any finite angle into [0, 360)."""
    if not is_valid_number(a):
        raise ValueError(f"angle must be a finite number, got {a!r}")
    v = float(a) % 360.0
    # tiny negatives fold to 360.0 in float arithmetic
    if v >= 360.0 or math.isclose(v, 0.0, abs_tol=1e-12):
        return 0.0
    return v


def angular_separation(a: float, b: float) -> float:
    """Smallest separation on the circle, in [0, 180]."""
    d = abs(normalize_angle(a) - normalize_angle(b))
    return d if d <= 180.0 else 360.0 - d


def calculate_midpoint(a: float, b: float) -> float:
    """
    Circular midpoint along the shorter arc.

    (350, 10) -> 0, (10, 100) -> 55. Symmetric in a and b; for points exactly
    opposite the plain average is returned.
    """
    a = normalize_angle(a)
    b = normalize_angle(b)
    mid = (a + b) / 2.0
    if abs(a - b) > 180.0:
        mid += 180.0
    return normalize_angle(mid)


def to_radians(deg: float) -> float:
    return math.radians(deg)


def to_degrees(rad: float) -> float:
    return math.degrees(rad)


def sign_index(lon: float) -> int:
    """Zodiac sign 0..11 (Aries = 0)."""
    return int(normalize_angle(lon) // 30.0)


def degree_in_sign(lon: float) -> float:
    return normalize_angle(lon) % 30.0
