# relchart/core/scoring.py
from __future__ import annotations

"""
Scoring primitives shared by the synastry, composite and compatibility stages.

Anything scored here only needs two attributes:
  - aspects:  `.aspect.type` and `.points` (names of the two endpoints)
  - overlays: `.house` and `.planet`
"""

import math
from typing import Iterable, Sequence, Tuple

from relchart.core.constants import (
    ASPECT_WEIGHTS,
    COMPOSITE_WEIGHTS,
    DEFAULT_HOUSE_WEIGHT,
    DEFAULT_POINT_WEIGHT,
    HOUSE_OVERLAY_WEIGHTS,
    PLANET_WEIGHTS,
    POSITIVE_ASPECTS,
    SYNASTRY_WEIGHTS,
)

# ───────────────────────── numeric helpers ─────────────────────────

def clamp(v: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, v))

def round_half_up(x: float) -> int:
    """Round .5 away from zero for positives (not banker's rounding)."""
    return int(math.floor(x + 0.5))

def variance(values: Sequence[float]) -> float:
    """Population variance; 0 for an empty sequence."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)

# ───────────────────────── weights ─────────────────────────

def point_weight(name: str) -> float:
    return PLANET_WEIGHTS.get(name, DEFAULT_POINT_WEIGHT)

def house_weight(house: int) -> float:
    return HOUSE_OVERLAY_WEIGHTS.get(house, DEFAULT_HOUSE_WEIGHT)

def aspect_contribution(kind: str, points: Tuple[str, ...]) -> float:
    w = sum(point_weight(p) for p in points) / len(points) if points else DEFAULT_POINT_WEIGHT
    return ASPECT_WEIGHTS.get(kind, 0.0) * w * 100.0

def overlay_contribution(house: int, planet: str) -> float:
    return house_weight(house) * point_weight(planet) * 100.0

# ───────────────────────── scores ─────────────────────────

def score_aspects(aspects: Iterable) -> float:
    """
    min(positive - 0.5 * negative, 100). Conjunctions, trines and sextiles
    are positive; every other kind counts against. Empty input scores 0.
    """
    positive = 0.0
    negative = 0.0
    for a in aspects:
        c = aspect_contribution(a.aspect.type, tuple(a.points))
        if a.aspect.type in POSITIVE_ASPECTS:
            positive += c
        else:
            negative += c
    return min(positive - 0.5 * negative, 100.0)

def score_house_overlays(overlays: Sequence) -> float:
    """Mean overlay contribution, capped at 100. Empty input scores 0."""
    if not overlays:
        return 0.0
    total = sum(overlay_contribution(o.house, o.planet) for o in overlays)
    return min(total / len(overlays), 100.0)

def synastry_subscore(inter_aspects: Iterable, overlays: Sequence) -> Tuple[float, float, float]:
    """(score, aspect score, overlay score); score clamped to [0, 100]."""
    a = score_aspects(inter_aspects)
    o = score_house_overlays(overlays)
    score = SYNASTRY_WEIGHTS["aspects"] * a + SYNASTRY_WEIGHTS["overlays"] * o
    return clamp(score), a, o

def angularity_score(n_angular: int, n_strong: int) -> float:
    return min(n_angular / 10.0 * 100.0 + n_strong / 5.0 * 100.0, 100.0)

def house_balance_score(per_house: Sequence[int]) -> float:
    """max(0, 100 - 10 * variance of planets-per-house counts)."""
    return max(0.0, 100.0 - variance([float(c) for c in per_house]) * 10.0)

def composite_subscore(aspect_score: float, angular: float, balance: float) -> float:
    score = (
        COMPOSITE_WEIGHTS["aspects"] * aspect_score
        + COMPOSITE_WEIGHTS["angularity"] * angular
        + COMPOSITE_WEIGHTS["house_balance"] * balance
    )
    return clamp(score)
