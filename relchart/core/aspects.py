# relchart/core/aspects.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional

from relchart.core.angles import angular_separation, is_valid_number, normalize_angle
from relchart.core.constants import (
    ASPECT_ANGLES,
    ASPECT_ORBS,
    CHALLENGING_ASPECTS,
    HARMONIOUS_ASPECTS,
    POSITIVE_ASPECTS,
)

__all__ = [
    "AspectKind",
    "Aspect",
    "find_aspect",
    "is_positive_aspect",
    "is_harmonious_aspect",
    "is_challenging_aspect",
]

AspectKind = Literal["conjunction", "sextile", "square", "trine", "quincunx", "opposition"]

# Step (days) used to probe whether an orb is closing.
_APPLYING_STEP_DAYS = 0.01


@dataclass(frozen=True)
class Aspect:
    type: AspectKind
    angle: float          # exact aspect angle
    orb: float            # |separation - angle|
    applying: bool
    separation: float     # measured separation, [0, 180]
    exactness: float      # 1 - orb/max_orb, [0, 1]

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        for k in ("angle", "orb", "separation", "exactness"):
            d[k] = float(d[k])
        return d


def _is_applying(lon1: float, lon2: float, speed1: Optional[float], speed2: Optional[float], angle: float) -> bool:
    if not (is_valid_number(speed1) and is_valid_number(speed2)):
        return False
    orb_now = abs(angular_separation(lon1, lon2) - angle)
    nxt = angular_separation(
        lon1 + float(speed1) * _APPLYING_STEP_DAYS,
        lon2 + float(speed2) * _APPLYING_STEP_DAYS,
    )
    return abs(nxt - angle) < orb_now


def find_aspect(
    lon1: float,
    lon2: float,
    speed1: Optional[float] = None,
    speed2: Optional[float] = None,
) -> Optional[Aspect]:
    """
    Classify the separation of two longitudes.

    Kinds are tried in ascending angle order and the first one inside its
    maximum orb wins, so the same pair always maps to the same aspect.
    Returns None when no kind is within orb.
    """
    sep = angular_separation(normalize_angle(lon1), normalize_angle(lon2))
    for name, angle in ASPECT_ANGLES.items():
        max_orb = ASPECT_ORBS[name]
        orb = abs(sep - angle)
        if orb <= max_orb:
            return Aspect(
                type=name,  # type: ignore[arg-type]
                angle=angle,
                orb=orb,
                applying=_is_applying(lon1, lon2, speed1, speed2, angle),
                separation=sep,
                exactness=max(0.0, 1.0 - orb / max_orb),
            )
    return None


def is_positive_aspect(kind: str) -> bool:
    return kind in POSITIVE_ASPECTS


def is_harmonious_aspect(kind: str) -> bool:
    return kind in HARMONIOUS_ASPECTS


def is_challenging_aspect(kind: str) -> bool:
    return kind in CHALLENGING_ASPECTS
