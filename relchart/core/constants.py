# relchart/core/constants.py
from __future__ import annotations

"""
Immutable tables shared by every stage of the relationship pipeline.

All tables are read-only mappings (MappingProxyType) so a stage can never
mutate another stage's weights. Values are heuristics and kept as-is.
"""

from types import MappingProxyType
from typing import Final, Mapping, Tuple

# ───────────────────────── bodies & points ─────────────────────────

MAJORS: Final[Tuple[str, ...]] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars",
    "Jupiter", "Saturn", "Uranus", "Neptune", "Pluto",
)
NODES: Final[Tuple[str, ...]] = ("Rahu", "Ketu")
PLANETS: Final[Tuple[str, ...]] = MAJORS + NODES

# Angles aspected across charts; VTX is handled separately.
AXES: Final[Tuple[str, ...]] = ("ASC", "MC", "DSC", "IC")
VERTEX: Final[str] = "VTX"
ANGLES: Final[Tuple[str, ...]] = AXES + (VERTEX,)

PLANET_ALIASES: Final[Mapping[str, str]] = MappingProxyType({
    **{p.lower(): p for p in PLANETS},
    "north node": "Rahu", "northnode": "Rahu", "true node": "Rahu", "mean node": "Rahu",
    "south node": "Ketu", "southnode": "Ketu",
})

ANGLE_ALIASES: Final[Mapping[str, str]] = MappingProxyType({
    **{a.lower(): a for a in ANGLES},
    "ascendant": "ASC", "midheaven": "MC", "descendant": "DSC",
    "imum coeli": "IC", "vertex": "VTX",
})

SIGNS: Final[Tuple[str, ...]] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)
# Taurus, Virgo, Capricorn
EARTH_SIGNS: Final[Tuple[int, ...]] = (1, 5, 9)

# ───────────────────────── aspects ─────────────────────────

# Ascending angle order; the first kind within orb wins.
ASPECT_ANGLES: Final[Mapping[str, float]] = MappingProxyType({
    "conjunction": 0.0,
    "sextile": 60.0,
    "square": 90.0,
    "trine": 120.0,
    "quincunx": 150.0,
    "opposition": 180.0,
})

ASPECT_ORBS: Final[Mapping[str, float]] = MappingProxyType({
    "conjunction": 8.0,
    "sextile": 6.0,
    "square": 8.0,
    "trine": 8.0,
    "quincunx": 3.0,
    "opposition": 8.0,
})

ASPECT_WEIGHTS: Final[Mapping[str, float]] = MappingProxyType({
    "conjunction": 1.0,
    "trine": 0.8,
    "sextile": 0.6,
    "square": 0.4,
    "opposition": 0.3,
    "quincunx": 0.2,
})

POSITIVE_ASPECTS: Final[frozenset] = frozenset({"conjunction", "trine", "sextile"})
HARMONIOUS_ASPECTS: Final[frozenset] = frozenset({"trine", "sextile"})
CHALLENGING_ASPECTS: Final[frozenset] = frozenset({"square", "opposition", "quincunx"})

# ───────────────────────── scoring weights ─────────────────────────

PLANET_WEIGHTS: Final[Mapping[str, float]] = MappingProxyType({
    "Sun": 1.0,
    "Moon": 0.9,
    "Venus": 0.8,
    "Mars": 0.7,
    "Mercury": 0.6,
    "Jupiter": 0.5,
    "Saturn": 0.4,
    "Uranus": 0.3,
    "Neptune": 0.2,
    "Pluto": 0.1,
})
# Angles, nodes and anything else not listed above.
DEFAULT_POINT_WEIGHT: Final[float] = 0.5

HOUSE_OVERLAY_WEIGHTS: Final[Mapping[int, float]] = MappingProxyType({
    1: 0.9, 2: 0.6, 3: 0.6, 4: 0.7, 5: 0.8, 6: 0.3,
    7: 0.9, 8: 0.7, 9: 0.6, 10: 0.6, 11: 0.5, 12: 0.3,
})
DEFAULT_HOUSE_WEIGHT: Final[float] = 0.1
GOOD_OVERLAY_THRESHOLD: Final[float] = 0.7
BAD_OVERLAY_THRESHOLD: Final[float] = 0.4

SYNASTRY_WEIGHTS: Final[Mapping[str, float]] = MappingProxyType({"aspects": 0.6, "overlays": 0.4})
COMPOSITE_WEIGHTS: Final[Mapping[str, float]] = MappingProxyType(
    {"aspects": 0.5, "angularity": 0.3, "house_balance": 0.2}
)
OVERALL_WEIGHTS: Final[Mapping[str, float]] = MappingProxyType(
    {"synastry": 0.4, "composite": 0.4, "dynamics": 0.2}
)

# Angularity bands (degrees from the nearest of ASC/MC cusps)
ANGULAR_ORB: Final[float] = 5.0
STRONG_ANGULAR_ORB: Final[float] = 2.0
WEAK_ANGULAR_ORB: Final[float] = 15.0

# ───────────────────────── rating tables ─────────────────────────

# (threshold, label, description), descending
COMPATIBILITY_RATINGS: Final[Tuple[Tuple[int, str, str], ...]] = (
    (80, "Exceptional", "Outstanding compatibility with strong natural harmony"),
    (70, "Very Strong", "Excellent compatibility with good potential for lasting relationship"),
    (60, "Strong", "Good compatibility with solid foundation for relationship"),
    (50, "Moderate", "Moderate compatibility requiring effort and understanding"),
    (40, "Challenging", "Challenging compatibility with significant differences to navigate"),
    (0, "Very Challenging", "Very challenging compatibility requiring substantial work"),
)

RELATIONSHIP_TYPES: Final[Tuple[Tuple[int, str], ...]] = (
    (85, "Soulmate Connection"),
    (70, "Harmonious Partnership"),
    (55, "Growth Partnership"),
    (40, "Challenging Connection"),
    (0, "Karmic Lesson"),
)

LONG_TERM_POTENTIAL: Final[Tuple[Tuple[int, str], ...]] = (
    (80, "Excellent long-term potential with strong prospects for lasting harmony"),
    (70, "Very good long-term potential with positive growth trajectory"),
    (60, "Good long-term potential with some challenges to overcome"),
    (50, "Moderate long-term potential requiring commitment and effort"),
    (40, "Fair long-term potential with significant work needed"),
    (0, "Challenging long-term outlook requiring substantial personal development"),
)

DYNAMIC_LABELS: Final[Mapping[str, str]] = MappingProxyType({
    "communication": "Communication",
    "emotional": "Emotional Connection",
    "intimacy": "Intimacy",
    "conflict": "Conflict Resolution",
    "growth": "Growth Potential",
    "stability": "Stability",
})
