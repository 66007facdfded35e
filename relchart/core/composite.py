# relchart/core/composite.py
# -*- coding: utf-8 -*-
"""
Midpoint composite chart: the relationship as a chart of its own.

Public API
----------
generate_composite_chart(chart1, chart2, house_system="whole-sign") -> CompositeResult

Method
------
- Each planet present in both charts sits on the circular midpoint of the two
  longitudes (latitude is the plain mean, speed 0).
- ASC / MC are midpoints of the natal angles; DSC and IC are their opposites.
- Houses are derived from the composite ASC only: whole-sign by default, or
  equal-house. No quadrant system is attempted for a composite.
- Internal aspects run over every pair of positions, angles included.
- Angularity measures each planet's distance to the nearer of the first and
  tenth cusps.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from relchart.core.angles import (
    angular_separation,
    calculate_midpoint,
    degree_in_sign,
    normalize_angle,
    sign_index,
)
from relchart.core.aspects import Aspect, find_aspect, is_harmonious_aspect
from relchart.core.constants import (
    ANGULAR_ORB,
    AXES,
    SIGNS,
    STRONG_ANGULAR_ORB,
    WEAK_ANGULAR_ORB,
)
from relchart.core.houses import (
    HOUSE_SYSTEMS,
    canonical_house_system,
    get_house_for_position,
    houses_from_asc,
    planets_per_house,
)
from relchart.core.validators import ValidationError, calculation_stage, validate_chart_pair

log = logging.getLogger(__name__)

__all__ = [
    "CompositePosition",
    "CompositeAspect",
    "Angularity",
    "CompositeInterpretation",
    "CompositeResult",
    "generate_composite_chart",
]

_ASPECT_SENTENCES: Mapping[str, str] = {
    "conjunction": "{a}-{b} conjunction shows merged energies and shared purpose in the relationship",
    "trine": "{a}-{b} trine indicates natural flow and mutual support",
    "sextile": "{a}-{b} sextile suggests cooperative and adaptive relationship dynamics",
    "square": "{a}-{b} square reveals tension that drives relationship evolution",
    "opposition": "{a}-{b} opposition highlights complementary differences",
    "quincunx": "{a}-{b} quincunx indicates adjustment needed for harmony",
}

# ───────────────────────────── Result types ─────────────────────────────

@dataclass(frozen=True)
class CompositePosition:
    name: str
    longitude: float
    latitude: float = 0.0
    house: Optional[int] = None
    is_angle: bool = False

    @property
    def sign(self) -> int:
        return sign_index(self.longitude)

    @property
    def degree(self) -> float:
        return degree_in_sign(self.longitude)

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "longitude": float(self.longitude),
            "latitude": float(self.latitude),
            "sign": self.sign,
            "signName": SIGNS[self.sign],
            "degree": float(self.degree),
            "speed": 0.0,
        }
        if self.house is not None:
            d["house"] = self.house
        return d


@dataclass(frozen=True)
class CompositeAspect:
    planets: Tuple[str, str]
    aspect: Aspect
    interpretation: str

    @property
    def points(self) -> Tuple[str, str]:
        return self.planets

    def involves(self, *names: str) -> bool:
        return self.planets[0] in names or self.planets[1] in names

    def as_dict(self) -> Dict[str, Any]:
        return {
            "planets": list(self.planets),
            "aspect": self.aspect.as_dict(),
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True)
class Angularity:
    angular: Tuple[str, ...]
    strong: Tuple[str, ...]
    weak: Tuple[str, ...]
    analysis: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "angularPlanets": list(self.angular),
            "strongPlanets": list(self.strong),
            "weakPlanets": list(self.weak),
            "analysis": self.analysis,
        }


@dataclass(frozen=True)
class CompositeInterpretation:
    dominant_themes: Tuple[str, ...]
    relationship_style: str
    challenges: Tuple[str, ...]
    strengths: Tuple[str, ...]
    summary: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "dominantThemes": list(self.dominant_themes),
            "relationshipStyle": self.relationship_style,
            "challenges": list(self.challenges),
            "strengths": list(self.strengths),
            "summary": self.summary,
        }


@dataclass(frozen=True)
class CompositeResult:
    positions: Mapping[str, CompositePosition]
    houses: Tuple[float, ...]
    aspects: Tuple[CompositeAspect, ...]
    angularity: Angularity
    interpretation: CompositeInterpretation
    house_system: str = "whole-sign"

    def planets(self) -> List[CompositePosition]:
        return [p for p in self.positions.values() if not p.is_angle]

    def house_counts(self) -> List[int]:
        """Composite planets per house, houses 1..12."""
        return planets_per_house(p.house for p in self.planets() if p.house is not None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "composite",
            "method": "midpoint",
            "houseSystem": self.house_system,
            "positions": {k: v.as_dict() for k, v in self.positions.items()},
            "houses": [float(c) for c in self.houses],
            "aspects": [a.as_dict() for a in self.aspects],
            "angularity": self.angularity.as_dict(),
            "interpretation": self.interpretation.as_dict(),
        }

# ───────────────────────────── Positions & aspects ─────────────────────────────

def _composite_positions(c1, c2, houses: Tuple[float, ...], angles: Dict[str, float]) -> Dict[str, CompositePosition]:
    out: Dict[str, CompositePosition] = {}
    for name, p1 in c1.planets.items():
        p2 = c2.planets.get(name)
        if p2 is None:
            continue
        lon = calculate_midpoint(p1.longitude, p2.longitude)
        out[name] = CompositePosition(
            name=name,
            longitude=lon,
            latitude=(p1.latitude + p2.latitude) / 2.0,
            house=get_house_for_position(lon, houses),
        )
    for name in AXES:
        out[name] = CompositePosition(name=name, longitude=angles[name], is_angle=True)
    return out

def _composite_angles(c1, c2) -> Dict[str, float]:
    asc = calculate_midpoint(c1.angles["ASC"], c2.angles["ASC"])
    mc = calculate_midpoint(c1.angles["MC"], c2.angles["MC"])
    return {
        "ASC": asc,
        "MC": mc,
        "DSC": normalize_angle(asc + 180.0),
        "IC": normalize_angle(mc + 180.0),
    }

def _aspect_sentence(kind: str, a: str, b: str) -> str:
    tmpl = _ASPECT_SENTENCES.get(kind)
    return tmpl.format(a=a, b=b) if tmpl else f"{a}-{b} {kind} aspect"

def _internal_aspects(positions: Mapping[str, CompositePosition]) -> List[CompositeAspect]:
    out: List[CompositeAspect] = []
    items = list(positions.values())
    n = len(items)
    for i in range(n):
        for j in range(i + 1, n):
            a, b = items[i], items[j]
            asp = find_aspect(a.longitude, b.longitude)
            if asp:
                out.append(CompositeAspect(
                    planets=(a.name, b.name),
                    aspect=asp,
                    interpretation=_aspect_sentence(asp.type, a.name, b.name),
                ))
    return out

# ───────────────────────────── Angularity ─────────────────────────────

def _angularity_analysis(angular: List[str], strong: List[str]) -> str:
    if strong:
        return f"Strong angular emphasis with {', '.join(strong)} prominently placed"
    if angular:
        return f"Moderate angular influence from {', '.join(angular)}"
    return "Planets distributed throughout the chart with less angular emphasis"

def _angularity(positions: Mapping[str, CompositePosition], houses: Tuple[float, ...]) -> Angularity:
    angular: List[str] = []
    strong: List[str] = []
    weak: List[str] = []
    first, tenth = houses[0], houses[9]
    for p in positions.values():
        if p.is_angle:
            continue
        d = min(angular_separation(p.longitude, first), angular_separation(p.longitude, tenth))
        if d <= ANGULAR_ORB:
            angular.append(p.name)
            if d <= STRONG_ANGULAR_ORB:
                strong.append(p.name)
        elif d >= WEAK_ANGULAR_ORB:
            weak.append(p.name)
    return Angularity(tuple(angular), tuple(strong), tuple(weak), _angularity_analysis(angular, strong))

# ───────────────────────────── Interpretation ─────────────────────────────

def _dominant_themes(positions: Mapping[str, CompositePosition], aspects: List[CompositeAspect]) -> List[str]:
    themes: List[str] = []
    signs = Counter(p.sign for p in positions.values())
    if signs:
        sign, count = signs.most_common(1)[0]
        if count >= 3:
            themes.append(f"Strong emphasis in {SIGNS[sign]} showing relationship focus")

    kinds = Counter(a.aspect.type for a in aspects)
    harmonious = sum(n for k, n in kinds.items() if is_harmonious_aspect(k))
    challenging = kinds["square"] + kinds["opposition"]
    if harmonious > challenging * 1.5:
        themes.append("Harmonious aspects dominate, suggesting smooth relationship flow")
    elif challenging > harmonious * 1.5:
        themes.append("Challenging aspects suggest relationship requires active growth")
    return themes

def _relationship_style(positions: Mapping[str, CompositePosition]) -> str:
    venus = positions.get("Venus")
    mars = positions.get("Mars")
    vh = venus.house if venus else None
    mh = mars.house if mars else None
    if vh is not None and vh == mh:
        return "Intensely romantic and passionate connection"
    if vh in (5, 7, 8) and mh in (5, 7, 8):
        return "Romantic relationship with strong physical attraction"
    return "Balanced relationship with complementary energies"

def _challenges(kinds: Counter) -> List[str]:
    out: List[str] = []
    if kinds["square"] > 2:
        out.append("Multiple squares indicate areas requiring compromise")
    if kinds["opposition"] > 1:
        out.append("Oppositions suggest need for balance and understanding")
    return out

def _strengths(kinds: Counter) -> List[str]:
    out: List[str] = []
    if kinds["trine"] > 2:
        out.append("Multiple trines suggest natural harmony and ease")
    if kinds["sextile"] > 2:
        out.append("Sextiles indicate cooperative and supportive energy")
    return out

def _summary(positions: Mapping[str, CompositePosition], aspects: List[CompositeAspect]) -> str:
    n = len(aspects)
    head = f"Composite chart with {len(positions)} positions and {n} aspects. "
    if n > 10:
        return head + "Highly active relationship with many interconnected energies."
    if n > 5:
        return head + "Moderately active relationship with balanced dynamics."
    return head + "Relationship with focused, selective energies."

def _interpret(positions: Mapping[str, CompositePosition], aspects: List[CompositeAspect]) -> CompositeInterpretation:
    kinds = Counter(a.aspect.type for a in aspects)
    return CompositeInterpretation(
        dominant_themes=tuple(_dominant_themes(positions, aspects)),
        relationship_style=_relationship_style(positions),
        challenges=tuple(_challenges(kinds)),
        strengths=tuple(_strengths(kinds)),
        summary=_summary(positions, aspects),
    )

# ───────────────────────────── Core API ─────────────────────────────

@calculation_stage("generate_composite_chart")
def generate_composite_chart(chart1: Any, chart2: Any, house_system: str = "whole-sign") -> CompositeResult:
    c1, c2 = validate_chart_pair(chart1, chart2)
    system = canonical_house_system(house_system)
    if system is None:
        raise ValidationError(
            {"loc": ["house_system"], "msg": f"house_system must be one of {', '.join(HOUSE_SYSTEMS)}",
             "type": "value_error.house_system"},
            received=house_system,
        )
    house_system = system

    angles = _composite_angles(c1, c2)
    houses = houses_from_asc(angles["ASC"], house_system)
    positions = _composite_positions(c1, c2, houses, angles)
    aspects = _internal_aspects(positions)

    result = CompositeResult(
        positions=MappingProxyType(positions),
        houses=houses,
        aspects=tuple(aspects),
        angularity=_angularity(positions, houses),
        interpretation=_interpret(positions, aspects),
        house_system=house_system,
    )
    log.debug(
        "composite: %d positions, %d aspects, %d angular (%s houses)",
        len(positions), len(aspects), len(result.angularity.angular), house_system,
    )
    return result
