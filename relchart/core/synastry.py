# relchart/core/synastry.py
# -*- coding: utf-8 -*-
"""
Synastry: how two natal charts interact point by point.

Public API
----------
generate_synastry_chart(chart1, chart2) -> SynastryResult

    chart1 / chart2 are BirthChart instances or JSON-shaped dicts
    ({"planets": {...}, "angles": {...}, "houses": [...]}).

Returned wire form (SynastryResult.to_dict())
---------------------------------------------
{
  "type": "synastry",
  "interAspects": [{"from": {...}, "to": {...}, "aspect": {...}}, ...],
  "houseOverlays": [{"person", "planet", "house", "inPartnerChart", "significance"}, ...],
  "vertexConnections": [...],      # empty unless both charts carry VTX
  "lunarNodeConnections": [...],   # empty unless both charts carry Rahu/Ketu
  "compatibility": {"score", "breakdown": {"aspects", "overlays"}, "interpretation"}
}

Inter-aspects cover every planet pair plus each person's planets to the
partner's ASC/MC/DSC/IC. House overlays run in both directions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple

from relchart.core.aspects import Aspect, find_aspect
from relchart.core.chart import BirthChart
from relchart.core.constants import AXES, VERTEX
from relchart.core.houses import get_house_for_position
from relchart.core.scoring import house_weight, round_half_up, synastry_subscore
from relchart.core.validators import calculation_stage, validate_chart_pair

log = logging.getLogger(__name__)

__all__ = [
    "ChartPoint",
    "InterAspect",
    "HouseOverlay",
    "PointConnection",
    "SynastryScore",
    "SynastryResult",
    "generate_synastry_chart",
    "synastry_interpretation",
]

# (threshold, text), descending
_INTERPRETATIONS: Tuple[Tuple[int, str], ...] = (
    (80, "Excellent synastry with strong natural compatibility"),
    (60, "Good synastry with solid compatibility potential"),
    (40, "Moderate synastry requiring understanding and effort"),
    (0, "Challenging synastry requiring significant work"),
)

# ───────────────────────────── Result types ─────────────────────────────

@dataclass(frozen=True)
class ChartPoint:
    person: int
    name: str
    kind: Literal["planet", "angle"] = "planet"

    def as_dict(self) -> Dict[str, Any]:
        return {"person": self.person, self.kind: self.name}


@dataclass(frozen=True)
class InterAspect:
    from_: ChartPoint
    to: ChartPoint
    aspect: Aspect

    @property
    def points(self) -> Tuple[str, str]:
        return (self.from_.name, self.to.name)

    def involves(self, *names: str) -> bool:
        return self.from_.name in names or self.to.name in names

    def as_dict(self) -> Dict[str, Any]:
        return {"from": self.from_.as_dict(), "to": self.to.as_dict(), "aspect": self.aspect.as_dict()}


@dataclass(frozen=True)
class HouseOverlay:
    person: int          # owner of the planet
    planet: str
    house: int           # 1..12 in the partner's chart
    significance: float

    @property
    def host(self) -> int:
        return 2 if self.person == 1 else 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "person": self.person,
            "planet": self.planet,
            "house": self.house,
            "inPartnerChart": self.host,
            "significance": float(self.significance),
        }


@dataclass(frozen=True)
class PointConnection:
    """Vertex or lunar-node contact between the two charts."""
    kind: str            # vertex-vertex | planet-vertex | north-node | south-node | node-axis
    from_: ChartPoint
    to: ChartPoint
    aspect: Aspect

    @property
    def points(self) -> Tuple[str, str]:
        return (self.from_.name, self.to.name)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "from": self.from_.as_dict(),
            "to": self.to.as_dict(),
            "aspect": self.aspect.as_dict(),
        }


@dataclass(frozen=True)
class SynastryScore:
    score: int
    aspects: int
    overlays: int
    interpretation: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": {"aspects": self.aspects, "overlays": self.overlays},
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True)
class SynastryResult:
    inter_aspects: Tuple[InterAspect, ...]
    house_overlays: Tuple[HouseOverlay, ...]
    vertex_connections: Tuple[PointConnection, ...]
    lunar_node_connections: Tuple[PointConnection, ...]
    compatibility: SynastryScore

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "synastry",
            "interAspects": [a.as_dict() for a in self.inter_aspects],
            "houseOverlays": [o.as_dict() for o in self.house_overlays],
            "vertexConnections": [c.as_dict() for c in self.vertex_connections],
            "lunarNodeConnections": [c.as_dict() for c in self.lunar_node_connections],
            "compatibility": self.compatibility.as_dict(),
        }

# ───────────────────────────── Utilities ─────────────────────────────

def synastry_interpretation(score: float) -> str:
    for threshold, text in _INTERPRETATIONS:
        if score >= threshold:
            return text
    return _INTERPRETATIONS[-1][1]

def _aspect_between(chart_a: BirthChart, a: str, chart_b: BirthChart, b: str) -> Optional[Aspect]:
    pa = chart_a.planets.get(a)
    pb = chart_b.planets.get(b)
    return find_aspect(
        chart_a.longitude_of(a),
        chart_b.longitude_of(b),
        pa.speed if pa else None,
        pb.speed if pb else None,
    )

def _planet_aspects(c1: BirthChart, c2: BirthChart) -> List[InterAspect]:
    out: List[InterAspect] = []
    for p1 in c1.planets:
        for p2 in c2.planets:
            asp = _aspect_between(c1, p1, c2, p2)
            if asp:
                out.append(InterAspect(ChartPoint(1, p1), ChartPoint(2, p2), asp))
    return out

def _planet_to_angle_aspects(src: BirthChart, src_person: int, dst: BirthChart, dst_person: int) -> List[InterAspect]:
    out: List[InterAspect] = []
    for planet in src.planets:
        for angle in AXES:
            if angle not in dst.angles:
                continue
            asp = _aspect_between(src, planet, dst, angle)
            if asp:
                out.append(InterAspect(
                    ChartPoint(src_person, planet),
                    ChartPoint(dst_person, angle, "angle"),
                    asp,
                ))
    return out

def _overlays(src: BirthChart, src_person: int, host: BirthChart) -> List[HouseOverlay]:
    out: List[HouseOverlay] = []
    if len(host.houses) != 12:
        log.warning("person %d chart has %d house cusps; overlays default to house 1",
                    2 if src_person == 1 else 1, len(host.houses))
    for planet, pos in src.planets.items():
        house = get_house_for_position(pos.longitude, host.houses)
        out.append(HouseOverlay(src_person, planet, house, house_weight(house)))
    return out

def _vertex_connections(c1: BirthChart, c2: BirthChart) -> List[PointConnection]:
    if VERTEX not in c1.angles or VERTEX not in c2.angles:
        return []
    out: List[PointConnection] = []
    asp = _aspect_between(c1, VERTEX, c2, VERTEX)
    if asp:
        out.append(PointConnection(
            "vertex-vertex", ChartPoint(1, VERTEX, "angle"), ChartPoint(2, VERTEX, "angle"), asp
        ))
    for src, sp, dst, dp in ((c1, 1, c2, 2), (c2, 2, c1, 1)):
        for planet in src.planets:
            asp = _aspect_between(src, planet, dst, VERTEX)
            if asp:
                out.append(PointConnection(
                    "planet-vertex", ChartPoint(sp, planet), ChartPoint(dp, VERTEX, "angle"), asp
                ))
    return out

def _lunar_node_connections(c1: BirthChart, c2: BirthChart) -> List[PointConnection]:
    out: List[PointConnection] = []
    pairs = (
        ("north-node", "Rahu", "Rahu"),
        ("south-node", "Ketu", "Ketu"),
        # nodal reversal: one person's North Node on the other's South Node
        ("node-axis", "Rahu", "Ketu"),
        ("node-axis", "Ketu", "Rahu"),
    )
    for kind, n1, n2 in pairs:
        if n1 in c1.planets and n2 in c2.planets:
            asp = _aspect_between(c1, n1, c2, n2)
            if asp:
                out.append(PointConnection(kind, ChartPoint(1, n1), ChartPoint(2, n2), asp))
    return out

# ───────────────────────────── Core API ─────────────────────────────

@calculation_stage("generate_synastry_chart")
def generate_synastry_chart(chart1: Any, chart2: Any) -> SynastryResult:
    c1, c2 = validate_chart_pair(chart1, chart2)

    inter = _planet_aspects(c1, c2)
    inter += _planet_to_angle_aspects(c1, 1, c2, 2)
    inter += _planet_to_angle_aspects(c2, 2, c1, 1)

    overlays = _overlays(c1, 1, c2) + _overlays(c2, 2, c1)

    score, aspect_score, overlay_score = synastry_subscore(inter, overlays)
    compat = SynastryScore(
        score=round_half_up(score),
        aspects=round_half_up(aspect_score),
        overlays=round_half_up(overlay_score),
        interpretation=synastry_interpretation(score),
    )
    result = SynastryResult(
        inter_aspects=tuple(inter),
        house_overlays=tuple(overlays),
        vertex_connections=tuple(_vertex_connections(c1, c2)),
        lunar_node_connections=tuple(_lunar_node_connections(c1, c2)),
        compatibility=compat,
    )
    log.debug(
        "synastry: %d inter-aspects, %d overlays, score=%d",
        len(result.inter_aspects), len(result.house_overlays), compat.score,
    )
    return result
