# relchart/core/dynamics.py
# -*- coding: utf-8 -*-
"""
Relationship dynamics: six behavioural dimensions scored from synastry
contacts, house overlays and composite aspects.

    dimension       base  deltas
    communication   50    +10 positive Mercury contact, +5 3rd-house overlay, +3 composite Mercury aspect
    emotional       50    +12 positive Moon contact, +8 4th-house overlay, +4 composite Moon aspect
    intimacy        50    +15 positive Venus/Mars pair, +10 Venus/Mars/Pluto in 5th/8th, +5 composite Venus/Mars/Pluto aspect
    conflict        70    +5 positive Saturn contact, -8 per challenging contact beyond 3, -3 challenging composite aspect
    growth          50    +10 positive Jupiter contact, +8 9th-house overlay, +4 composite Jupiter aspect, +3 Uranus contact
    stability       50    +8 positive Saturn contact, +0.4 x composite house balance, +2 composite planet in an earth sign

Scores are clamped to [0, 100] and rounded. "Contact" means a synastry
inter-aspect; only the synastry side is filtered by aspect polarity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from relchart.core.aspects import is_challenging_aspect, is_positive_aspect
from relchart.core.compatibility import CompatibilityResult, composite_house_balance
from relchart.core.composite import CompositeResult
from relchart.core.constants import EARTH_SIGNS
from relchart.core.scoring import clamp, round_half_up
from relchart.core.synastry import SynastryResult
from relchart.core.validators import calculation_stage, require_instance

log = logging.getLogger(__name__)

__all__ = [
    "DIMENSIONS",
    "Dimension",
    "Evolution",
    "DynamicsOverview",
    "DynamicsResult",
    "analyze_relationship_dynamics",
]

DIMENSIONS: Tuple[str, ...] = ("communication", "emotional", "intimacy", "conflict", "growth", "stability")

_DESCRIPTIONS: Mapping[str, Tuple[str, str, str, str]] = {
    # >=80, >=60, >=40, below
    "communication": (
        "Excellent communication flow with mutual understanding",
        "Good communication with minor challenges",
        "Communication requires conscious effort",
        "Communication may be challenging and needs work",
    ),
    "emotional": (
        "Deep emotional connection and security",
        "Strong emotional bond with good support",
        "Emotional connection develops over time",
        "Emotional intimacy may require patience and understanding",
    ),
    "intimacy": (
        "Intense physical and emotional intimacy",
        "Good intimacy potential with passion",
        "Intimacy develops gradually with time",
        "Intimacy may require patience and open communication",
    ),
    "conflict": (
        "Excellent conflict resolution skills",
        "Good ability to work through conflicts",
        "Conflicts can be resolved with effort",
        "Conflict resolution may be challenging",
    ),
    "growth": (
        "Strong potential for mutual growth and expansion",
        "Good opportunities for personal development",
        "Growth possible with commitment and effort",
        "Growth may require external support and guidance",
    ),
    "stability": (
        "Very stable and secure relationship foundation",
        "Stable with good long-term potential",
        "Stability develops over time with work",
        "Stability may fluctuate and needs attention",
    ),
}

_STRENGTH_LABELS: Mapping[str, str] = {
    "communication": "Excellent communication",
    "emotional": "Deep emotional connection",
    "intimacy": "Strong physical intimacy",
    "growth": "Great growth potential",
    "stability": "High stability",
}

_CHALLENGE_LABELS: Mapping[str, str] = {
    "communication": "Communication challenges",
    "emotional": "Emotional intimacy issues",
    "conflict": "Conflict resolution difficulties",
    "stability": "Stability concerns",
}

# ───────────────────────────── Result types ─────────────────────────────

@dataclass(frozen=True)
class Dimension:
    score: int
    description: str
    aspects: Tuple[Any, ...] = ()
    overlays: Tuple[Any, ...] = ()
    composite_aspects: Tuple[Any, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "score": self.score,
            "description": self.description,
            "aspects": [a.as_dict() for a in self.aspects],
            "overlays": [o.as_dict() for o in self.overlays],
            "compositeAspects": [a.as_dict() for a in self.composite_aspects],
        }
        d.update(self.extra)
        return d


@dataclass(frozen=True)
class Evolution:
    transformative: bool
    intensity: str          # Low | Moderate | High | Very High
    aspects: Tuple[Any, ...]
    description: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "transformative": self.transformative,
            "intensity": self.intensity,
            "aspects": [a.as_dict() for a in self.aspects],
            "description": self.description,
        }


@dataclass(frozen=True)
class DynamicsOverview:
    average_score: int
    dominant_strengths: Tuple[str, ...]
    key_challenges: Tuple[str, ...]
    relationship_style: str
    long_term_score: int
    long_term_outlook: str
    compatibility_overall: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "averageScore": self.average_score,
            "dominantStrengths": list(self.dominant_strengths),
            "keyChallenges": list(self.key_challenges),
            "relationshipStyle": self.relationship_style,
            "longTermOutlook": {"score": self.long_term_score, "description": self.long_term_outlook},
            "compatibilityOverall": self.compatibility_overall,
        }


@dataclass(frozen=True)
class DynamicsResult:
    communication: Dimension
    emotional: Dimension
    intimacy: Dimension
    conflict: Dimension
    growth: Dimension
    stability: Dimension
    evolution: Evolution
    overall: DynamicsOverview

    def scores(self) -> Dict[str, int]:
        return {name: getattr(self, name).score for name in DIMENSIONS}

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {name: getattr(self, name).as_dict() for name in DIMENSIONS}
        d["evolution"] = self.evolution.as_dict()
        d["overall"] = self.overall.as_dict()
        return d

# ───────────────────────────── Utilities ─────────────────────────────

def _describe(dimension: str, score: float) -> str:
    high, good, fair, low = _DESCRIPTIONS[dimension]
    if score >= 80:
        return high
    if score >= 60:
        return good
    if score >= 40:
        return fair
    return low

def _dimension(name: str, raw: float, **evidence: Any) -> Dimension:
    score = round_half_up(clamp(raw))
    extra = evidence.pop("extra", {})
    return Dimension(
        score=score,
        description=_describe(name, score),
        aspects=tuple(evidence.get("aspects", ())),
        overlays=tuple(evidence.get("overlays", ())),
        composite_aspects=tuple(evidence.get("composite_aspects", ())),
        extra=extra,
    )

def _contacts(synastry: SynastryResult, *planets: str) -> List[Any]:
    return [a for a in synastry.inter_aspects if a.involves(*planets)]

def _positive(aspects: Sequence[Any]) -> List[Any]:
    return [a for a in aspects if is_positive_aspect(a.aspect.type)]

def _overlays_in(synastry: SynastryResult, houses: Sequence[int], planets: Sequence[str] = ()) -> List[Any]:
    return [
        o for o in synastry.house_overlays
        if o.house in houses and (not planets or o.planet in planets)
    ]

def _composite_with(composite: CompositeResult, *planets: str) -> List[Any]:
    return [a for a in composite.aspects if a.involves(*planets)]

# ───────────────────────────── Dimensions ─────────────────────────────

def _communication(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    aspects = _contacts(syn, "Mercury")
    overlays = _overlays_in(syn, (3,))
    comp_aspects = _composite_with(comp, "Mercury")
    raw = 50 + len(_positive(aspects)) * 10 + len(overlays) * 5 + len(comp_aspects) * 3
    return _dimension("communication", raw, aspects=aspects, overlays=overlays, composite_aspects=comp_aspects)

def _emotional(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    aspects = _contacts(syn, "Moon")
    overlays = _overlays_in(syn, (4,))
    comp_aspects = _composite_with(comp, "Moon")
    raw = 50 + len(_positive(aspects)) * 12 + len(overlays) * 8 + len(comp_aspects) * 4
    return _dimension("emotional", raw, aspects=aspects, overlays=overlays, composite_aspects=comp_aspects)

def _intimacy(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    pair = ("Venus", "Mars")
    aspects = [a for a in syn.inter_aspects if a.from_.name in pair and a.to.name in pair]
    overlays = _overlays_in(syn, (5, 8), ("Venus", "Mars", "Pluto"))
    comp_aspects = _composite_with(comp, "Venus", "Mars", "Pluto")
    raw = 50 + len(_positive(aspects)) * 15 + len(overlays) * 10 + len(comp_aspects) * 5
    return _dimension("intimacy", raw, aspects=aspects, overlays=overlays, composite_aspects=comp_aspects)

def _conflict(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    saturn = _contacts(syn, "Saturn")
    challenging = [a for a in syn.inter_aspects if is_challenging_aspect(a.aspect.type)]
    comp_challenging = [a for a in comp.aspects if is_challenging_aspect(a.aspect.type)]
    raw = 70 + len(_positive(saturn)) * 5
    raw -= max(0, len(challenging) - 3) * 8
    raw -= len(comp_challenging) * 3
    return _dimension(
        "conflict", raw,
        aspects=saturn, composite_aspects=comp_challenging,
        extra={"challengingAspects": len(challenging)},
    )

def _growth(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    jupiter = _contacts(syn, "Jupiter")
    overlays = _overlays_in(syn, (9,))
    comp_aspects = _composite_with(comp, "Jupiter")
    uranus = _contacts(syn, "Uranus")
    raw = 50 + len(_positive(jupiter)) * 10 + len(overlays) * 8 + len(comp_aspects) * 4 + len(uranus) * 3
    return _dimension(
        "growth", raw,
        aspects=jupiter, overlays=overlays, composite_aspects=comp_aspects,
        extra={"uranusAspects": len(uranus)},
    )

def _stability(syn: SynastryResult, comp: CompositeResult) -> Dimension:
    saturn = _contacts(syn, "Saturn")
    balance = composite_house_balance(comp)
    earth = sum(1 for p in comp.planets() if p.sign in EARTH_SIGNS)
    raw = 50 + len(_positive(saturn)) * 8 + balance * 0.4 + earth * 2
    return _dimension(
        "stability", raw,
        aspects=saturn,
        extra={"houseBalance": round(balance, 2), "earthSignEmphasis": earth},
    )

def _evolution(syn: SynastryResult) -> Evolution:
    aspects = _contacts(syn, "Uranus", "Pluto")
    n = len(aspects)
    if n == 0:
        intensity = "Low"
    elif n <= 2:
        intensity = "Moderate"
    elif n <= 4:
        intensity = "High"
    else:
        intensity = "Very High"
    description = (
        "Relationship has strong transformative potential and may undergo significant changes"
        if n else
        "Relationship may follow more traditional patterns with gradual evolution"
    )
    return Evolution(transformative=n > 0, intensity=intensity, aspects=tuple(aspects), description=description)

# ───────────────────────────── Overview ─────────────────────────────

def _relationship_style(scores: Mapping[str, int]) -> str:
    avg = sum(scores[k] for k in ("communication", "emotional", "intimacy", "growth")) / 4.0
    if avg >= 75:
        return "Harmonious and fulfilling"
    if avg >= 60:
        return "Balanced with good potential"
    if avg >= 45:
        return "Growth-oriented with challenges"
    return "Transformative with significant work needed"

def _long_term(scores: Mapping[str, int]) -> Tuple[int, str]:
    score = (scores["stability"] + scores["growth"] + scores["conflict"]) / 3.0
    if score >= 70:
        outlook = "Excellent long-term prospects"
    elif score >= 60:
        outlook = "Good long-term potential"
    elif score >= 50:
        outlook = "Fair long-term potential with effort"
    elif score >= 40:
        outlook = "Challenging long-term outlook"
    else:
        outlook = "Significant work needed for long-term viability"
    return round_half_up(score), outlook

def _overview(scores: Mapping[str, int], compatibility: CompatibilityResult) -> DynamicsOverview:
    strengths = [label for k, label in _STRENGTH_LABELS.items() if scores[k] >= 70]
    challenges = [label for k, label in _CHALLENGE_LABELS.items() if scores[k] <= 40]
    lt_score, lt_text = _long_term(scores)
    return DynamicsOverview(
        average_score=round_half_up(sum(scores.values()) / len(scores)),
        dominant_strengths=tuple(strengths[:3]),
        key_challenges=tuple(challenges[:3]),
        relationship_style=_relationship_style(scores),
        long_term_score=lt_score,
        long_term_outlook=lt_text,
        compatibility_overall=compatibility.overall,
    )

# ───────────────────────────── Core API ─────────────────────────────

@calculation_stage("analyze_relationship_dynamics")
def analyze_relationship_dynamics(
    synastry: SynastryResult,
    composite: CompositeResult,
    compatibility: CompatibilityResult,
) -> DynamicsResult:
    require_instance(synastry, SynastryResult, "synastry")
    require_instance(composite, CompositeResult, "composite")
    require_instance(compatibility, CompatibilityResult, "compatibility")

    dims = {
        "communication": _communication(synastry, composite),
        "emotional": _emotional(synastry, composite),
        "intimacy": _intimacy(synastry, composite),
        "conflict": _conflict(synastry, composite),
        "growth": _growth(synastry, composite),
        "stability": _stability(synastry, composite),
    }
    scores = {k: v.score for k, v in dims.items()}
    result = DynamicsResult(
        evolution=_evolution(synastry),
        overall=_overview(scores, compatibility),
        **dims,
    )
    log.debug("dynamics: %s", scores)
    return result
