# relchart/core/compatibility.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from relchart.core.composite import CompositeResult
from relchart.core.constants import (
    BAD_OVERLAY_THRESHOLD,
    COMPATIBILITY_RATINGS,
    GOOD_OVERLAY_THRESHOLD,
    OVERALL_WEIGHTS,
)
from relchart.core.scoring import (
    angularity_score,
    clamp,
    composite_subscore,
    house_balance_score,
    house_weight,
    round_half_up,
    score_aspects,
    synastry_subscore,
)
from relchart.core.synastry import SynastryResult
from relchart.core.validators import calculation_stage, require_instance

log = logging.getLogger(__name__)

__all__ = [
    "Rating",
    "CompatibilityResult",
    "calculate_overall_compatibility",
    "rating_for",
    "composite_house_balance",
]

_INTERPRETATIONS: Tuple[Tuple[int, str], ...] = (
    (80, "Exceptional compatibility with strong harmonious connections and excellent potential"),
    (70, "Very strong compatibility with positive dynamics and good growth potential"),
    (60, "Strong compatibility with manageable challenges and positive outlook"),
    (50, "Moderate compatibility requiring effort and understanding from both partners"),
    (40, "Challenging compatibility with significant differences requiring work"),
    (0, "Very challenging compatibility with fundamental incompatibilities"),
)

# ───────────────────────── result types ─────────────────────────

@dataclass(frozen=True)
class Rating:
    label: str
    description: str

    def as_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "description": self.description}


@dataclass(frozen=True)
class CompatibilityResult:
    overall: int
    synastry: int
    composite: int
    dynamics: int
    rating: Rating
    strengths: Tuple[str, ...]
    challenges: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    interpretation: str

    @property
    def breakdown(self) -> Dict[str, int]:
        return {"synastry": self.synastry, "composite": self.composite, "dynamics": self.dynamics}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "breakdown": self.breakdown,
            "rating": self.rating.as_dict(),
            "strengths": list(self.strengths),
            "challenges": list(self.challenges),
            "recommendations": list(self.recommendations),
            "interpretation": self.interpretation,
        }

# ───────────────────────── helpers ─────────────────────────

def rating_for(score: float) -> Rating:
    for threshold, label, description in COMPATIBILITY_RATINGS:
        if score >= threshold:
            return Rating(label, description)
    _, label, description = COMPATIBILITY_RATINGS[-1]
    return Rating(label, description)

def _interpretation(score: float) -> str:
    for threshold, text in _INTERPRETATIONS:
        if score >= threshold:
            return text
    return _INTERPRETATIONS[-1][1]

def _all_aspects(synastry: SynastryResult, composite: CompositeResult) -> List[Any]:
    return list(synastry.inter_aspects) + list(composite.aspects)

def _by_type(aspects: Sequence[Any], *kinds: str) -> List[Any]:
    return [a for a in aspects if a.aspect.type in kinds]

def _good_overlays(synastry: SynastryResult) -> List[Any]:
    return [o for o in synastry.house_overlays if house_weight(o.house) > GOOD_OVERLAY_THRESHOLD]

def _bad_overlays(synastry: SynastryResult) -> List[Any]:
    return [o for o in synastry.house_overlays if house_weight(o.house) < BAD_OVERLAY_THRESHOLD]

def composite_house_balance(composite: CompositeResult) -> float:
    return house_balance_score(composite.house_counts())

# ───────────────────────── sub-scores ─────────────────────────

def _synastry_score(synastry: SynastryResult) -> float:
    score, _, _ = synastry_subscore(synastry.inter_aspects, synastry.house_overlays)
    return score

def _composite_score(composite: CompositeResult) -> float:
    ang = composite.angularity
    return composite_subscore(
        score_aspects(composite.aspects),
        angularity_score(len(ang.angular), len(ang.strong)),
        composite_house_balance(composite),
    )

def _dynamics_score(synastry: SynastryResult, composite: CompositeResult) -> float:
    aspects = _all_aspects(synastry, composite)
    complementary = 50.0
    complementary += len(_by_type(aspects, "trine", "sextile")) * 5
    complementary += len(_good_overlays(synastry)) * 3
    complementary = min(complementary, 100.0)

    conflict = 0.0
    conflict += len(_by_type(aspects, "square", "opposition", "quincunx")) * 8
    conflict += len(_bad_overlays(synastry)) * 5
    conflict = min(conflict, 100.0)

    return clamp(complementary - conflict)

# ───────────────────────── rules ─────────────────────────

def _strengths(synastry: SynastryResult, composite: CompositeResult) -> List[str]:
    out: List[str] = []
    aspects = _all_aspects(synastry, composite)
    if any(a.aspect.orb < 2 for a in _by_type(aspects, "trine", "sextile", "conjunction")):
        out.append("Strong harmonious connections between key planets")
    if _good_overlays(synastry):
        out.append("Beneficial planetary placements in relationship houses")
    if composite_house_balance(composite) > 70:
        out.append("Well-balanced composite chart indicating stability")
    return out

def _challenges(synastry: SynastryResult, composite: CompositeResult) -> List[str]:
    out: List[str] = []
    if len(_by_type(_all_aspects(synastry, composite), "square", "opposition")) > 3:
        out.append("Multiple challenging aspects requiring compromise and understanding")
    if len(_bad_overlays(synastry)) > 2:
        out.append("Planets in challenging houses may create relationship difficulties")
    return out

def _recommendations(overall: int, syn: int, comp: int) -> List[str]:
    out: List[str] = []
    if overall < 50:
        out.append("Consider couples counseling to navigate compatibility challenges")
    if syn < 40:
        out.append("Focus on communication and understanding of each other's needs")
    if comp < 40:
        out.append("Work on building shared goals and relationship identity")
    if overall >= 70:
        out.append("Continue nurturing the natural harmony in your relationship")
    return out

# ───────────────────────── public API ─────────────────────────

@calculation_stage("calculate_overall_compatibility")
def calculate_overall_compatibility(synastry: SynastryResult, composite: CompositeResult) -> CompatibilityResult:
    """
    Weighted roll-up of synastry, composite and dynamics sub-scores.

    Each sub-score is clamped to [0, 100] and rounded; `overall` is the
    0.4/0.4/0.2 combination of those rounded values, so the breakdown always
    reproduces it.
    """
    require_instance(synastry, SynastryResult, "synastry")
    require_instance(composite, CompositeResult, "composite")

    syn = round_half_up(_synastry_score(synastry))
    comp = round_half_up(_composite_score(composite))
    dyn = round_half_up(_dynamics_score(synastry, composite))
    overall = round_half_up(clamp(
        OVERALL_WEIGHTS["synastry"] * syn
        + OVERALL_WEIGHTS["composite"] * comp
        + OVERALL_WEIGHTS["dynamics"] * dyn
    ))

    result = CompatibilityResult(
        overall=overall,
        synastry=syn,
        composite=comp,
        dynamics=dyn,
        rating=rating_for(overall),
        strengths=tuple(_strengths(synastry, composite)),
        challenges=tuple(_challenges(synastry, composite)),
        recommendations=tuple(_recommendations(overall, syn, comp)),
        interpretation=_interpretation(overall),
    )
    log.debug("compatibility: overall=%d breakdown=%s", overall, result.breakdown)
    return result
