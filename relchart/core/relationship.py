# relchart/core/relationship.py
# -*- coding: utf-8 -*-
"""
Relationship chart system: the whole pipeline behind one call.

    charts ──► synastry ─┐
           └─► composite ┴─► compatibility ──► dynamics ──► summary

Public API
----------
generate_relationship_analysis(chart1, chart2, *, parallel=False,
                               house_system="whole-sign") -> RelationshipAnalysis
RelationshipChartSystem(chart1, chart2, ...)   # validated once, reusable
get_system_info() -> dict
validate_system() -> dict                      # self-check on sample charts

Both charts are validated once up front. Synastry and composite do not depend
on each other and may run on a thread pool; compatibility joins both. Stage
errors (ValidationError / CalculationError) propagate unchanged.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from relchart.core.compatibility import CompatibilityResult, calculate_overall_compatibility
from relchart.core.composite import CompositeResult, generate_composite_chart
from relchart.core.constants import (
    ASPECT_ANGLES,
    DYNAMIC_LABELS,
    LONG_TERM_POTENTIAL,
    RELATIONSHIP_TYPES,
)
from relchart.core.dynamics import DIMENSIONS, DynamicsResult, analyze_relationship_dynamics
from relchart.core.houses import HOUSE_SYSTEMS
from relchart.core.scoring import clamp, round_half_up
from relchart.core.synastry import SynastryResult, generate_synastry_chart
from relchart.core.validators import validate_chart_pair
from relchart.version import SYSTEM_VERSION

log = logging.getLogger(__name__)

__all__ = [
    "RelationshipSummary",
    "RelationshipAnalysis",
    "RelationshipChartSystem",
    "generate_relationship_analysis",
    "get_system_info",
    "validate_system",
    "SAMPLE_CHARTS",
]

MAX_RECOMMENDATIONS = 5

# ───────────────────────────── Result types ─────────────────────────────

@dataclass(frozen=True)
class RelationshipSummary:
    overall_rating: str
    key_strengths: Tuple[str, ...]
    main_challenges: Tuple[str, ...]
    relationship_type: str
    long_term_score: int
    long_term_description: str
    dominant_dynamics: Tuple[str, ...]
    recommendations: Tuple[str, ...]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "overallRating": self.overall_rating,
            "keyStrengths": list(self.key_strengths),
            "mainChallenges": list(self.main_challenges),
            "relationshipType": self.relationship_type,
            "longTermPotential": {"score": self.long_term_score, "description": self.long_term_description},
            "dominantDynamics": list(self.dominant_dynamics),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class RelationshipAnalysis:
    synastry: SynastryResult
    composite: CompositeResult
    compatibility: CompatibilityResult
    dynamics: DynamicsResult
    summary: RelationshipSummary
    generated_at: str
    system_version: str
    analysis_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synastry": self.synastry.to_dict(),
            "composite": self.composite.to_dict(),
            "compatibility": self.compatibility.to_dict(),
            "dynamics": self.dynamics.to_dict(),
            "summary": self.summary.as_dict(),
            "generatedAt": self.generated_at,
            "systemVersion": self.system_version,
            "analysisId": self.analysis_id,
        }

# ───────────────────────────── Summary rules ─────────────────────────────

def _relationship_type(overall: int) -> str:
    for threshold, label in RELATIONSHIP_TYPES:
        if overall >= threshold:
            return label
    return RELATIONSHIP_TYPES[-1][1]

def _long_term_potential(compat: CompatibilityResult, dyn: DynamicsResult) -> Tuple[int, str]:
    potential = 50.0
    potential += (compat.overall - 50) * 0.8
    potential += (dyn.stability.score - 50) * 0.5
    potential += (dyn.growth.score - 50) * 0.3
    potential += (dyn.communication.score - 50) * 0.2
    score = clamp(potential)
    for threshold, text in LONG_TERM_POTENTIAL:
        if score >= threshold:
            return round_half_up(score), text
    return round_half_up(score), LONG_TERM_POTENTIAL[-1][1]

def _dominant_dynamics(dyn: DynamicsResult) -> List[str]:
    scores = dyn.scores()
    ranked = sorted(DIMENSIONS, key=lambda k: scores[k], reverse=True)
    return [f"{DYNAMIC_LABELS[k]}: {scores[k]}%" for k in ranked[:3]]

def _recommendations(compat: CompatibilityResult, dyn: DynamicsResult, limit: int) -> List[str]:
    out: List[str] = []
    if compat.overall < 50:
        out.append("Consider couples counseling to navigate compatibility challenges")
    if compat.synastry < 40:
        out.append("Focus on communication and understanding of each other's needs")
    if compat.composite < 40:
        out.append("Work on building shared goals and relationship identity")
    if dyn.communication.score < 50:
        out.append("Practice active listening and clear communication techniques")
    if dyn.emotional.score < 50:
        out.append("Build emotional intimacy through shared vulnerability and trust")
    if dyn.conflict.score < 50:
        out.append("Learn healthy conflict resolution strategies")
    if dyn.growth.score > 70:
        out.append("Continue nurturing personal and mutual growth")
    if dyn.stability.score > 70:
        out.append("Maintain the strong foundation you've built")
    if dyn.evolution.transformative:
        out.append("Embrace the transformative potential in your relationship")
    # same closing rule as compatibility.recommendations, only when room is left
    if compat.overall >= 70 and len(out) < limit:
        out.append("Continue nurturing the natural harmony in your relationship")
    return out[:limit]

def build_summary(
    compat: CompatibilityResult,
    dyn: DynamicsResult,
    max_recommendations: int = MAX_RECOMMENDATIONS,
) -> RelationshipSummary:
    lt_score, lt_text = _long_term_potential(compat, dyn)
    return RelationshipSummary(
        overall_rating=compat.rating.label,
        key_strengths=tuple(compat.strengths[:3]),
        main_challenges=tuple(compat.challenges[:3]),
        relationship_type=_relationship_type(compat.overall),
        long_term_score=lt_score,
        long_term_description=lt_text,
        dominant_dynamics=tuple(_dominant_dynamics(dyn)),
        recommendations=tuple(_recommendations(compat, dyn, max_recommendations)),
    )

# ───────────────────────────── Utilities ─────────────────────────────

def _analysis_id() -> str:
    return f"wrcs_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"

def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

# ───────────────────────────── Orchestrator ─────────────────────────────

class RelationshipChartSystem:
    """Two validated charts plus the options every stage shares."""

    def __init__(
        self,
        chart1: Any,
        chart2: Any,
        *,
        parallel: bool = False,
        house_system: str = "whole-sign",
        max_recommendations: int = MAX_RECOMMENDATIONS,
    ) -> None:
        self.chart1, self.chart2 = validate_chart_pair(chart1, chart2)
        self.parallel = bool(parallel)
        self.house_system = house_system
        self.max_recommendations = int(max_recommendations)

    def generate_synastry_chart(self) -> SynastryResult:
        return generate_synastry_chart(self.chart1, self.chart2)

    def generate_composite_chart(self) -> CompositeResult:
        return generate_composite_chart(self.chart1, self.chart2, self.house_system)

    def _charts(self) -> Tuple[SynastryResult, CompositeResult]:
        if not self.parallel:
            return self.generate_synastry_chart(), self.generate_composite_chart()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="relchart") as pool:
            syn_f = pool.submit(self.generate_synastry_chart)
            comp_f = pool.submit(self.generate_composite_chart)
            # .result() re-raises the stage's own exception
            return syn_f.result(), comp_f.result()

    def generate_relationship_analysis(self) -> RelationshipAnalysis:
        t0 = time.perf_counter()
        synastry, composite = self._charts()
        compatibility = calculate_overall_compatibility(synastry, composite)
        dynamics = analyze_relationship_dynamics(synastry, composite, compatibility)
        summary = build_summary(compatibility, dynamics, self.max_recommendations)

        analysis = RelationshipAnalysis(
            synastry=synastry,
            composite=composite,
            compatibility=compatibility,
            dynamics=dynamics,
            summary=summary,
            generated_at=_utc_now_iso(),
            system_version=SYSTEM_VERSION,
            analysis_id=_analysis_id(),
        )
        log.info(
            "relationship analysis %s: overall=%d (%s) in %.1f ms",
            analysis.analysis_id, compatibility.overall, compatibility.rating.label,
            (time.perf_counter() - t0) * 1000.0,
        )
        return analysis


def generate_relationship_analysis(
    chart1: Any,
    chart2: Any,
    *,
    parallel: bool = False,
    house_system: str = "whole-sign",
    max_recommendations: int = MAX_RECOMMENDATIONS,
) -> RelationshipAnalysis:
    system = RelationshipChartSystem(
        chart1, chart2,
        parallel=parallel,
        house_system=house_system,
        max_recommendations=max_recommendations,
    )
    return system.generate_relationship_analysis()

# ───────────────────────────── System info & self-check ─────────────────────────────

_EVEN_CUSPS = [float(30 * i) for i in range(12)]

SAMPLE_CHARTS: Dict[str, Dict[str, Any]] = {
    "chart1": {
        "planets": {
            "Sun": {"longitude": 0.0}, "Moon": {"longitude": 90.0},
            "Mercury": {"longitude": 30.0}, "Venus": {"longitude": 60.0},
            "Mars": {"longitude": 120.0}, "Jupiter": {"longitude": 180.0},
            "Saturn": {"longitude": 210.0},
        },
        "houses": _EVEN_CUSPS,
        "angles": {"ASC": 0.0, "MC": 90.0, "DSC": 180.0, "IC": 270.0},
    },
    "chart2": {
        "planets": {
            "Sun": {"longitude": 120.0}, "Moon": {"longitude": 180.0},
            "Mercury": {"longitude": 150.0}, "Venus": {"longitude": 210.0},
            "Mars": {"longitude": 240.0}, "Jupiter": {"longitude": 300.0},
            "Saturn": {"longitude": 330.0},
        },
        "houses": _EVEN_CUSPS,
        "angles": {"ASC": 60.0, "MC": 150.0, "DSC": 240.0, "IC": 330.0},
    },
}


def get_system_info() -> Dict[str, Any]:
    return {
        "version": SYSTEM_VERSION,
        "components": [
            "synastry",
            "composite",
            "compatibility",
            "dynamics",
        ],
        "features": [
            "Synastry Chart Analysis",
            "Composite Chart Generation",
            "Compatibility Scoring",
            "Relationship Dynamics Analysis",
            "Long-term Potential Assessment",
        ],
        "supportedAspects": list(ASPECT_ANGLES.keys()),
        "compositeHouseSystems": list(HOUSE_SYSTEMS),
        "analysisDepth": "Comprehensive multi-factor analysis",
    }


def validate_system() -> Dict[str, Any]:
    """Run the full pipeline on the built-in sample pair and report which stages produced output."""
    try:
        analysis = generate_relationship_analysis(SAMPLE_CHARTS["chart1"], SAMPLE_CHARTS["chart2"])
    except Exception as e:
        log.exception("system self-check failed")
        return {"ok": False, "error": f"{type(e).__name__}: {e}", "overall": "System validation failed"}
    return {
        "ok": True,
        "synastryGenerated": analysis.synastry is not None,
        "compositeGenerated": analysis.composite is not None,
        "compatibilityCalculated": analysis.compatibility is not None,
        "dynamicsAnalyzed": analysis.dynamics is not None,
        "summaryGenerated": analysis.summary is not None,
        "sampleOverall": analysis.compatibility.overall,
        "overall": "System validation completed successfully",
    }
