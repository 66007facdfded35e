# tests/test_relationship.py
from __future__ import annotations

import re

import pytest
from hypothesis import given, settings, strategies as st

from conftest import make_chart
from relchart.core.relationship import (
    SAMPLE_CHARTS,
    RelationshipChartSystem,
    generate_relationship_analysis,
    get_system_info,
    validate_system,
)
from relchart.core.scoring import round_half_up
from relchart.core.validators import ValidationError
from relchart.version import SYSTEM_VERSION

lon = st.floats(min_value=0.0, max_value=359.99, allow_nan=False, allow_infinity=False)


def _stable(d):
    d = dict(d)
    d.pop("generatedAt")
    d.pop("analysisId")
    return d


def test_reference_pair_end_to_end(chart1, chart2):
    res = generate_relationship_analysis(chart1, chart2)
    assert res.compatibility.overall == 34
    assert res.compatibility.breakdown == {"synastry": 85, "composite": 0, "dynamics": 0}
    s = res.summary
    assert s.overall_rating == "Very Challenging"
    assert s.relationship_type == "Karmic Lesson"
    assert s.long_term_score == 57
    assert s.long_term_description == "Moderate long-term potential requiring commitment and effort"
    assert s.dominant_dynamics == ("Stability: 90%", "Communication: 50%", "Emotional Connection: 50%")
    assert s.recommendations == (
        "Consider couples counseling to navigate compatibility challenges",
        "Work on building shared goals and relationship identity",
        "Learn healthy conflict resolution strategies",
        "Maintain the strong foundation you've built",
    )
    assert len(s.key_strengths) == 3
    assert s.main_challenges == ("Multiple challenging aspects requiring compromise and understanding",)


def test_metadata(chart1, chart2):
    res = generate_relationship_analysis(chart1, chart2)
    assert re.fullmatch(r"wrcs_\d+_[0-9a-f]{6}", res.analysis_id)
    assert res.system_version == SYSTEM_VERSION
    assert res.generated_at.endswith("Z")


def test_to_dict_top_level_keys(chart1, chart2):
    d = generate_relationship_analysis(chart1, chart2).to_dict()
    assert set(d) == {
        "synastry", "composite", "compatibility", "dynamics", "summary",
        "generatedAt", "systemVersion", "analysisId",
    }
    assert d["summary"]["longTermPotential"]["score"] == 57


def test_idempotent_apart_from_metadata(full_pair):
    c1, c2 = full_pair
    a = generate_relationship_analysis(c1, c2).to_dict()
    b = generate_relationship_analysis(c1, c2).to_dict()
    assert _stable(a) == _stable(b)


def test_parallel_matches_sequential(full_pair):
    c1, c2 = full_pair
    seq = generate_relationship_analysis(c1, c2, parallel=False).to_dict()
    par = generate_relationship_analysis(c1, c2, parallel=True).to_dict()
    assert _stable(seq) == _stable(par)


def test_inputs_are_not_mutated(full_pair):
    import copy
    c1, c2 = full_pair
    before = copy.deepcopy((c1, c2))
    generate_relationship_analysis(c1, c2)
    assert (c1, c2) == before


def test_recommendations_are_capped(full_pair):
    c1, c2 = full_pair
    res = generate_relationship_analysis(c1, c2, max_recommendations=2)
    assert len(res.summary.recommendations) <= 2


def test_system_validates_once(chart1, chart2):
    system = RelationshipChartSystem(chart1, chart2, house_system="equal")
    assert system.generate_composite_chart().house_system == "equal"
    assert system.generate_synastry_chart().compatibility.score == 85
    # charts are held in parsed form
    assert system.chart1.planets["Sun"].longitude == 0.0


def test_invalid_chart_names_field(chart1):
    with pytest.raises(ValidationError) as ei:
        generate_relationship_analysis(chart1, {"planets": {"Sun": 1.0}})
    assert ei.value.field == "chart2.angles"


def test_invalid_house_system_propagates(chart1, chart2):
    with pytest.raises(ValidationError) as ei:
        generate_relationship_analysis(chart1, chart2, house_system="koch", parallel=True)
    assert ei.value.field == "house_system"


def test_trine_beats_opposition():
    base = make_chart({"Sun": 0.0})
    trine = generate_relationship_analysis(base, make_chart({"Sun": 120.0}))
    opposition = generate_relationship_analysis(base, make_chart({"Sun": 180.0}))
    assert trine.synastry.compatibility.aspects == 100
    assert trine.synastry.compatibility.score == 94
    assert opposition.synastry.compatibility.aspects == 19
    assert opposition.synastry.compatibility.score == 47
    assert trine.compatibility.synastry > opposition.compatibility.synastry


@settings(max_examples=25, deadline=None)
@given(st.lists(lon, min_size=8, max_size=8))
def test_scores_always_bounded(lons):
    c1 = make_chart({"Sun": lons[0], "Moon": lons[1], "Venus": lons[2]}, asc=lons[3], mc=lons[4])
    c2 = make_chart({"Sun": lons[5], "Moon": lons[6], "Mars": lons[7]}, asc=lons[4], mc=lons[3])
    res = generate_relationship_analysis(c1, c2)
    c = res.compatibility
    for v in (c.overall, c.synastry, c.composite, c.dynamics, *res.dynamics.scores().values()):
        assert 0 <= v <= 100
    assert c.overall == round_half_up(0.4 * c.synastry + 0.4 * c.composite + 0.2 * c.dynamics)
    assert 0 <= res.summary.long_term_score <= 100


def test_system_info():
    info = get_system_info()
    assert info["version"] == SYSTEM_VERSION
    assert info["supportedAspects"] == ["conjunction", "sextile", "square", "trine", "quincunx", "opposition"]
    assert info["compositeHouseSystems"] == ["whole-sign", "equal"]
    assert len(info["components"]) == 4


def test_validate_system_ok():
    report = validate_system()
    assert report["ok"] is True
    assert all(report[k] for k in (
        "synastryGenerated", "compositeGenerated", "compatibilityCalculated",
        "dynamicsAnalyzed", "summaryGenerated",
    ))
    assert 0 <= report["sampleOverall"] <= 100


def test_validate_system_reports_failure(monkeypatch):
    import relchart.core.relationship as mod
    monkeypatch.setitem(mod.SAMPLE_CHARTS, "chart2", {"planets": {}})
    report = validate_system()
    assert report["ok"] is False
    assert report["overall"] == "System validation failed"
    assert "ValidationError" in report["error"]


def test_sample_charts_are_valid():
    res = generate_relationship_analysis(SAMPLE_CHARTS["chart1"], SAMPLE_CHARTS["chart2"])
    assert res.synastry.inter_aspects


def _shifted(planets, by):
    return make_chart({k: (v + by) % 360.0 for k, v in planets.items()})


def test_oppositions_lower_conflict_score():
    natal = {"Sun": 0.0, "Moon": 95.0, "Saturn": 200.0}
    base = make_chart(natal)
    opposed = generate_relationship_analysis(base, _shifted(natal, 180.0))
    trined = generate_relationship_analysis(base, _shifted(natal, 120.0))

    def planet_kinds(res):
        return sorted(a.aspect.type for a in res.synastry.inter_aspects if a.to.kind == "planet")

    assert planet_kinds(opposed) == ["opposition"] * 3 + ["square"] * 2
    assert planet_kinds(trined) == ["trine"] * 3
    assert opposed.dynamics.conflict.score < trined.dynamics.conflict.score
    assert opposed.dynamics.conflict.extra["challengingAspects"] > trined.dynamics.conflict.extra["challengingAspects"]


def test_harmony_note_closes_high_scoring_summary(chart1, chart2):
    from dataclasses import replace
    from relchart.core.relationship import build_summary

    res = generate_relationship_analysis(chart1, chart2)
    strong = replace(res.compatibility, overall=75)
    recs = build_summary(strong, res.dynamics).recommendations
    assert recs[-1] == "Continue nurturing the natural harmony in your relationship"
    assert "Consider couples counseling to navigate compatibility challenges" not in recs
    # no room left once the rule list fills the cap
    assert "Continue nurturing the natural harmony in your relationship" not in \
        build_summary(strong, res.dynamics, max_recommendations=3).recommendations
