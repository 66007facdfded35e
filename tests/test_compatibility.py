# tests/test_compatibility.py
from __future__ import annotations

import pytest

from relchart.core.compatibility import (
    calculate_overall_compatibility,
    composite_house_balance,
    rating_for,
)
from relchart.core.composite import generate_composite_chart
from relchart.core.scoring import round_half_up
from relchart.core.synastry import generate_synastry_chart
from relchart.core.validators import ValidationError


@pytest.fixture
def stages(chart1, chart2):
    return generate_synastry_chart(chart1, chart2), generate_composite_chart(chart1, chart2)


def test_reference_breakdown(stages):
    res = calculate_overall_compatibility(*stages)
    assert res.breakdown == {"synastry": 85, "composite": 0, "dynamics": 0}
    assert res.overall == 34
    assert res.rating.label == "Very Challenging"
    assert res.interpretation == "Very challenging compatibility with fundamental incompatibilities"


def test_reference_strengths_and_challenges(stages):
    res = calculate_overall_compatibility(*stages)
    assert res.strengths == (
        "Strong harmonious connections between key planets",
        "Beneficial planetary placements in relationship houses",
        "Well-balanced composite chart indicating stability",
    )
    assert res.challenges == ("Multiple challenging aspects requiring compromise and understanding",)
    assert res.recommendations == (
        "Consider couples counseling to navigate compatibility challenges",
        "Work on building shared goals and relationship identity",
    )


def test_house_balance_of_single_planet(stages):
    _, comp = stages
    assert composite_house_balance(comp) == pytest.approx(100.0 - 10.0 * 11.0 / 144.0)


def test_overall_reproducible_from_breakdown(full_pair):
    c1, c2 = full_pair
    res = calculate_overall_compatibility(
        generate_synastry_chart(c1, c2), generate_composite_chart(c1, c2)
    )
    b = res.breakdown
    assert res.overall == round_half_up(0.4 * b["synastry"] + 0.4 * b["composite"] + 0.2 * b["dynamics"])
    for v in (res.overall, *b.values()):
        assert isinstance(v, int) and 0 <= v <= 100


def test_to_dict_shape(stages):
    d = calculate_overall_compatibility(*stages).to_dict()
    assert set(d) == {
        "overall", "breakdown", "rating", "strengths", "challenges", "recommendations", "interpretation",
    }
    assert d["rating"] == {
        "label": "Very Challenging",
        "description": "Very challenging compatibility requiring substantial work",
    }


@pytest.mark.parametrize("score,label", [
    (100, "Exceptional"),
    (80, "Exceptional"),
    (79, "Very Strong"),
    (70, "Very Strong"),
    (65, "Strong"),
    (50, "Moderate"),
    (40, "Challenging"),
    (39, "Very Challenging"),
    (0, "Very Challenging"),
])
def test_rating_bands(score, label):
    assert rating_for(score).label == label


def test_rejects_raw_dicts(chart1, chart2, stages):
    syn, comp = stages
    with pytest.raises(ValidationError) as ei:
        calculate_overall_compatibility(chart1, comp)
    assert ei.value.field == "synastry"
    with pytest.raises(ValidationError) as ei:
        calculate_overall_compatibility(syn, None)
    assert ei.value.field == "composite"
