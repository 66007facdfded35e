# tests/test_validators.py
from __future__ import annotations

import pytest

from relchart.core.chart import BirthChart
from relchart.core.validators import (
    CalculationError,
    ValidationError,
    calculation_stage,
    parse_chart,
    validate_chart_pair,
)


def _raw(**over):
    base = {
        "planets": {"SUN": {"longitude": -30.0}, "north node": 12.0, "Moon": {"lon": 100, "speed": 13.2}},
        "angles": {"Ascendant": 10.0, "mc": 280.0, "vertex": 200.0, "LILITH": 5.0},
        "houses": [30.0 * i for i in range(12)],
    }
    base.update(over)
    return base


def test_parse_chart_canonicalizes_names_and_angles():
    chart = parse_chart(_raw(), "chart1")
    assert set(chart.planets) == {"Sun", "Rahu", "Moon"}
    assert chart.planets["Sun"].longitude == pytest.approx(330.0)
    assert chart.planets["Moon"].speed == pytest.approx(13.2)
    assert chart.planets["Rahu"].speed is None
    assert set(chart.angles) == {"ASC", "MC", "VTX"}
    assert len(chart.houses) == 12


def test_birth_chart_is_read_only():
    chart = parse_chart(_raw())
    with pytest.raises(TypeError):
        chart.planets["Sun"] = None  # type: ignore[index]
    with pytest.raises(AttributeError):
        chart.houses = ()  # type: ignore[misc]


def test_birth_chart_passes_through():
    chart = parse_chart(_raw())
    assert parse_chart(chart) is chart
    assert isinstance(chart, BirthChart)


@pytest.mark.parametrize("payload,field", [
    (None, "chart1"),
    ("not a chart", "chart1"),
    ({"angles": {"ASC": 0, "MC": 90}}, "chart1.planets"),
    ({"planets": {}, "angles": {"ASC": 0, "MC": 90}}, "chart1.planets"),
    ({"planets": {"Sun": 1.0}}, "chart1.angles"),
    ({"planets": {"Sun": 1.0}, "angles": {"ASC": 0}}, "chart1.angles"),
    ({"planets": {"Sun": float("nan")}, "angles": {"ASC": 0, "MC": 90}}, "chart1.planets.Sun.longitude"),
    ({"planets": {"Sun": 1.0}, "angles": {"ASC": "east", "MC": 90}}, "chart1.angles.ASC"),
    ({"planets": {"Sun": 1.0}, "angles": {"ASC": 0, "MC": 90}, "houses": "placidus"}, "chart1.houses"),
])
def test_parse_chart_reports_field(payload, field):
    with pytest.raises(ValidationError) as ei:
        parse_chart(payload, "chart1")
    assert ei.value.field == field
    assert ei.value.received is payload
    details = ei.value.errors()
    assert details and {"loc", "msg", "type"} <= set(details[0])


def test_missing_mc_message_names_it():
    with pytest.raises(ValidationError) as ei:
        parse_chart({"planets": {"Sun": 1.0}, "angles": {"ASC": 0}}, "chart2")
    assert "MC" in str(ei.value)


def test_pair_names_second_chart():
    with pytest.raises(ValidationError) as ei:
        validate_chart_pair(_raw(), None)
    assert ei.value.field == "chart2"


def test_pair_reports_both_charts():
    with pytest.raises(ValidationError) as ei:
        validate_chart_pair({"planets": {"Sun": 1.0}}, {"angles": {"ASC": 0, "MC": 0}})
    locs = [".".join(e["loc"]) for e in ei.value.errors()]
    assert "chart1.angles" in locs and "chart2.planets" in locs


def test_missing_keys_reported_before_content():
    with pytest.raises(ValidationError) as ei:
        validate_chart_pair({"planets": {}}, {"planets": {"Sun": 1.0, "SUN": 2.0}, "angles": {"ASC": 0, "MC": 0}})
    locs = [".".join(e["loc"]) for e in ei.value.errors()]
    assert locs == ["chart1.angles", "chart2.planets.SUN"]


def test_message_lists_every_location():
    with pytest.raises(ValidationError) as ei:
        validate_chart_pair(None, {"planets": {"Sun": 1.0}})
    msg = str(ei.value)
    assert msg.startswith("chart1: ")
    assert "; chart2.angles: angles is required" in msg
    assert ei.value.received_type == "NoneType"


@pytest.mark.parametrize("section,raw", [
    ("planets", {"planets": {"SUN": 1.0, "Sun": 2.0}, "angles": {"ASC": 0, "MC": 90}}),
    ("angles", {"planets": {"Sun": 1.0}, "angles": {"ASC": 0, "Ascendant": 5, "MC": 90}}),
])
def test_duplicate_names_rejected(section, raw):
    with pytest.raises(ValidationError) as ei:
        parse_chart(raw, "chart1")
    err = ei.value.errors()[0]
    assert err["loc"][:2] == ["chart1", section]
    assert err["type"] == "value_error.duplicate"


def test_short_house_list_is_accepted():
    chart = parse_chart(_raw(houses=[0.0, 30.0]))
    assert chart.houses == (0.0, 30.0)


def test_calculation_stage_wraps_unexpected_errors():
    @calculation_stage("divide")
    def boom():
        return 1 / 0

    with pytest.raises(CalculationError) as ei:
        boom()
    assert ei.value.operation == "divide"
    assert isinstance(ei.value.original_error, ZeroDivisionError)
    assert ei.value.__cause__ is ei.value.original_error
    assert ei.value.as_dict()["original"] == "ZeroDivisionError"


def test_calculation_stage_lets_validation_through():
    @calculation_stage("check")
    def reject():
        raise ValidationError("nope")

    with pytest.raises(ValidationError):
        reject()
