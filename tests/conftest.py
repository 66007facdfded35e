# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the relationship-chart suite.

- Registers Hypothesis profiles for local dev and CI.
- Adds a 'slow' marker.
- Provides chart builders, a hand-checked reference pair and a Flask client.
"""

import copy
import os
from typing import Any, Dict, Optional

import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles: HYPOTHESIS_PROFILE picks one locally, CI forces "ci"
# ──────────────────────────────────────────────────────────────────────────────
_BASE = dict(deadline=None, suppress_health_check=[HealthCheck.too_slow])
settings.register_profile("dev", settings(max_examples=60, **_BASE))
settings.register_profile("ci", settings(max_examples=200, **_BASE))

_profile = "ci" if os.getenv("CI") else os.getenv("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Chart builders
# ──────────────────────────────────────────────────────────────────────────────

def cusps_from(start: float) -> list:
    return [(start + 30.0 * i) % 360.0 for i in range(12)]


def make_chart(
    planets: Dict[str, float],
    asc: float = 0.0,
    mc: float = 270.0,
    houses: Optional[list] = None,
    **angles: float,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "planets": {name: {"longitude": lon, "latitude": 0.0} for name, lon in planets.items()},
        "angles": {"ASC": asc, "MC": mc, **angles},
    }
    out["houses"] = cusps_from(0.0) if houses is None else houses
    return out


# Reference pair with hand-computed results:
#   synastry 85 (aspects 100, overlays 63), composite 0, dynamics 0, overall 34
_CHART_1 = make_chart({"Sun": 0.0, "Venus": 10.0}, asc=0.0, mc=270.0, houses=cusps_from(0.0))
_CHART_2 = make_chart({"Sun": 120.0, "Mars": 185.0}, asc=90.0, mc=0.0, houses=cusps_from(90.0))


@pytest.fixture
def chart1() -> Dict[str, Any]:
    return copy.deepcopy(_CHART_1)


@pytest.fixture
def chart2() -> Dict[str, Any]:
    return copy.deepcopy(_CHART_2)


@pytest.fixture
def full_pair():
    """Ten planets per chart, all four angles, Placidus-like uneven cusps."""
    c1 = make_chart(
        {
            "Sun": 15.0, "Moon": 212.0, "Mercury": 28.0, "Venus": 340.0, "Mars": 95.0,
            "Jupiter": 150.0, "Saturn": 276.0, "Uranus": 301.0, "Neptune": 305.0, "Pluto": 246.0,
        },
        asc=102.0, mc=350.0, DSC=282.0, IC=170.0,
        houses=[102.0, 124.0, 149.0, 170.0, 202.0, 240.0, 282.0, 304.0, 329.0, 350.0, 22.0, 60.0],
    )
    c2 = make_chart(
        {
            "Sun": 135.0, "Moon": 95.0, "Mercury": 150.0, "Venus": 100.0, "Mars": 220.0,
            "Jupiter": 20.0, "Saturn": 36.0, "Uranus": 308.0, "Neptune": 310.0, "Pluto": 252.0,
        },
        asc=200.0, mc=110.0, DSC=20.0, IC=290.0,
        houses=[200.0, 228.0, 259.0, 290.0, 322.0, 351.0, 20.0, 48.0, 79.0, 110.0, 142.0, 171.0],
    )
    return c1, c2


# ──────────────────────────────────────────────────────────────────────────────
# Flask
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def client():
    from relchart.main import create_app
    app = create_app()
    app.testing = True
    return app.test_client()
