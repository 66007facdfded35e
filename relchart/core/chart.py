# relchart/core/chart.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from relchart.core.angles import degree_in_sign, sign_index
from relchart.core.constants import SIGNS

__all__ = ["PlanetPosition", "BirthChart"]


@dataclass(frozen=True)
class PlanetPosition:
    longitude: float                 # [0, 360)
    latitude: float = 0.0            # [-90, 90]
    speed: Optional[float] = None    # deg/day; only used for applying/separating

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
        }
        if self.speed is not None:
            d["speed"] = float(self.speed)
        return d


@dataclass(frozen=True)
class BirthChart:
    """A validated natal chart. Build through validators.parse_chart."""
    planets: Mapping[str, PlanetPosition]
    angles: Mapping[str, float]
    houses: Tuple[float, ...] = ()
    name: Optional[str] = None
    meta: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # freeze the containers, not just the attribute bindings
        object.__setattr__(self, "planets", MappingProxyType(dict(self.planets)))
        object.__setattr__(self, "angles", MappingProxyType(dict(self.angles)))
        object.__setattr__(self, "houses", tuple(self.houses))
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    def has(self, point: str) -> bool:
        return point in self.planets or point in self.angles

    def longitude_of(self, point: str) -> float:
        if point in self.planets:
            return self.planets[point].longitude
        return self.angles[point]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "planets": {k: v.as_dict() for k, v in self.planets.items()},
            "angles": {k: float(v) for k, v in self.angles.items()},
            "houses": [float(c) for c in self.houses],
        }
