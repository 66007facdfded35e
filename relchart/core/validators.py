# relchart/core/validators.py
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar, Union

from relchart.core.angles import is_valid_number, normalize_angle
from relchart.core.chart import BirthChart, PlanetPosition
from relchart.core.constants import ANGLE_ALIASES, PLANET_ALIASES

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error compatible with routes.py (has .errors())."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]], received: Any = None):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
        elif isinstance(details, dict):
            self._details = [details]
        elif isinstance(details, list) and details:
            self._details = details
        else:
            self._details = [{"loc": [], "msg": "validation_error", "type": "value_error"}]
        super().__init__(self._message(self._details))
        self.received = received
        self.received_type = type(received).__name__

    @staticmethod
    def _message(details: List[Dict[str, Any]]) -> str:
        # "chart1.angles: angles is required; chart1.planets: ..."
        parts = []
        for d in details:
            msg = d.get("msg", "validation_error")
            loc = ".".join(str(p) for p in d.get("loc") or [])
            parts.append(f"{loc}: {msg}" if loc else msg)
        return "; ".join(parts)

    @property
    def field(self) -> Optional[str]:
        """Dotted location of the first offending field, e.g. 'chart1.angles'."""
        if not self._details or not self._details[0].get("loc"):
            return None
        return ".".join(str(p) for p in self._details[0]["loc"])

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


class CalculationError(RuntimeError):
    """A pipeline stage failed after its inputs validated."""
    def __init__(self, operation: str, message: str, original_error: Optional[BaseException] = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.original_error = original_error

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "message": str(self),
            "original": type(self.original_error).__name__ if self.original_error else None,
        }


def calculation_stage(operation: str) -> Callable[[F], F]:
    """Wrap unexpected failures of a stage into a single CalculationError."""
    def deco(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except (ValidationError, CalculationError):
                raise
            except Exception as e:
                log.error("%s failed: %s: %s", operation, type(e).__name__, e)
                raise CalculationError(operation, str(e), e) from e
        return wrapper  # type: ignore[return-value]
    return deco


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[str] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _canonical_planet(key: Any) -> str:
    k = str(key).strip()
    return PLANET_ALIASES.get(k.lower(), k.title())

def _canonical_angle(key: Any) -> Optional[str]:
    return ANGLE_ALIASES.get(str(key).strip().lower())

def _longitude_of(value: Any) -> Any:
    """Positions arrive either as bare numbers or as {'longitude': ...} objects."""
    if isinstance(value, Mapping):
        for k in ("longitude", "lon", "degree_abs"):
            if k in value:
                return value[k]
        return None
    return value


# ───────────────────────── chart parsers ─────────────────────────

def _parse_planets(raw: Any, loc: List[str], errors: List[Dict[str, Any]]) -> Dict[str, PlanetPosition]:
    out: Dict[str, PlanetPosition] = {}
    if not isinstance(raw, Mapping) or not raw:
        errors.append(_err(loc, "planets must be a non-empty object", "value_error.missing"))
        return out
    for key, value in raw.items():
        name = _canonical_planet(key)
        if name in out:
            errors.append(_err(loc + [str(key)], f"duplicate entry for {name}", "value_error.duplicate"))
            continue
        lon = _longitude_of(value)
        if not is_valid_number(lon):
            errors.append(_err(loc + [str(key), "longitude"], "longitude must be a finite number", "type_error.float"))
            continue
        lat: Any = 0.0
        speed: Any = None
        if isinstance(value, Mapping):
            lat = value.get("latitude", value.get("lat", 0.0))
            speed = value.get("speed", value.get("speed_deg_per_day"))
        if not is_valid_number(lat) or not (-90.0 <= float(lat) <= 90.0):
            errors.append(_err(loc + [str(key), "latitude"], "latitude must be between -90 and 90"))
            continue
        if speed is not None and not is_valid_number(speed):
            errors.append(_err(loc + [str(key), "speed"], "speed must be a finite number", "type_error.float"))
            continue
        out[name] = PlanetPosition(
            longitude=normalize_angle(lon),
            latitude=float(lat),
            speed=None if speed is None else float(speed),
        )
    return out


def _parse_angles(raw: Any, loc: List[str], errors: List[Dict[str, Any]]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    if not isinstance(raw, Mapping):
        errors.append(_err(loc, "angles must be an object with ASC and MC", "value_error.missing"))
        return out
    invalid = set()
    for key, value in raw.items():
        name = _canonical_angle(key)
        if name is None:
            # unknown angle names are carried by neither stage
            continue
        if name in out or name in invalid:
            errors.append(_err(loc + [str(key)], f"duplicate entry for {name}", "value_error.duplicate"))
            continue
        lon = _longitude_of(value)
        if not is_valid_number(lon):
            errors.append(_err(loc + [str(key)], "angle must be a finite number", "type_error.float"))
            invalid.add(name)
            continue
        out[name] = normalize_angle(lon)
    missing = [a for a in ("ASC", "MC") if a not in out and a not in invalid]
    if missing:
        errors.append(_err(loc, f"angles must include {' and '.join(missing)}", "value_error.missing"))
    return out


def _parse_houses(raw: Any, loc: List[str], errors: List[Dict[str, Any]]) -> Tuple[float, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        errors.append(_err(loc, "houses must be a list of cusp longitudes", "type_error.list"))
        return ()
    cusps: List[float] = []
    for i, value in enumerate(raw):
        lon = _longitude_of(value)
        if not is_valid_number(lon):
            errors.append(_err(loc + [str(i)], "house cusp must be a finite number", "type_error.float"))
            continue
        cusps.append(normalize_angle(lon))
    return tuple(cusps)


_REQUIRED = ("planets", "angles")


def _check_required(obj: Any, name: str, errors: List[Dict[str, Any]]) -> bool:
    """Shape pass: the chart is an object and carries every required key."""
    if isinstance(obj, BirthChart):
        return True
    if not isinstance(obj, Mapping):
        errors.append(_err(name, "chart must be an object with planets and angles", "type_error.dict"))
        return False
    ok = True
    for key in _REQUIRED:
        if obj.get(key) is None:
            errors.append(_err([name, key], f"{key} is required", "value_error.missing"))
            ok = False
    return ok


def _collect_chart(obj: Any, name: str, errors: List[Dict[str, Any]]) -> Optional[BirthChart]:
    """Content pass; only call after _check_required accepted `obj`."""
    if isinstance(obj, BirthChart):
        return obj
    before = len(errors)
    planets = _parse_planets(obj.get("planets"), [name, "planets"], errors)
    angles = _parse_angles(obj.get("angles"), [name, "angles"], errors)
    houses = _parse_houses(obj.get("houses"), [name, "houses"], errors)
    if len(errors) > before:
        return None
    label = obj.get("name")
    return BirthChart(
        planets=planets,
        angles=angles,
        houses=houses,
        name=str(label) if label is not None else None,
    )


def parse_chart(obj: Any, name: str = "chart") -> BirthChart:
    """Validate one JSON-shaped chart (or pass a BirthChart through)."""
    errors: List[Dict[str, Any]] = []
    chart = _collect_chart(obj, name, errors) if _check_required(obj, name, errors) else None
    if errors or chart is None:
        raise ValidationError(errors or [_err(name, "invalid chart")], received=obj)
    return chart


def validate_chart_pair(chart1: Any, chart2: Any) -> Tuple[BirthChart, BirthChart]:
    """
    Validate both charts, reporting the problems of both in one error.

    Missing required keys of either chart are listed before any content
    problem, so a chart without `angles` reports `chartN.angles` first.
    """
    errors: List[Dict[str, Any]] = []
    shaped = [_check_required(c, n, errors) for c, n in ((chart1, "chart1"), (chart2, "chart2"))]
    c1 = _collect_chart(chart1, "chart1", errors) if shaped[0] else None
    c2 = _collect_chart(chart2, "chart2", errors) if shaped[1] else None
    if errors or c1 is None or c2 is None:
        received = chart1 if c1 is None else chart2
        raise ValidationError(errors, received=received)
    return c1, c2


def require_instance(value: Any, cls: type, field: str) -> None:
    if not isinstance(value, cls):
        raise ValidationError(
            _err(field, f"{field} must be a {cls.__name__}", "type_error"),
            received=value,
        )
