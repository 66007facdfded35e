# relchart/core/houses.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from relchart.core.angles import normalize_angle, sign_index

log = logging.getLogger(__name__)

__all__ = [
    "HOUSE_SYSTEMS",
    "get_house_for_position",
    "whole_sign_houses",
    "equal_houses",
    "canonical_house_system",
    "houses_from_asc",
    "planets_per_house",
]

HOUSE_SYSTEMS: Tuple[str, ...] = ("whole-sign", "equal")


def get_house_for_position(lon: float, houses: Sequence[float]) -> int:
    """
    Find 1..12 using forward-wrap intervals [cusp[i], cusp[i+1]).

    A cusp list that is not exactly 12 long cannot be searched; house 1 is
    returned and the degradation is logged.
    """
    if houses is None or len(houses) != 12:
        log.debug("malformed house cusps (len=%s); defaulting to house 1",
                  None if houses is None else len(houses))
        return 1
    cusp = [normalize_angle(c) for c in houses]
    lon = normalize_angle(lon)
    for i in range(12):
        a, b = cusp[i], cusp[(i + 1) % 12]
        if a < b:
            if a <= lon < b:
                return i + 1
        else:
            # wraps over 360
            if lon >= a or lon < b:
                return i + 1
    # unordered cusp lists can leave gaps
    log.warning("longitude %.4f fell between non-monotonic cusps; defaulting to house 1", lon)
    return 1


def whole_sign_houses(asc: float) -> Tuple[float, ...]:
    """Each house is one whole sign, starting with the sign holding the ASC."""
    start = sign_index(asc) * 30.0
    return tuple(normalize_angle(start + 30.0 * i) for i in range(12))


def equal_houses(asc: float) -> Tuple[float, ...]:
    """Twelve 30-degree houses measured from the ASC degree itself."""
    return tuple(normalize_angle(asc + 30.0 * i) for i in range(12))


def canonical_house_system(system: Optional[str]) -> Optional[str]:
    """'whole_sign' / 'WholeSign' / None -> 'whole-sign'; unknown names -> None."""
    s = (system or "whole-sign").strip().lower().replace("_", "-")
    if s in ("whole-sign", "wholesign"):
        return "whole-sign"
    if s in ("equal", "equal-house"):
        return "equal"
    return None


def houses_from_asc(asc: float, system: str = "whole-sign") -> Tuple[float, ...]:
    s = canonical_house_system(system)
    if s == "whole-sign":
        return whole_sign_houses(asc)
    if s == "equal":
        return equal_houses(asc)
    raise ValueError(f"unsupported house system {system!r}; expected one of {HOUSE_SYSTEMS}")


def planets_per_house(houses: Iterable[int]) -> List[int]:
    """Counts per house 1..12 (index 0 is house 1)."""
    counts: Dict[int, int] = {h: 0 for h in range(1, 13)}
    for h in houses:
        if h in counts:
            counts[h] += 1
    return [counts[h] for h in range(1, 13)]
