# -*- coding: utf-8 -*-
"""
Wraparound - Periodic-axis corrections for ranges and coordinates.

On a periodic axis such as longitude a range may be written in more than
one way (``[170, -170]`` crossing the anti-meridian, ``[190, 200]`` beyond
180, ``[-290, -270]`` one period too low). These functions shift a range or
a coordinate by whole periods so that it overlaps a domain.

A range crossing the period boundary (``lower > upper``) is unwrapped both
ways, ``[lower, upper + P]`` and ``[lower - P, upper]``. Every candidate is
tried at every shift ``k * P`` that overlaps the domain, and the result is
the union of all overlapping candidates. The union may cover part of the
domain the request did not ask for; callers intersect it with the domain
afterwards.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-17

Modified
--------
2026-10-17
"""

# Standard library
import math
from typing import Dict, Optional, Tuple

# Third-party
import numpy as np


def shift_range(
    lower: float,
    upper: float,
    period: float,
    domain_lower: float,
    domain_upper: float,
) -> Optional[Tuple[float, float]]:
    """Shift ``[lower, upper]`` by whole periods to overlap the domain.

    Parameters
    ----------
    lower, upper : float
        Requested range; ``lower > upper`` crosses the period boundary.
    period : float
        Axis period.
    domain_lower, domain_upper : float
        Domain range; ``domain_lower > domain_upper`` crosses the period
        boundary.

    Returns
    -------
    Tuple[float, float] or None
        Union of the overlapping shifted candidates, with
        ``lower <= upper``; ``None`` if no shift overlaps the domain.
    """
    if not all(math.isfinite(v) for v in (lower, upper, period,
                                           domain_lower, domain_upper)):
        return None
    if domain_lower > domain_upper:
        domain_upper += period
    if lower <= upper:
        candidates = [(lower, upper)]
    else:
        candidates = [(lower, upper + period), (lower - period, upper)]
    best_lower = best_upper = None
    for cl, cu in candidates:
        k_min = math.ceil((domain_lower - cu) / period)
        k_max = math.floor((domain_upper - cl) / period)
        for k in range(k_min, k_max + 1):
            sl = cl + k * period
            su = cu + k * period
            if su <= domain_lower or sl >= domain_upper:
                continue
            best_lower = sl if best_lower is None else min(best_lower, sl)
            best_upper = su if best_upper is None else max(best_upper, su)
    if best_lower is None:
        return None
    return best_lower, best_upper


def shift_bounds(
    lower: np.ndarray,
    upper: np.ndarray,
    domain_lower: np.ndarray,
    domain_upper: np.ndarray,
    periods: Dict[int, float],
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply ``shift_range`` to every periodic dimension.

    Dimensions that cannot be made to overlap keep their bounds, unwrapped
    when they cross the period boundary, so the caller reports the
    disjoint result.
    """
    lower = np.array(lower, dtype=np.float64)
    upper = np.array(upper, dtype=np.float64)
    for dim, period in periods.items():
        if dim >= lower.size:
            continue
        shifted = shift_range(lower[dim], upper[dim], period,
                              domain_lower[dim], domain_upper[dim])
        if shifted is not None:
            lower[dim], upper[dim] = shifted
        elif lower[dim] > upper[dim]:
            upper[dim] += period
    return lower, upper


def shift_coordinate(
    value: float, period: float, domain_lower: float, domain_upper: float
) -> float:
    """Shift *value* by whole periods into the domain, if possible.

    Returns *value* unchanged when it is already inside the domain or when
    no shift brings it inside.
    """
    if not all(math.isfinite(v) for v in (value, period,
                                           domain_lower, domain_upper)):
        return value
    if domain_lower > domain_upper:
        domain_upper += period
    if domain_lower <= value <= domain_upper:
        return value
    candidate = value + math.ceil((domain_lower - value) / period) * period
    if candidate <= domain_upper:
        return candidate
    return value
