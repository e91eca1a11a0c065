# -*- coding: utf-8 -*-
"""
CRS Utilities - Coordinate reference system helpers backed by pyproj.

Coordinate reference systems are opaque ``pyproj.CRS`` objects. This module
answers the few questions grid derivation asks about them: are two CRS the
same, which axes wrap around, which dimensions of a compound CRS a
lower-dimensional request addresses, and which transform converts
coordinates from one CRS to another.

Dependencies
------------
pyproj
numpy

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
import logging
import math
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

# gridref internal
from gridref.exceptions import MismatchedDimensionError, ValidationError
from gridref.referencing import matrix as matrices
from gridref.referencing._backend import require_pyproj
from gridref.referencing.transforms.base import MathTransform
from gridref.referencing.transforms.factory import identity, linear
from gridref.referencing.transforms.proj import ProjTransform

if TYPE_CHECKING:
    import pyproj

logger = logging.getLogger(__name__)

_PERIODS = {
    'degree': 360.0,
    'grad': 400.0,
    'radian': 2.0 * math.pi,
}

_OPPOSITE = {
    'north': 'south', 'south': 'north',
    'east': 'west', 'west': 'east',
    'up': 'down', 'down': 'up',
}


def as_crs(value: Any) -> Optional['pyproj.CRS']:
    """Coerce *value* to a ``pyproj.CRS``.

    Parameters
    ----------
    value : None, pyproj.CRS, str, int or dict
        Anything accepted by ``pyproj.CRS.from_user_input``.

    Returns
    -------
    pyproj.CRS or None
        ``None`` when *value* is ``None``.

    Raises
    ------
    DependencyError
        If pyproj is not installed.
    ValidationError
        If pyproj does not understand *value*.
    """
    if value is None:
        return None
    require_pyproj()
    import pyproj
    from pyproj.exceptions import CRSError

    if isinstance(value, pyproj.CRS):
        return value
    try:
        return pyproj.CRS.from_user_input(value)
    except CRSError as exc:
        raise ValidationError(f"Invalid CRS {value!r}: {exc}") from exc


def dimension(crs: 'pyproj.CRS') -> int:
    """Number of axes of *crs*."""
    return len(crs.axis_info)


def equals_ignore_metadata(
    a: Optional['pyproj.CRS'], b: Optional['pyproj.CRS']
) -> bool:
    """Whether *a* and *b* describe the same CRS, axis order included.

    An unknown (``None``) CRS is compatible with anything.
    """
    if a is None or b is None or a is b:
        return True
    return a.equals(b, ignore_axis_order=False)


def wraparound_periods(crs: Optional['pyproj.CRS']) -> Dict[int, float]:
    """Periods of the axes of *crs* that wrap around.

    Longitude axes of geographic CRS wrap with a period of 360 degrees (400
    grads, 2 pi radians). Compound CRS are inspected component by
    component.

    Returns
    -------
    Dict[int, float]
        Mapping from dimension index to period.
    """
    if crs is None:
        return {}
    periods: Dict[int, float] = {}
    if crs.is_compound:
        offset = 0
        for sub in crs.sub_crs_list:
            for dim, period in wraparound_periods(sub).items():
                periods[offset + dim] = period
            offset += dimension(sub)
        return periods
    if not crs.is_geographic:
        return periods
    for dim, axis in enumerate(crs.axis_info):
        if axis.direction.lower() in ('east', 'west'):
            period = _PERIODS.get(axis.unit_name.lower())
            if period is not None:
                periods[dim] = period
    return periods


def _axis_swap(
    source: 'pyproj.CRS', target: 'pyproj.CRS'
) -> Optional[MathTransform]:
    """Permutation matrix between two CRS differing only by axis order."""
    src_axes = source.axis_info
    tgt_axes = target.axis_info
    if len(src_axes) != len(tgt_axes):
        return None
    n = len(src_axes)
    m = matrices.create_zero(n + 1, n + 1)
    used = set()
    for i, tgt_axis in enumerate(tgt_axes):
        direction = tgt_axis.direction.lower()
        for j, src_axis in enumerate(src_axes):
            if j in used:
                continue
            src_direction = src_axis.direction.lower()
            if src_direction == direction:
                m[i, j] = 1.0
            elif _OPPOSITE.get(src_direction) == direction:
                m[i, j] = -1.0
            else:
                continue
            used.add(j)
            break
        else:
            return None
    return linear(m)


def find_operation(source: Any, target: Any) -> MathTransform:
    """Transform converting coordinates from *source* to *target*.

    Returns the identity for equal (or unknown) CRS, a linear axis
    permutation for CRS that differ only by axis order or direction, and a
    pyproj-backed transform otherwise.

    Parameters
    ----------
    source, target : None, pyproj.CRS, str, int or dict
        Anything accepted by :func:`as_crs`.

    Raises
    ------
    TransformError
        If pyproj finds no coordinate operation.
    ValidationError
        If neither CRS is known or one is not understood.
    """
    source = as_crs(source)
    target = as_crs(target)
    if source is None and target is None:
        raise ValidationError("At least one CRS must be known")
    if source is None or target is None:
        return identity(dimension(target if source is None else source))
    if source.equals(target, ignore_axis_order=False):
        return identity(dimension(source))
    if source.equals(target, ignore_axis_order=True):
        swap = _axis_swap(source, target)
        if swap is not None:
            return swap
    logger.debug("Resolving coordinate operation %s -> %s",
                 source.name, target.name)
    return ProjTransform(source, target)


def component_dimensions(
    base_crs: Optional['pyproj.CRS'],
    base_dimension: int,
    crs: Optional['pyproj.CRS'],
    request_dimension: int,
) -> Tuple[List[int], Optional['pyproj.CRS']]:
    """Dimensions of *base_crs* addressed by a lower-dimensional request.

    Parameters
    ----------
    base_crs : pyproj.CRS or None
        CRS of the base grid.
    base_dimension : int
        Number of dimensions of the base grid CRS space.
    crs : pyproj.CRS or None
        CRS of the request.
    request_dimension : int
        Number of dimensions of the request.

    Returns
    -------
    Tuple[List[int], pyproj.CRS or None]
        The base dimensions, in order, and the component of *base_crs* the
        request must be converted to (``None`` when unknown).

    Raises
    ------
    MismatchedDimensionError
        If the request has more dimensions than the base, or no component
        of the base CRS matches it.
    """
    if request_dimension > base_dimension:
        raise MismatchedDimensionError(
            f"Request has {request_dimension} dimensions but the grid CRS "
            f"has only {base_dimension}"
        )
    if request_dimension == base_dimension:
        return list(range(base_dimension)), base_crs
    if base_crs is None or crs is None:
        return list(range(request_dimension)), None
    if base_crs.is_compound:
        components = []
        offset = 0
        for sub in base_crs.sub_crs_list:
            components.append((offset, sub))
            offset += dimension(sub)
        for offset, sub in components:
            if dimension(sub) == request_dimension and sub.equals(
                    crs, ignore_axis_order=True):
                return list(range(offset, offset + request_dimension)), sub
        for offset, sub in components:
            if dimension(sub) == request_dimension and (
                    sub.is_vertical == crs.is_vertical):
                return list(range(offset, offset + request_dimension)), sub
    elif request_dimension == 2 and base_dimension == 3:
        # Height is the last axis of 3-D geographic and projected CRS
        return [0, 1], base_crs.to_2d()
    raise MismatchedDimensionError(
        f"No component of {base_crs.name} matches {crs.name}"
    )
