# -*- coding: utf-8 -*-
"""
Specializable Transform - Global transform with regional overrides.

A global transform is replaced by a more accurate transform inside given
rectangular regions of the source space. Regions must nest or be disjoint;
a point is handled by the smallest region containing it (borders
inclusive), or by the global transform when no region contains it.

Dependencies
------------
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
from typing import Iterable, List, Optional, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import MismatchedDimensionError, ValidationError
from gridref.referencing.transforms.base import MathTransform

Region = Tuple[np.ndarray, np.ndarray, MathTransform]


def _region_bounds(region) -> Tuple[np.ndarray, np.ndarray]:
    if hasattr(region, 'lower') and hasattr(region, 'upper'):
        lower, upper = region.lower, region.upper
    else:
        lower, upper = region
    lo = np.asarray(lower, dtype=np.float64).ravel()
    hi = np.asarray(upper, dtype=np.float64).ravel()
    if lo.shape != hi.shape:
        raise MismatchedDimensionError(
            f"Region bounds have {lo.size} and {hi.size} dimensions"
        )
    if np.any(hi < lo):
        raise ValidationError(f"Region lower {lo} exceeds upper {hi}")
    return lo, hi


def _inside(points: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> np.ndarray:
    return np.all((points >= lo) & (points <= hi), axis=1)


class SpecializableTransform(MathTransform):
    """Piecewise transform selecting a regional override per point.

    Parameters
    ----------
    global_transform : MathTransform
        Transform used outside all regions.
    overrides : iterable of (region, MathTransform)
        Each region is an envelope-like object with ``lower`` and
        ``upper`` attributes, or a ``(lower, upper)`` pair, expressed in
        source coordinates.

    Raises
    ------
    MismatchedDimensionError
        If a region or override transform does not match the global
        transform dimensions.
    ValidationError
        If two regions overlap without one containing the other.
    """

    def __init__(
        self,
        global_transform: MathTransform,
        overrides: Iterable[Tuple[object, MathTransform]],
    ) -> None:
        src = global_transform.source_dimensions
        tgt = global_transform.target_dimensions
        regions: List[Region] = []
        for region, transform in overrides:
            lo, hi = _region_bounds(region)
            if lo.size != src:
                raise MismatchedDimensionError(
                    f"Region has {lo.size} dimensions but the global "
                    f"transform has {src} source dimensions"
                )
            if (transform.source_dimensions != src
                    or transform.target_dimensions != tgt):
                raise MismatchedDimensionError(
                    f"Override maps {transform.source_dimensions}D to "
                    f"{transform.target_dimensions}D, expected {src}D to "
                    f"{tgt}D"
                )
            regions.append((lo, hi, transform))
        for i, (lo_a, hi_a, _) in enumerate(regions):
            for lo_b, hi_b, _ in regions[i + 1:]:
                overlap = np.minimum(hi_a, hi_b) > np.maximum(lo_a, lo_b)
                if not np.all(overlap):
                    continue
                a_in_b = np.all(lo_a >= lo_b) and np.all(hi_a <= hi_b)
                b_in_a = np.all(lo_b >= lo_a) and np.all(hi_b <= hi_a)
                if not (a_in_b or b_in_a):
                    raise ValidationError(
                        f"Regions [{lo_a}, {hi_a}] and [{lo_b}, {hi_b}] "
                        f"overlap without nesting"
                    )
        # Smallest first: the first region containing a point is the most
        # specific one.
        regions.sort(key=lambda r: float(np.prod(r[1] - r[0])))
        self._global = global_transform
        self._regions = regions
        self._inverse: Optional[MathTransform] = None

    @property
    def global_transform(self) -> MathTransform:
        return self._global

    @property
    def regions(self) -> List[Tuple[np.ndarray, np.ndarray, MathTransform]]:
        return [(lo.copy(), hi.copy(), t) for lo, hi, t in self._regions]

    @property
    def source_dimensions(self) -> int:
        return self._global.source_dimensions

    @property
    def target_dimensions(self) -> int:
        return self._global.target_dimensions

    def transform_for(self, point: np.ndarray) -> MathTransform:
        """Transform that handles *point*."""
        p = self._as_point(point)[np.newaxis, :]
        for lo, hi, transform in self._regions:
            if _inside(p, lo, hi)[0]:
                return transform
        return self._global

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        out = self._global._transform_array(points)
        assigned = np.zeros(points.shape[0], dtype=bool)
        for lo, hi, transform in self._regions:
            mask = ~assigned & _inside(points, lo, hi)
            if np.any(mask):
                out[mask] = transform._transform_array(points[mask])
                assigned |= mask
        return out

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        return self.transform_for(point).derivative(point)

    def inverse(self) -> MathTransform:
        if self._inverse is None:
            self._inverse = _SpecializableInverse(self)
        return self._inverse

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpecializableTransform):
            return NotImplemented
        if self._global != other._global:
            return False
        if len(self._regions) != len(other._regions):
            return False
        return all(
            np.array_equal(a[0], b[0]) and np.array_equal(a[1], b[1])
            and a[2] == b[2]
            for a, b in zip(self._regions, other._regions)
        )

    def __hash__(self) -> int:
        return hash((self._global, len(self._regions)))


class _SpecializableInverse(MathTransform):
    """Inverse selecting the most specific region whose inverse lands in it."""

    def __init__(self, forward: SpecializableTransform) -> None:
        self._forward = forward
        self._global = forward._global.inverse()
        self._regions = [(lo, hi, t.inverse())
                         for lo, hi, t in forward._regions]

    @property
    def source_dimensions(self) -> int:
        return self._forward.target_dimensions

    @property
    def target_dimensions(self) -> int:
        return self._forward.source_dimensions

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        out = self._global._transform_array(points)
        assigned = np.zeros(points.shape[0], dtype=bool)
        for lo, hi, transform in self._regions:
            candidate = transform._transform_array(points)
            mask = ~assigned & _inside(candidate, lo, hi)
            if np.any(mask):
                out[mask] = candidate[mask]
                assigned |= mask
        return out

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        p = point[np.newaxis, :]
        for lo, hi, transform in self._regions:
            if _inside(transform._transform_array(p), lo, hi)[0]:
                return transform.derivative(point)
        return self._global.derivative(point)

    def inverse(self) -> MathTransform:
        return self._forward
