# -*- coding: utf-8 -*-
"""
General Envelope - N-dimensional bounding box with an optional CRS.

Holds per-dimension lower and upper bounds. On a periodic axis (longitude
of a geographic CRS) ``lower > upper`` denotes a range crossing the period
boundary, for example ``[170, -170]`` across the anti-meridian.

Also provides ``transform_envelope``, which computes the bounding box of an
envelope after a coordinate transform by sampling its corners (linear
transforms) or a regular grid of points (non-linear transforms).

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
from typing import Any, Dict, Optional, Sequence, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import MismatchedDimensionError, ValidationError
from gridref.referencing.crs import (
    as_crs,
    equals_ignore_metadata,
    wraparound_periods,
)
from gridref.referencing.transforms.base import LinearTransform, MathTransform
from gridref.referencing.wraparound import shift_bounds, shift_range

SAMPLES_PER_DIMENSION = 5
"""Points sampled along each dimension when transforming through a
non-linear transform."""


class GeneralEnvelope:
    """Immutable N-dimensional envelope.

    Parameters
    ----------
    lower : sequence of float
        Lower bounds, one per dimension.
    upper : sequence of float
        Upper bounds, one per dimension.
    crs : pyproj.CRS or str, optional
        Coordinate reference system of the bounds.

    Raises
    ------
    MismatchedDimensionError
        If *lower* and *upper* differ in length, or if the CRS dimension
        differs from the number of bounds.
    ValidationError
        If ``lower > upper`` on an axis that does not wrap around.

    Examples
    --------
    >>> env = GeneralEnvelope([170.0, -10.0], [-170.0, 10.0], 'OGC:CRS84')
    >>> env.span(0)
    20.0
    """

    def __init__(
        self,
        lower: Sequence[float],
        upper: Sequence[float],
        crs: Any = None,
    ) -> None:
        lo = np.array(lower, dtype=np.float64).ravel()
        hi = np.array(upper, dtype=np.float64).ravel()
        if lo.shape != hi.shape:
            raise MismatchedDimensionError(
                f"lower has {lo.size} dimensions but upper has {hi.size}"
            )
        crs = as_crs(crs)
        if crs is not None and len(crs.axis_info) != lo.size:
            raise MismatchedDimensionError(
                f"CRS {crs.name} has {len(crs.axis_info)} axes but the "
                f"envelope has {lo.size} dimensions"
            )
        periods = wraparound_periods(crs)
        for dim in np.nonzero(lo > hi)[0]:
            if int(dim) not in periods:
                raise ValidationError(
                    f"lower {lo[dim]} > upper {hi[dim]} in dimension {dim}, "
                    f"which does not wrap around"
                )
        lo.setflags(write=False)
        hi.setflags(write=False)
        self._lower = lo
        self._upper = hi
        self._crs = crs
        self._periods = periods

    @classmethod
    def from_bounds(
        cls, bounds: Sequence[Tuple[float, float]], crs: Any = None
    ) -> 'GeneralEnvelope':
        """Create from ``[(lower, upper), ...]`` pairs."""
        pairs = list(bounds)
        return cls([b[0] for b in pairs], [b[1] for b in pairs], crs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return self._lower.size

    @property
    def lower(self) -> np.ndarray:
        return self._lower

    @property
    def upper(self) -> np.ndarray:
        return self._upper

    @property
    def crs(self):
        return self._crs

    @property
    def periods(self) -> Dict[int, float]:
        """Wraparound period of each periodic dimension."""
        return dict(self._periods)

    def crosses_period(self, dim: int) -> bool:
        """Whether dimension *dim* crosses the period boundary."""
        return bool(self._lower[dim] > self._upper[dim])

    def span(self, dim: int) -> float:
        """Extent of dimension *dim*, accounting for wraparound."""
        s = float(self._upper[dim] - self._lower[dim])
        if s < 0 and dim in self._periods:
            s += self._periods[dim]
        return s

    def median(self, dim: int) -> float:
        """Midpoint of dimension *dim*, accounting for wraparound."""
        m = 0.5 * float(self._lower[dim] + self._upper[dim])
        if self.crosses_period(dim):
            m += 0.5 * self._periods[dim]
        return m

    @property
    def spans(self) -> np.ndarray:
        return np.array([self.span(i) for i in range(self.dimension)])

    @property
    def medians(self) -> np.ndarray:
        return np.array([self.median(i) for i in range(self.dimension)])

    @property
    def is_empty(self) -> bool:
        """True if any dimension has a zero, negative or NaN span."""
        return not all(self.span(i) > 0 for i in range(self.dimension))

    @property
    def is_all_nan(self) -> bool:
        return bool(np.all(np.isnan(self._lower))
                    and np.all(np.isnan(self._upper)))

    def to_tuple(self) -> Tuple[Tuple[float, float], ...]:
        """``((lower, upper), ...)`` per dimension."""
        return tuple((float(lo), float(hi))
                     for lo, hi in zip(self._lower, self._upper))

    # ------------------------------------------------------------------
    # Derived envelopes
    # ------------------------------------------------------------------

    def simplify(self) -> 'GeneralEnvelope':
        """Envelope with ``lower <= upper`` on every dimension.

        Ranges crossing the period boundary are unwrapped by adding one
        period to the upper bound, so the result may exceed the usual axis
        range (for example longitudes up to 540).
        """
        if not np.any(self._lower > self._upper):
            return self
        upper = np.array(self._upper)
        for dim in np.nonzero(self._lower > self._upper)[0]:
            upper[dim] += self._periods[int(dim)]
        return GeneralEnvelope._unchecked(self._lower, upper, self._crs)

    def with_crs(self, crs: Any) -> 'GeneralEnvelope':
        """Same bounds declared in another CRS (no conversion)."""
        return GeneralEnvelope(self._lower, self._upper, crs)

    def sub_envelope(self, dims: Sequence[int], crs: Any = None) -> 'GeneralEnvelope':
        """Envelope restricted to the given dimensions."""
        dims = list(dims)
        return GeneralEnvelope(self._lower[dims], self._upper[dims], crs)

    def shift_into(self, domain: 'GeneralEnvelope') -> 'GeneralEnvelope':
        """Shift periodic dimensions by whole periods to overlap *domain*.

        See ``gridref.referencing.wraparound`` for the rules. The result
        has ``lower <= upper`` on every dimension.
        """
        self._check_dimension(domain)
        periods = self._periods or domain._periods
        lower, upper = shift_bounds(self._lower, self._upper,
                                    domain._lower, domain._upper, periods)
        return GeneralEnvelope._unchecked(lower, upper, self._crs)

    def intersect(self, other: 'GeneralEnvelope') -> 'GeneralEnvelope':
        """Intersection with *other*, expressed in this envelope's CRS.

        On periodic dimensions *other* is first shifted by whole periods to
        overlap this envelope. Dimensions without overlap get NaN bounds,
        which makes the result empty.

        Raises
        ------
        MismatchedDimensionError
            If the dimensions differ.
        ValidationError
            If the two envelopes declare different CRS.
        """
        self._check_dimension(other)
        self._check_crs(other)
        base = self.simplify()
        lower = np.array(base._lower)
        upper = np.array(base._upper)
        periods = self._periods or other._periods
        for dim in range(self.dimension):
            o_lo, o_hi = other._lower[dim], other._upper[dim]
            if dim in periods:
                shifted = shift_range(o_lo, o_hi, periods[dim],
                                      lower[dim], upper[dim])
                if shifted is None:
                    lower[dim] = upper[dim] = np.nan
                    continue
                o_lo, o_hi = shifted
            lo = max(lower[dim], o_lo)
            hi = min(upper[dim], o_hi)
            if hi < lo:
                lo = hi = np.nan
            lower[dim], upper[dim] = lo, hi
        return GeneralEnvelope._unchecked(lower, upper, self._crs)

    def union(self, other: 'GeneralEnvelope') -> 'GeneralEnvelope':
        """Smallest envelope containing both envelopes."""
        self._check_dimension(other)
        self._check_crs(other)
        a = self.simplify()
        b = other.simplify()
        return GeneralEnvelope._unchecked(
            np.fmin(a._lower, b._lower), np.fmax(a._upper, b._upper),
            self._crs)

    def contains(self, point: Sequence[float]) -> bool:
        """Whether *point* lies inside this envelope, borders included."""
        p = np.asarray(point, dtype=np.float64)
        if p.shape != (self.dimension,):
            raise MismatchedDimensionError(
                f"Expected {self.dimension} coordinates, got shape {p.shape}"
            )
        for dim in range(self.dimension):
            lo, hi, v = self._lower[dim], self._upper[dim], p[dim]
            if lo > hi:
                if not (v >= lo or v <= hi):
                    return False
            elif not lo <= v <= hi:
                return False
        return True

    def contains_envelope(self, other: 'GeneralEnvelope') -> bool:
        """Whether *other* lies entirely inside this envelope."""
        self._check_dimension(other)
        a = self.simplify()
        b = other.simplify()
        return bool(np.all(b._lower >= a._lower)
                    and np.all(b._upper <= a._upper))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @classmethod
    def _unchecked(cls, lower, upper, crs) -> 'GeneralEnvelope':
        env = cls.__new__(cls)
        lo = np.array(lower, dtype=np.float64)
        hi = np.array(upper, dtype=np.float64)
        lo.setflags(write=False)
        hi.setflags(write=False)
        env._lower = lo
        env._upper = hi
        env._crs = crs
        env._periods = wraparound_periods(crs)
        return env

    def _check_dimension(self, other: 'GeneralEnvelope') -> None:
        if other.dimension != self.dimension:
            raise MismatchedDimensionError(
                f"Envelope has {other.dimension} dimensions, expected "
                f"{self.dimension}"
            )

    def _check_crs(self, other: 'GeneralEnvelope') -> None:
        if not equals_ignore_metadata(self._crs, other._crs):
            raise ValidationError(
                f"Envelopes use different CRS ({self._crs.name} and "
                f"{other._crs.name})"
            )

    def equals(self, other: 'GeneralEnvelope', tolerance: float = 0.0) -> bool:
        """Compare bounds within an absolute *tolerance*."""
        if other.dimension != self.dimension:
            return False
        if not equals_ignore_metadata(self._crs, other._crs):
            return False
        return bool(
            np.allclose(self._lower, other._lower, rtol=0.0, atol=tolerance,
                        equal_nan=True)
            and np.allclose(self._upper, other._upper, rtol=0.0,
                            atol=tolerance, equal_nan=True))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneralEnvelope):
            return NotImplemented
        if self._crs is None or other._crs is None:
            same_crs = self._crs is other._crs
        else:
            same_crs = self._crs == other._crs
        return (same_crs
                and np.array_equal(self._lower, other._lower, equal_nan=True)
                and np.array_equal(self._upper, other._upper, equal_nan=True))

    def __hash__(self) -> int:
        return hash(((self._lower + 0.0).tobytes(),
                     (self._upper + 0.0).tobytes()))

    def __repr__(self) -> str:
        bounds = ', '.join(f"[{lo:g} .. {hi:g}]"
                           for lo, hi in zip(self._lower, self._upper))
        crs = f", crs={self._crs.name!r}" if self._crs is not None else ''
        return f"GeneralEnvelope({bounds}{crs})"


def transform_envelope(
    transform: MathTransform,
    envelope: GeneralEnvelope,
    crs: Any = None,
) -> GeneralEnvelope:
    """Bounding box of *envelope* after *transform*.

    Affine transforms only need the corners. Other transforms are
    evaluated on a regular grid of ``SAMPLES_PER_DIMENSION`` points per
    dimension; points the transform cannot handle (NaN results) are
    ignored.

    Parameters
    ----------
    transform : MathTransform
        Transform whose source dimension equals the envelope dimension.
    envelope : GeneralEnvelope
        Envelope to transform. Ranges crossing a period boundary are
        unwrapped first.
    crs : pyproj.CRS, optional
        CRS to attach to the result.

    Returns
    -------
    GeneralEnvelope
        Envelope of dimension ``transform.target_dimensions``.

    Raises
    ------
    MismatchedDimensionError
        If the envelope dimension differs from the transform source
        dimension.
    """
    if envelope.dimension != transform.source_dimensions:
        raise MismatchedDimensionError(
            f"Envelope has {envelope.dimension} dimensions but the transform "
            f"expects {transform.source_dimensions}"
        )
    env = envelope.simplify()
    if transform.is_identity:
        return GeneralEnvelope._unchecked(env.lower, env.upper, as_crs(crs))
    affine = isinstance(transform, LinearTransform) and transform.is_affine
    axes = []
    for lo, hi in zip(env.lower, env.upper):
        if lo == hi or not (np.isfinite(lo) and np.isfinite(hi)):
            axes.append(np.unique(np.array([lo, hi])))
        elif affine:
            axes.append(np.array([lo, hi]))
        else:
            axes.append(np.linspace(lo, hi, SAMPLES_PER_DIMENSION))
    grid = np.stack(np.meshgrid(*axes, indexing='ij'), axis=-1)
    points = transform.transform(grid.reshape(-1, env.dimension))
    lower = np.fmin.reduce(points, axis=0)
    upper = np.fmax.reduce(points, axis=0)
    return GeneralEnvelope._unchecked(lower, upper, as_crs(crs))
