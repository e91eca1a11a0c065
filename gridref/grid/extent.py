# -*- coding: utf-8 -*-
"""
Grid Extent - Inclusive integer index ranges of an N-dimensional grid.

A ``GridExtent`` stores, for each grid dimension, the lowest and highest
valid cell index, both inclusive. Optional ``DimensionNameType`` labels
(column, row, vertical, time, ...) are carried along for bookkeeping only.
Extents are immutable: every operation returns a new instance, or the same
instance when nothing changes.

Indices are plain Python integers, so arithmetic never overflows.

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
import math
from typing import Any, Optional, Sequence, Tuple, Union

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    DisjointExtentError,
    MismatchedDimensionError,
    PointOutsideCoverageError,
    ValidationError,
)
from gridref.referencing.envelope import GeneralEnvelope, transform_envelope
from gridref.referencing.transforms.base import MathTransform
from gridref.vocabulary import (
    DimensionNameType,
    GridClippingMode,
    GridRoundingMode,
    PixelInCell,
)

AxisTypes = Optional[Tuple[Optional[DimensionNameType], ...]]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def _div_toward_zero(value: int, divisor: int) -> int:
    q = abs(value) // divisor
    return -q if value < 0 else q


def _round_range(
    lower: float, upper: float, span: float, rounding: GridRoundingMode
) -> Tuple[int, int]:
    """Inclusive integer range for fractional ``[lower, upper)`` indices."""
    if rounding is GridRoundingMode.ENCLOSING:
        lo = math.floor(lower)
        hi = math.ceil(upper)
        if lo != hi:
            hi -= 1
        return lo, hi
    if rounding is GridRoundingMode.CONTAINED:
        lo = math.ceil(lower)
        hi = math.floor(upper)
        if lo > hi:
            # Not even one whole cell: keep the bound closest to an integer
            lo = hi if (lo - lower) > (upper - hi) else lo
            return lo, lo
        if lo != hi:
            hi -= 1
        return lo, hi
    lo = round_half_up(lower)
    hi = round_half_up(upper)
    if lo == hi:
        if lower - math.floor(lower) > math.ceil(upper) - upper:
            lo -= 1
            hi = lo
        return lo, hi
    hi -= 1
    # Rounding noise may add or remove one cell, e.g. [1.49999, 2.50001)
    # rounds to [1 .. 2] while its span is 1. Adjust the bound farthest
    # from an integer when the span mismatch is exactly one cell.
    cells = round_half_up(span)
    delta = (hi - lo + 1) - cells
    if cells != 0 and abs(delta) == 1:
        dmin = abs(lower - round(lower))
        dmax = abs(upper - round(upper))
        adjust_max = dmax >= dmin
        if abs(span - cells) < (dmax if adjust_max else dmin):
            if adjust_max:
                hi -= delta
            else:
                lo += delta
    return lo, hi


class GridExtent:
    """Inclusive integer bounds of a grid, one pair per dimension.

    Parameters
    ----------
    low : sequence of int
        Lowest valid index in each dimension.
    high : sequence of int
        Highest index in each dimension, inclusive unless
        *high_inclusive* is False.
    axis_types : sequence of DimensionNameType or None, optional
        Label of each dimension.
    high_inclusive : bool, default=True
        Whether *high* is inclusive. When False, one is subtracted.

    Raises
    ------
    MismatchedDimensionError
        If *low*, *high* and *axis_types* differ in length.
    ValidationError
        If ``low[i] > high[i]`` in any dimension.

    Examples
    --------
    >>> extent = GridExtent((0, 0), (199, 179))
    >>> extent.sizes
    (200, 180)
    >>> GridExtent.from_size(200, 180) == GridExtent(
    ...     (0, 0), (199, 179), (DimensionNameType.COLUMN,
    ...                          DimensionNameType.ROW))
    True
    """

    def __init__(
        self,
        low: Sequence[int],
        high: Sequence[int],
        axis_types: Optional[Sequence[Optional[DimensionNameType]]] = None,
        high_inclusive: bool = True,
    ) -> None:
        low = tuple(int(v) for v in low)
        high = tuple(int(v) for v in high)
        if not high_inclusive:
            high = tuple(v - 1 for v in high)
        if len(low) != len(high):
            raise MismatchedDimensionError(
                f"low has {len(low)} dimensions but high has {len(high)}"
            )
        for i, (lo, hi) in enumerate(zip(low, high)):
            if lo > hi:
                raise ValidationError(
                    f"Illegal grid range [{lo} .. {hi}] in dimension {i}"
                )
        self._low = low
        self._high = high
        self._types = self._validate_types(axis_types, len(low))

    @staticmethod
    def _validate_types(axis_types, dimension: int) -> AxisTypes:
        if axis_types is None:
            return None
        types = tuple(axis_types)
        if len(types) != dimension:
            raise MismatchedDimensionError(
                f"Expected {dimension} axis types, got {len(types)}"
            )
        if all(t is None for t in types):
            return None
        named = [t for t in types if t is not None]
        if len(set(named)) != len(named):
            raise ValidationError(f"Duplicated axis types: {types}")
        return types

    @classmethod
    def from_size(
        cls,
        *sizes: int,
        axis_types: Optional[Sequence[Optional[DimensionNameType]]] = None,
    ) -> 'GridExtent':
        """Extent starting at zero with the given number of cells.

        Two-dimensional extents default to ``(COLUMN, ROW)`` labels.
        """
        if any(s <= 0 for s in sizes):
            raise ValidationError(f"Sizes must be positive, got {sizes}")
        if axis_types is None and len(sizes) == 2:
            axis_types = (DimensionNameType.COLUMN, DimensionNameType.ROW)
        return cls([0] * len(sizes), [s - 1 for s in sizes], axis_types)

    @classmethod
    def _create(cls, low, high, types: AxisTypes) -> 'GridExtent':
        extent = cls.__new__(cls)
        extent._low = tuple(low)
        extent._high = tuple(high)
        extent._types = types
        return extent

    @classmethod
    def from_index_envelope(
        cls,
        envelope: Union[GeneralEnvelope, Tuple[Sequence[float], Sequence[float]]],
        rounding: GridRoundingMode = GridRoundingMode.NEAREST,
        clipping: GridClippingMode = GridClippingMode.STRICT,
        margin: Optional[Sequence[int]] = None,
        chunk_size: Optional[Sequence[int]] = None,
        enclosing: Optional['GridExtent'] = None,
        modified_dimensions: Optional[Sequence[int]] = None,
    ) -> 'GridExtent':
        """Extent from fractional cell indices.

        Parameters
        ----------
        envelope : GeneralEnvelope or (lower, upper)
            Fractional cell indices in corner convention, lower bounds
            inclusive and upper bounds exclusive.
        rounding : GridRoundingMode
            How fractional indices become integers.
        clipping : GridClippingMode
            How the result is clipped to *enclosing*.
        margin : sequence of int, optional
            Cells added on both sides, indexed like the envelope
            dimensions.
        chunk_size : sequence of int, optional
            Snap bounds to multiples of these sizes, indexed like the
            envelope dimensions.
        enclosing : GridExtent, optional
            Extent of the grid this extent is a sub-region of. Dimensions
            not listed in *modified_dimensions* are copied from it, and
            NaN envelope bounds inherit its values.
        modified_dimensions : sequence of int, optional
            Grid dimensions set from the envelope dimensions, in order.
            Defaults to all dimensions.

        Returns
        -------
        GridExtent

        Raises
        ------
        DisjointExtentError
            If the result does not intersect *enclosing*.
        ValidationError
            If a bound is NaN and there is no enclosing extent, or if
            ``lower > upper``.
        """
        if isinstance(envelope, GeneralEnvelope):
            env = envelope.simplify()
            lower, upper = env.lower, env.upper
        else:
            lower = np.asarray(envelope[0], dtype=np.float64)
            upper = np.asarray(envelope[1], dtype=np.float64)
        n = lower.size
        if enclosing is not None:
            dims = (list(modified_dimensions) if modified_dimensions is not None
                    else list(range(enclosing.dimension)))
            if len(dims) != n:
                raise MismatchedDimensionError(
                    f"Envelope has {n} dimensions but {len(dims)} grid "
                    f"dimensions are modified"
                )
            low = list(enclosing._low)
            high = list(enclosing._high)
            types = enclosing._types
        else:
            dims = list(range(n))
            low = [0] * n
            high = [0] * n
            types = None
        for i, d in enumerate(dims):
            lo_f = float(lower[i])
            hi_f = float(upper[i])
            valid_lo = math.isfinite(lo_f)
            valid_hi = math.isfinite(hi_f)
            if lo_f > hi_f or (enclosing is None
                               and not (valid_lo and valid_hi)):
                raise ValidationError(
                    f"Illegal grid envelope [{lo_f} .. {hi_f}] in "
                    f"dimension {d}"
                )
            if valid_lo and valid_hi:
                lo, hi = _round_range(lo_f, hi_f, hi_f - lo_f, rounding)
            else:
                # Unbounded sides inherit the enclosing range
                lo = math.floor(lo_f) if valid_lo else enclosing._low[d]
                hi = math.ceil(hi_f) - 1 if valid_hi else enclosing._high[d]
            if enclosing is not None and clipping is GridClippingMode.BORDER_EXPANSION:
                lv = max(lo, enclosing._low[d])
                hv = min(hi, enclosing._high[d])
                if lv > hv:
                    raise DisjointExtentError(
                        f"Requested range [{lo} .. {hi}] does not intersect "
                        f"[{enclosing._low[d]} .. {enclosing._high[d]}] in "
                        f"grid dimension {d}"
                    )
                lo, hi = lv, hv
            if margin is not None and i < len(margin):
                lo -= margin[i]
                hi += margin[i]
            if lo > hi:
                lo = hi = hi + (lo - hi) // 2
            if chunk_size is not None and i < len(chunk_size):
                s = chunk_size[i]
                lo -= lo % s
                hi += (s - 1) - hi % s
            if enclosing is not None and clipping is GridClippingMode.STRICT:
                valid_min = enclosing._low[d]
                valid_max = enclosing._high[d]
                if lo > valid_max or hi < valid_min:
                    raise DisjointExtentError(
                        f"Requested range [{lo} .. {hi}] does not intersect "
                        f"[{valid_min} .. {valid_max}] in grid dimension {d}"
                    )
                low[d] = max(lo, valid_min)
                high[d] = min(hi, valid_max)
            else:
                low[d] = lo
                high[d] = hi
        return cls._create(low, high, types)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return len(self._low)

    @property
    def low(self) -> Tuple[int, ...]:
        return self._low

    @property
    def high(self) -> Tuple[int, ...]:
        return self._high

    def get_low(self, dim: int) -> int:
        return self._low[dim]

    def get_high(self, dim: int) -> int:
        return self._high[dim]

    def get_size(self, dim: int) -> int:
        return self._high[dim] - self._low[dim] + 1

    @property
    def sizes(self) -> Tuple[int, ...]:
        return tuple(h - l + 1 for l, h in zip(self._low, self._high))

    @property
    def axis_types(self) -> AxisTypes:
        return self._types

    def get_axis_type(self, dim: int) -> Optional[DimensionNameType]:
        return None if self._types is None else self._types[dim]

    @property
    def starts_at_zero(self) -> bool:
        return all(v == 0 for v in self._low)

    def point_of_interest(
        self, anchor: PixelInCell = PixelInCell.CELL_CENTER
    ) -> np.ndarray:
        """Grid coordinates of the extent median for the given anchor."""
        offset = 1.0 if anchor is PixelInCell.CELL_CORNER else 0.0
        return np.array([(l + h + offset) * 0.5
                         for l, h in zip(self._low, self._high)])

    def to_index_envelope(self) -> GeneralEnvelope:
        """Cell corners as ``[low, high + 1)`` in corner convention."""
        return GeneralEnvelope(self._low, [h + 1 for h in self._high])

    def to_envelope(
        self, corner_to_crs: MathTransform, crs: Any = None
    ) -> GeneralEnvelope:
        """Envelope covered by all cells, through a corner-anchored transform."""
        return transform_envelope(corner_to_crs, self.to_index_envelope(), crs)

    def contains(self, *indices: int) -> bool:
        """Whether the cell at *indices* is inside this extent."""
        self._check_length(indices)
        return all(l <= v <= h for l, v, h in zip(self._low, indices, self._high))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _with(self, low, high, types: AxisTypes = None) -> 'GridExtent':
        low = tuple(low)
        high = tuple(high)
        types = self._types if types is None else types
        if low == self._low and high == self._high and types == self._types:
            return self
        return GridExtent._create(low, high, types)

    def _check_length(self, values: Sequence) -> None:
        if len(values) != self.dimension:
            raise MismatchedDimensionError(
                f"Expected {self.dimension} values, got {len(values)}"
            )

    def _check_other(self, other: 'GridExtent') -> None:
        if other.dimension != self.dimension:
            raise MismatchedDimensionError(
                f"Extent has {other.dimension} dimensions, expected "
                f"{self.dimension}"
            )

    def intersects(self, other: 'GridExtent') -> bool:
        self._check_other(other)
        return all(max(a, b) <= min(c, d) for a, b, c, d in
                   zip(self._low, other._low, self._high, other._high))

    def intersect(self, other: 'GridExtent') -> 'GridExtent':
        """Cells common to both extents.

        Raises
        ------
        DisjointExtentError
            If the extents do not intersect.
        """
        self._check_other(other)
        low = [max(a, b) for a, b in zip(self._low, other._low)]
        high = [min(a, b) for a, b in zip(self._high, other._high)]
        for i, (lo, hi) in enumerate(zip(low, high)):
            if lo > hi:
                raise DisjointExtentError(
                    f"Extents do not intersect in grid dimension {i}"
                )
        return self._with(low, high)

    def union(self, other: 'GridExtent') -> 'GridExtent':
        """Smallest extent containing both extents."""
        self._check_other(other)
        return self._with([min(a, b) for a, b in zip(self._low, other._low)],
                          [max(a, b) for a, b in zip(self._high, other._high)])

    def expand(self, *margins: int) -> 'GridExtent':
        """Grow (or shrink, if negative) each side by ``margins[i]`` cells.

        Missing trailing margins are zero.
        """
        if len(margins) > self.dimension:
            raise MismatchedDimensionError(
                f"Got {len(margins)} margins for {self.dimension} dimensions"
            )
        m = list(margins) + [0] * (self.dimension - len(margins))
        return self.expand_asymmetric(m, m)

    def expand_asymmetric(
        self, lower: Sequence[int], upper: Sequence[int]
    ) -> 'GridExtent':
        """Subtract *lower* from the low indices and add *upper* to the highs."""
        self._check_length(lower)
        self._check_length(upper)
        low = [l - v for l, v in zip(self._low, lower)]
        high = [h + v for h, v in zip(self._high, upper)]
        for i, (lo, hi) in enumerate(zip(low, high)):
            if lo > hi:
                raise ValidationError(
                    f"Margin ({lower[i]}, {upper[i]}) empties grid "
                    f"dimension {i}"
                )
        return self._with(low, high)

    def subsample(self, *periods: int) -> 'GridExtent':
        """Extent of the grid keeping one cell out of ``periods[i]``.

        The low index is divided toward zero and the number of cells is
        rounded down, keeping at least one cell.
        """
        self._check_length(periods)
        low = list(self._low)
        high = list(self._high)
        for i, s in enumerate(periods):
            if s <= 0:
                raise ValidationError(
                    f"Subsampling must be positive, got {s} in dimension {i}"
                )
            if s > 1:
                size = high[i] - low[i] + 1
                r = size // s
                if r * s == size:
                    r -= 1
                low[i] = _div_toward_zero(low[i], s)
                high[i] = low[i] + r
        return self._with(low, high)

    def translate(self, *offsets: int) -> 'GridExtent':
        """Shift every index by ``offsets[i]``; missing offsets are zero."""
        if len(offsets) > self.dimension:
            raise MismatchedDimensionError(
                f"Got {len(offsets)} offsets for {self.dimension} dimensions"
            )
        t = list(offsets) + [0] * (self.dimension - len(offsets))
        return self._with([l + v for l, v in zip(self._low, t)],
                          [h + v for h, v in zip(self._high, t)])

    def resize(self, *sizes: int) -> 'GridExtent':
        """Keep the low indices and set the number of cells."""
        self._check_length(sizes)
        if any(s <= 0 for s in sizes):
            raise ValidationError(f"Sizes must be positive, got {sizes}")
        return self._with(self._low,
                          [l + s - 1 for l, s in zip(self._low, sizes)])

    def with_range(self, dim: int, low: int, high: int) -> 'GridExtent':
        """Replace the range of one dimension."""
        if low > high:
            raise ValidationError(f"Illegal grid range [{low} .. {high}]")
        lows = list(self._low)
        highs = list(self._high)
        lows[dim] = int(low)
        highs[dim] = int(high)
        return self._with(lows, highs)

    def slice(
        self,
        point: Sequence[float],
        modified_dimensions: Optional[Sequence[int]] = None,
    ) -> 'GridExtent':
        """Collapse dimensions to the single cell containing *point*.

        Parameters
        ----------
        point : sequence of float
            Cell coordinates in center convention. NaN coordinates leave
            their dimension unchanged.
        modified_dimensions : sequence of int, optional
            Grid dimension of each coordinate in *point*. Defaults to
            ``0 .. len(point) - 1``.

        Raises
        ------
        PointOutsideCoverageError
            If a coordinate falls outside the extent.
        """
        dims = (list(modified_dimensions) if modified_dimensions is not None
                else list(range(len(point))))
        if len(dims) != len(point):
            raise MismatchedDimensionError(
                f"Got {len(point)} coordinates for {len(dims)} dimensions"
            )
        low = list(self._low)
        high = list(self._high)
        for d, value in zip(dims, point):
            if math.isnan(value):
                continue
            cell = round_half_up(value)
            if not low[d] <= cell <= high[d]:
                raise PointOutsideCoverageError(
                    f"Coordinate {value} is outside the grid range "
                    f"[{low[d]} .. {high[d]}] of dimension {d}"
                )
            low[d] = high[d] = cell
        return self._with(low, high)

    def slice_by_ratio(
        self, ratio: float, dimensions_to_keep: Sequence[int] = ()
    ) -> 'GridExtent':
        """Collapse all dimensions except the kept ones at a relative position.

        Parameters
        ----------
        ratio : float
            Position between 0 (low) and 1 (high) of the retained cell.
        dimensions_to_keep : sequence of int
            Dimensions left unchanged.
        """
        if not 0.0 <= ratio <= 1.0:
            raise ValidationError(f"Ratio must be in [0, 1], got {ratio}")
        low = list(self._low)
        high = list(self._high)
        for d in range(self.dimension):
            if d in dimensions_to_keep:
                continue
            cell = min(low[d] + math.floor(self.get_size(d) * ratio), high[d])
            low[d] = high[d] = cell
        return self._with(low, high)

    def reduce_dimension(self, *dims: int) -> 'GridExtent':
        """Extent keeping only the given dimensions, in increasing order."""
        keep = sorted(set(dims))
        if not keep or keep[0] < 0 or keep[-1] >= self.dimension:
            raise ValidationError(
                f"Dimensions {list(dims)} out of range [0, {self.dimension})"
            )
        types = (None if self._types is None
                 else self._validate_types([self._types[d] for d in keep],
                                           len(keep)))
        return GridExtent._create([self._low[d] for d in keep],
                                  [self._high[d] for d in keep], types)

    def insert_dimension(
        self,
        offset: int,
        axis_type: Optional[DimensionNameType],
        low: int,
        high: int,
        high_inclusive: bool = True,
    ) -> 'GridExtent':
        """Extent with a new dimension inserted at *offset*."""
        if not 0 <= offset <= self.dimension:
            raise ValidationError(
                f"Offset {offset} out of range [0, {self.dimension}]"
            )
        if not high_inclusive:
            high -= 1
        if low > high:
            raise ValidationError(f"Illegal grid range [{low} .. {high}]")
        types = None
        if self._types is not None or axis_type is not None:
            current = list(self._types or [None] * self.dimension)
            current.insert(offset, axis_type)
            types = self._validate_types(current, self.dimension + 1)
        lows = list(self._low)
        highs = list(self._high)
        lows.insert(offset, int(low))
        highs.insert(offset, int(high))
        return GridExtent._create(lows, highs, types)

    def equals(self, other: 'GridExtent', ignore_axis_types: bool = False) -> bool:
        if not isinstance(other, GridExtent):
            return False
        if self._low != other._low or self._high != other._high:
            return False
        return ignore_axis_types or self._types == other._types

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridExtent):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash((self._low, self._high, self._types))

    def __repr__(self) -> str:
        parts = []
        for i, (lo, hi) in enumerate(zip(self._low, self._high)):
            t = self.get_axis_type(i)
            label = f"{t.value}: " if t is not None else ''
            parts.append(f"{label}[{lo} .. {hi}]")
        return f"GridExtent({', '.join(parts)})"
