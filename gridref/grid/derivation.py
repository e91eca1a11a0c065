# -*- coding: utf-8 -*-
"""
Grid Derivation - Build a grid geometry from a base grid and a request.

``GridDerivation`` reads an immutable base ``GridGeometry`` and
accumulates a request: a sub-region given as an envelope, another grid or
an extent, optional resolutions, slice positions and margins. A terminal
``build()`` (or ``get_intersection()``) consumes the request exactly once.

Sub-regions are converted to the base CRS, shifted by whole periods on
wraparound axes so they overlap the base envelope, converted to
fractional cell indices, rounded and intersected with the base extent.
Requested resolutions become integer subsampling factors, with the
translation adjusted so that the subsampled grid starts at the low corner
of the intersected region.

Dependencies
------------
numpy
pyproj

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
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    DerivationStateError,
    DisjointExtentError,
    MismatchedDimensionError,
    ValidationError,
)
from gridref.grid.extent import GridExtent
from gridref.grid.geometry import GridGeometry, crs_to_grid
from gridref.referencing import matrix as matrices
from gridref.referencing.crs import (
    as_crs,
    component_dimensions,
    equals_ignore_metadata,
    find_operation,
)
from gridref.referencing.envelope import GeneralEnvelope, transform_envelope
from gridref.referencing.transforms import (
    MathTransform,
    concatenate,
    get_matrix,
    linear,
    separate_target,
    translation,
)
from gridref.referencing.wraparound import shift_coordinate
from gridref.vocabulary import GridClippingMode, GridRoundingMode, PixelInCell

logger = logging.getLogger(__name__)


@dataclass
class _Request:
    """Pending derivation parameters, indexed by grid dimension."""

    rounding: GridRoundingMode = GridRoundingMode.NEAREST
    clipping: GridClippingMode = GridClippingMode.STRICT
    margin: Optional[Tuple[int, ...]] = None
    chunk_size: Optional[Tuple[int, ...]] = None
    maximum_subsampling: Optional[Tuple[int, ...]] = None

    def select(self, values: Optional[Tuple[int, ...]],
               dims: Sequence[int]) -> Optional[List[int]]:
        if values is None:
            return None
        return [values[d] if d < len(values) else values[-1] for d in dims]


def _floor_factor(value: float) -> int:
    """Integer subsampling for a fractional cell ratio, at least 1."""
    if not math.isfinite(value):
        return 1
    return max(1, math.floor(value + matrices.COMPARISON_THRESHOLD))


class GridDerivation:
    """Single-use builder deriving a grid geometry from *base*.

    Configuration calls (``rounding``, ``clipping``, ``margin``,
    ``chunk_size``, ``maximum_subsampling``) come first, then at most one
    ``subgrid`` call, then any number of slices, then ``build()`` or
    ``get_intersection()``.

    Parameters
    ----------
    base : GridGeometry
        Grid the request is expressed against.

    Examples
    --------
    >>> derived = (grid.derive()
    ...            .rounding(GridRoundingMode.ENCLOSING)
    ...            .subgrid(area_of_interest, 0.5, 0.5)
    ...            .build())
    """

    def __init__(self, base: GridGeometry) -> None:
        self._base = base
        self._request = _Request()
        self._started = False
        self._subgrid_set = False
        self._consumed = False
        # Result state, in base grid units unless noted
        self._base_extent: Optional[GridExtent] = base._extent
        self._subsampling: Optional[List[int]] = None
        self._scaled_extent: Optional[GridExtent] = None
        self._to_base: Optional[MathTransform] = None
        self._sliced: set = set()
        self._envelope: Optional[GeneralEnvelope] = None

    # ------------------------------------------------------------------
    # State checks
    # ------------------------------------------------------------------

    def _check_alive(self) -> None:
        if self._consumed:
            raise DerivationStateError(
                "This derivation has already been built"
            )

    def _check_configurable(self, name: str) -> None:
        self._check_alive()
        if self._started:
            raise DerivationStateError(
                f"{name}() must be called before subgrid() or slice()"
            )

    def _check_subgrid(self) -> None:
        self._check_alive()
        if self._subgrid_set:
            raise DerivationStateError("subgrid() can be called only once")
        if self._started:
            raise DerivationStateError(
                "subgrid() must be called before slice()"
            )
        self._started = True
        self._subgrid_set = True

    def _grid_values(self, name: str, values: Sequence[int],
                     minimum: int) -> Tuple[int, ...]:
        values = tuple(int(v) for v in values)
        if not values or len(values) > self._base.dimension:
            raise MismatchedDimensionError(
                f"{name} needs 1 to {self._base.dimension} values, got "
                f"{len(values)}"
            )
        for v in values:
            if v < minimum:
                raise ValidationError(
                    f"{name} values must be >= {minimum}, got {values}"
                )
        return values

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def rounding(self, mode: GridRoundingMode) -> 'GridDerivation':
        """How fractional cell indices are rounded to integers."""
        self._check_configurable('rounding')
        self._request.rounding = GridRoundingMode(mode)
        return self

    def clipping(self, mode: GridClippingMode) -> 'GridDerivation':
        """How the derived extent is clipped to the base extent."""
        self._check_configurable('clipping')
        self._request.clipping = GridClippingMode(mode)
        return self

    def margin(self, *cells: int) -> 'GridDerivation':
        """Cells added on both sides of each grid dimension.

        With a subgrid request the margin is added before clipping to the
        base extent. Without one the base extent is expanded and the
        grid-to-CRS transform is kept. The last value repeats for
        remaining dimensions.
        """
        self._check_configurable('margin')
        self._request.margin = self._grid_values('margin', cells, 0)
        return self

    def chunk_size(self, *sizes: int) -> 'GridDerivation':
        """Snap derived extent bounds to multiples of *sizes* cells."""
        self._check_configurable('chunk_size')
        self._request.chunk_size = self._grid_values('chunk_size', sizes, 1)
        return self

    def maximum_subsampling(self, *limits: int) -> 'GridDerivation':
        """Upper bounds on the subsampling computed from resolutions."""
        self._check_configurable('maximum_subsampling')
        self._request.maximum_subsampling = self._grid_values(
            'maximum_subsampling', limits, 1)
        return self

    # ------------------------------------------------------------------
    # Sub-region requests
    # ------------------------------------------------------------------

    def subgrid(self, area_of_interest: Any, *resolution: float) -> 'GridDerivation':
        """Restrict the derived grid to a region.

        Parameters
        ----------
        area_of_interest : GeneralEnvelope, GridGeometry or GridExtent
            Region to keep. Envelopes may use another CRS, or address only
            some components of a compound CRS. Grid geometries also
            define the resolution when their extent and transform are
            known. Extents are in base grid units.
        *resolution : float
            Requested cell size in the units of *area_of_interest*. For an
            extent, integer subsampling factors instead.

        Returns
        -------
        GridDerivation
            ``self``.

        Raises
        ------
        DisjointExtentError
            If the region does not overlap the base grid.
        MismatchedDimensionError
            If the region has more dimensions than the base grid.
        DerivationStateError
            If a sub-region was already requested.
        """
        self._check_subgrid()
        if isinstance(area_of_interest, GridGeometry):
            self._subgrid_grid(area_of_interest)
        elif isinstance(area_of_interest, GridExtent):
            self._subgrid_extent(area_of_interest, resolution)
        elif isinstance(area_of_interest, GeneralEnvelope):
            self._subgrid_envelope(area_of_interest, resolution)
        else:
            raise TypeError(
                f"Cannot derive a subgrid from "
                f"{type(area_of_interest).__name__}"
            )
        return self

    def _target_components(self, crs, request_dimension: int):
        """Base CRS dimensions addressed by a request, and their CRS."""
        base = self._base
        return component_dimensions(base._crs, base.target_dimension,
                                    crs, request_dimension)

    def _domain(self, dims: Sequence[int], crs) -> Optional[GeneralEnvelope]:
        env = self._base._envelope
        if env is None or env.is_all_nan:
            return None
        if len(dims) == env.dimension:
            return env
        return env.sub_envelope(dims, crs)

    def _subgrid_envelope(
        self, aoi: GeneralEnvelope, resolution: Sequence[float]
    ) -> None:
        base = self._base
        logger.debug("Deriving subgrid of %r for %r", base, aoi)
        dims, sub_crs = self._target_components(aoi.crs, aoi.dimension)
        area = aoi
        op = None
        if (aoi.crs is not None and sub_crs is not None
                and not equals_ignore_metadata(aoi.crs, sub_crs)):
            op = find_operation(aoi.crs, sub_crs)
            area = transform_envelope(op, aoi, sub_crs)
        elif aoi.crs is None and sub_crs is not None:
            area = aoi.simplify().with_crs(sub_crs)
        domain = self._domain(dims, sub_crs)
        if domain is not None:
            area = area.shift_into(domain)
        if base._extent is None:
            self._intersect_envelopes(area, dims, domain)
            return
        corner = base.get_grid_to_crs(PixelInCell.CELL_CORNER)
        if len(dims) == corner.target_dimensions:
            to_area, grid_dims = corner, tuple(range(base.dimension))
        else:
            to_area, grid_dims = separate_target(corner, dims)
        indices = transform_envelope(crs_to_grid(to_area, area), area)
        extent = self._clip(indices, grid_dims)
        if resolution:
            grid_to_request = to_area
            if op is not None:
                grid_to_request = concatenate(to_area, op.inverse())
            self._subsample_from_resolution(extent, grid_to_request,
                                            grid_dims, resolution)
        else:
            self._set_extent(extent)

    def _intersect_envelopes(
        self, area: GeneralEnvelope, dims: Sequence[int],
        domain: Optional[GeneralEnvelope],
    ) -> None:
        """Envelope-only derivation, without grid index arithmetic."""
        if domain is None:
            self._envelope = area
            return
        result = domain.intersect(area.with_crs(domain.crs))
        if np.any(np.isnan(result.lower)):
            raise DisjointExtentError(
                f"Area of interest {area!r} does not intersect {domain!r}"
            )
        if len(dims) < self._base._envelope.dimension:
            lower = np.array(self._base._envelope.lower)
            upper = np.array(self._base._envelope.upper)
            lower[list(dims)] = result.lower
            upper[list(dims)] = result.upper
            result = GeneralEnvelope._unchecked(lower, upper,
                                                self._base._crs)
        self._envelope = result

    def _subgrid_grid(self, other: GridGeometry) -> None:
        base = self._base
        complete = (other._extent is not None and other._grid_to_crs is not None
                    and base._extent is not None
                    and base._grid_to_crs is not None)
        if not complete:
            resolution = ()
            if other._resolution is not None and base._extent is not None:
                resolution = tuple(other._resolution)
            self._subgrid_envelope(other.envelope, resolution)
            return
        logger.debug("Deriving subgrid of %r for grid %r", base, other)
        dims, sub_crs = self._target_components(other._crs,
                                                other.target_dimension)
        steps = [other.get_grid_to_crs(PixelInCell.CELL_CORNER)]
        if (other._crs is not None and sub_crs is not None
                and not equals_ignore_metadata(other._crs, sub_crs)):
            steps.append(find_operation(other._crs, sub_crs))
        other_to_crs = concatenate(*steps)
        domain = self._domain(dims, sub_crs)
        if domain is not None:
            area = transform_envelope(other_to_crs,
                                      other._extent.to_index_envelope(),
                                      sub_crs)
            shifted = area.shift_into(domain)
            delta = shifted.lower - area.lower
            delta[~np.isfinite(delta)] = 0.0
            if np.any(delta) and np.allclose(delta, shifted.upper - area.upper):
                logger.debug("Shifting grid of interest by %s periods", delta)
                steps.append(translation(delta))
        corner = base.get_grid_to_crs(PixelInCell.CELL_CORNER)
        if len(dims) == corner.target_dimensions:
            to_area, grid_dims = corner, tuple(range(base.dimension))
        else:
            to_area, grid_dims = separate_target(corner, dims)
        steps.append(to_area.inverse())
        mapping = concatenate(*steps)
        indices = transform_envelope(mapping,
                                     other._extent.to_index_envelope())
        extent = self._clip(indices, grid_dims)
        m = get_matrix(mapping)
        if m is not None:
            jacobian = m[:-1, :-1]
        else:
            jacobian = mapping.derivative(
                other._extent.point_of_interest(PixelInCell.CELL_CORNER))
        factors = np.sqrt(np.sum(np.square(jacobian), axis=1))
        subsampling = [1] * base.dimension
        for k, d in enumerate(grid_dims):
            subsampling[d] = _floor_factor(factors[k])
        self._apply_subsampling(extent, subsampling)

    def _subgrid_extent(
        self, aoi: GridExtent, subsampling: Sequence[float]
    ) -> None:
        base_extent = self._base.extent
        if aoi.dimension != base_extent.dimension:
            raise MismatchedDimensionError(
                f"Extent has {aoi.dimension} dimensions, expected "
                f"{base_extent.dimension}"
            )
        extent = self._clip(aoi.to_index_envelope(),
                            tuple(range(aoi.dimension)))
        if subsampling:
            if len(subsampling) > aoi.dimension:
                raise MismatchedDimensionError(
                    f"Got {len(subsampling)} subsampling factors for "
                    f"{aoi.dimension} dimensions"
                )
            factors = [int(s) for s in subsampling]
            factors += [1] * (aoi.dimension - len(factors))
            self._apply_subsampling(extent, factors)
        else:
            self._set_extent(extent)

    def _clip(self, indices: GeneralEnvelope,
              grid_dims: Sequence[int]) -> GridExtent:
        """Round fractional *indices* and clip them to the base extent."""
        request = self._request
        extent = GridExtent.from_index_envelope(
            indices,
            rounding=request.rounding,
            clipping=request.clipping,
            margin=request.select(request.margin, grid_dims),
            chunk_size=request.select(request.chunk_size, grid_dims),
            enclosing=self._base.extent,
            modified_dimensions=grid_dims,
        )
        logger.debug("Fractional indices %r rounded to %r", indices, extent)
        return extent

    def _subsample_from_resolution(
        self,
        extent: GridExtent,
        grid_to_request: MathTransform,
        grid_dims: Sequence[int],
        resolution: Sequence[float],
    ) -> None:
        """Subsampling such that cells are about *resolution* wide."""
        target_dim = grid_to_request.target_dimensions
        if len(resolution) > target_dim:
            raise MismatchedDimensionError(
                f"Got {len(resolution)} resolutions for {target_dim} "
                f"dimensions"
            )
        res = np.zeros(target_dim)
        res[:len(resolution)] = np.abs(np.asarray(resolution, dtype=np.float64))
        point = extent.point_of_interest(PixelInCell.CELL_CORNER)
        jacobian = grid_to_request.derivative(point[list(grid_dims)])
        cells = np.abs(np.linalg.pinv(jacobian)) @ res
        subsampling = [1] * self._base.dimension
        for k, d in enumerate(grid_dims):
            subsampling[d] = _floor_factor(cells[k])
        self._apply_subsampling(extent, subsampling)

    # ------------------------------------------------------------------
    # Subsampling
    # ------------------------------------------------------------------

    def _set_extent(self, extent: GridExtent) -> None:
        self._base_extent = extent
        if self._subsampling is None:
            self._scaled_extent = extent
            self._to_base = None
        else:
            self._apply_subsampling(extent, self._subsampling)

    def _apply_subsampling(self, extent: GridExtent,
                           subsampling: Sequence[int]) -> None:
        """Subsample *extent* and record the transform back to base cells."""
        limits = self._request.maximum_subsampling
        factors = list(subsampling)
        if limits is not None:
            limits = self._request.select(limits, range(len(factors)))
            factors = [min(s, m) for s, m in zip(factors, limits)]
        for d in self._sliced:
            factors[d] = 1
        self._base_extent = extent
        if all(s == 1 for s in factors):
            self._subsampling = None
            self._scaled_extent = extent
            self._to_base = None
            return
        scaled = extent.subsample(*factors)
        n = extent.dimension
        m = matrices.create_identity(n + 1)
        for d, s in enumerate(factors):
            m[d, d] = s
            m[d, n] = extent.get_low(d) - scaled.get_low(d) * s
        logger.debug("Subsampling %s maps %r onto %r", factors, scaled, extent)
        self._subsampling = factors
        self._scaled_extent = scaled
        self._to_base = linear(m)

    # ------------------------------------------------------------------
    # Slices
    # ------------------------------------------------------------------

    def slice(self, position: Sequence[float], crs: Any = None) -> 'GridDerivation':
        """Collapse grid dimensions to the cells containing *position*.

        Parameters
        ----------
        position : sequence of float
            CRS coordinates. NaN coordinates leave their dimensions
            unchanged. A position with fewer coordinates than the CRS
            addresses the matching component of a compound CRS.
        crs : pyproj.CRS or str, optional
            CRS of *position*, converted to the base CRS when it differs.

        Raises
        ------
        PointOutsideCoverageError
            If the position falls outside the grid.
        """
        self._check_alive()
        self._started = True
        base = self._base
        crs = as_crs(crs)
        point = np.asarray(position, dtype=np.float64).ravel()
        dims, sub_crs = self._target_components(crs, point.size)
        if (crs is not None and sub_crs is not None
                and not equals_ignore_metadata(crs, sub_crs)):
            point = find_operation(crs, sub_crs).transform(point)
        known = [i for i in range(point.size) if not math.isnan(point[i])]
        if not known:
            return self
        targets = [dims[i] for i in known]
        values = point[known]
        env = base._envelope
        if env is not None and not env.is_all_nan:
            for k, d in enumerate(targets):
                period = env.periods.get(d)
                if period is not None:
                    values[k] = shift_coordinate(values[k], period,
                                                 env.lower[d], env.upper[d])
        corner = base.get_grid_to_crs(PixelInCell.CELL_CORNER)
        to_point, grid_dims = separate_target(corner, targets)
        cells = to_point.inverse().transform(values)
        extent = self._base_extent if self._base_extent is not None \
            else base.extent
        centers = []
        sliced_dims = []
        for value, d in zip(np.atleast_1d(cells), grid_dims):
            if math.isnan(value):
                continue
            cell = math.floor(value + matrices.COMPARISON_THRESHOLD)
            upper_corner = extent.get_high(d) + 1
            if (cell == upper_corner
                    and value - upper_corner <= matrices.COMPARISON_THRESHOLD):
                # The upper corner belongs to the last cell
                cell -= 1
            centers.append(float(cell))
            sliced_dims.append(d)
        grid_dims = sliced_dims
        logger.debug("Slicing grid dimensions %s at cells %s",
                     grid_dims, centers)
        self._sliced.update(grid_dims)
        self._slice_extent(extent.slice(centers, grid_dims))
        return self

    def slice_by_ratio(
        self, ratio: float, *dimensions_to_keep: int
    ) -> 'GridDerivation':
        """Collapse all dimensions except the kept ones at a relative position."""
        self._check_alive()
        self._started = True
        extent = self._base_extent if self._base_extent is not None \
            else self._base.extent
        sliced = extent.slice_by_ratio(ratio, dimensions_to_keep)
        self._sliced.update(d for d in range(extent.dimension)
                            if d not in dimensions_to_keep)
        self._slice_extent(sliced)
        return self

    def _slice_extent(self, extent: GridExtent) -> None:
        if self._subsampling is None:
            self._set_extent(extent)
        else:
            self._apply_subsampling(extent, self._subsampling)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def get_subsampling(self) -> Tuple[int, ...]:
        """Subsampling factors of the derived grid, 1 where none applies."""
        if self._subsampling is None:
            return (1,) * self._base.dimension
        return tuple(self._subsampling)

    def get_subsampling_offsets(self) -> Tuple[int, ...]:
        """Base cell index of each derived grid origin, minus the scaled low."""
        if self._to_base is None:
            return (0,) * self._base.dimension
        m = self._to_base.matrix
        return tuple(int(v) for v in m[:-1, -1])

    def _margin_only_extent(self) -> Optional[GridExtent]:
        extent = self._scaled_extent
        if self._subgrid_set or self._request.margin is None:
            return extent
        if extent is None:
            extent = self._base._extent
        if extent is None:
            return None
        margin = self._request.select(self._request.margin,
                                      range(extent.dimension))
        margin = [0 if d in self._sliced else v
                  for d, v in enumerate(margin)]
        return extent.expand(*margin)

    def get_intersection(self) -> GridExtent:
        """Derived extent in base grid units, without subsampling.

        Raises
        ------
        IncompleteGridGeometryError
            If the base grid has no extent.
        """
        self._check_alive()
        self._consumed = True
        if self._subgrid_set:
            return self._base_extent
        extent = self._margin_only_extent()
        return extent if extent is not None else self._base.extent

    def build(self) -> GridGeometry:
        """Derived grid geometry.

        Returns the base geometry itself when the request changes nothing.
        """
        self._check_alive()
        self._consumed = True
        base = self._base
        if self._envelope is not None:
            return GridGeometry(envelope=self._envelope)
        extent = self._margin_only_extent()
        if extent is None:
            return base
        if self._to_base is None and extent == base._extent:
            return base
        return GridGeometry._derived(base, extent, self._to_base)

    def __repr__(self) -> str:
        return f"GridDerivation(base={self._base!r})"
