# -*- coding: utf-8 -*-
"""
Grid Geometry - Extent, grid-to-CRS transform and envelope of a raster.

A ``GridGeometry`` ties together the integer cell extent of a grid, the
transform mapping grid coordinates to CRS coordinates, the CRS itself and
the resulting envelope. Any of these may be missing, but at least the
extent or the envelope is present. Instances are immutable and can be
shared freely; derived geometries are built with ``derive()``.

Grid-to-CRS transforms are stored twice, anchored on cell centers and on
cell corners. The two differ by a translation of half a cell in every grid
dimension.

Dependencies
------------
numpy
pyproj
rasterio (optional, for ``from_affine``, ``from_reader`` and
``to_affine``)

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
from typing import Any, FrozenSet, Optional, Sequence, Tuple, TYPE_CHECKING

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    IncompleteGridGeometryError,
    MismatchedDimensionError,
    NoninvertibleTransformError,
    TransformError,
    ValidationError,
)
from gridref.grid.extent import GridExtent
from gridref.referencing import matrix as matrices
from gridref.referencing._backend import is_affine as _is_rasterio_affine
from gridref.referencing.crs import (
    as_crs,
    equals_ignore_metadata,
    find_operation,
)
from gridref.referencing.envelope import GeneralEnvelope, transform_envelope
from gridref.referencing.transforms import (
    AffineTransform2D,
    ConcatenatedTransform,
    LinearTransform,
    MathTransform,
    PassThroughTransform,
    concatenate,
    get_matrix,
    linear,
    separate,
    tangent,
    translation,
)
from gridref.vocabulary import (
    GridComponent,
    GridRoundingMode,
    PixelInCell,
)

if TYPE_CHECKING:
    from rasterio.transform import Affine
    from gridref.grid.derivation import GridDerivation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_transform(value: Any) -> Optional[MathTransform]:
    if value is None or isinstance(value, MathTransform):
        return value
    if _is_rasterio_affine(value):
        return AffineTransform2D.from_affine(value)
    return linear(value)


def translate_anchor(
    transform: Optional[MathTransform],
    source: PixelInCell,
    target: PixelInCell,
) -> Optional[MathTransform]:
    """Re-anchor a grid-to-CRS transform from *source* to *target* cells.

    A cell-corner transform evaluated at ``g`` equals the cell-center
    transform evaluated at ``g - 0.5``.
    """
    if transform is None or source is target:
        return transform
    shift = target.offset - source.offset
    return concatenate(
        translation([shift] * transform.source_dimensions), transform
    )


def _propagate_non_linear(step: MathTransform, dims: FrozenSet[int]) -> FrozenSet[int]:
    """Target dimensions of *step* influenced by non-linear *dims* or by *step*."""
    if isinstance(step, LinearTransform):
        m = step._matrix
        if not step.is_affine:
            return frozenset(range(step.target_dimensions))
        return frozenset(i for i in range(step.target_dimensions)
                         if any(m[i, j] != 0 for j in dims))
    if isinstance(step, PassThroughTransform):
        f = step.first
        sub = step.sub_transform
        s, t = sub.source_dimensions, sub.target_dimensions
        inner = {d - f for d in dims if f <= d < f + s}
        if inner:
            block = frozenset(range(t))
        else:
            block = non_linear_targets(sub)
        result = {d for d in dims if d < f}
        result.update(f + k for k in block)
        result.update(d - s + t for d in dims if d >= f + s)
        return frozenset(result)
    return frozenset(range(step.target_dimensions))


def non_linear_targets(transform: Optional[MathTransform]) -> FrozenSet[int]:
    """Target dimensions where *transform* is not linear."""
    if transform is None or isinstance(transform, LinearTransform):
        return frozenset()
    if isinstance(transform, ConcatenatedTransform):
        dims: FrozenSet[int] = frozenset()
        for step in transform.steps:
            dims = _propagate_non_linear(step, dims)
        return dims
    return _propagate_non_linear(transform, frozenset())


def _resolution(
    grid_to_crs: Optional[MathTransform], extent: Optional[GridExtent]
) -> Optional[np.ndarray]:
    """Magnitude of each row of the grid-to-CRS Jacobian."""
    if grid_to_crs is None:
        return None
    m = get_matrix(grid_to_crs)
    if m is not None:
        jacobian = m[:-1, :-1]
    elif extent is None:
        return None
    else:
        try:
            jacobian = grid_to_crs.derivative(
                extent.point_of_interest(PixelInCell.CELL_CENTER))
        except TransformError as exc:
            logger.warning("Cannot estimate grid resolution: %s", exc)
            return None
    res = np.sqrt(np.sum(np.square(jacobian), axis=1))
    res.setflags(write=False)
    return res


def crs_to_grid(
    corner_to_crs: MathTransform, envelope: GeneralEnvelope
) -> MathTransform:
    """Inverse of *corner_to_crs*, or a tangent approximation near *envelope*."""
    try:
        return corner_to_crs.inverse()
    except NoninvertibleTransformError as exc:
        logger.warning("Using a tangent approximation of the inverse "
                       "grid-to-CRS transform: %s", exc)
    # Newton-style refinement of the grid point mapping to the median
    target = envelope.simplify().medians
    point = np.zeros(corner_to_crs.source_dimensions)
    approx = tangent(corner_to_crs, point)
    for _ in range(2):
        point = approx.inverse().transform(target)
        approx = tangent(corner_to_crs, point)
    return approx.inverse()


# ---------------------------------------------------------------------------
# Grid geometry
# ---------------------------------------------------------------------------

class GridGeometry:
    """Valid cell extent and world mapping of a grid.

    Parameters
    ----------
    extent : GridExtent, optional
        Valid cell indices.
    anchor : PixelInCell, default=PixelInCell.CELL_CENTER
        Cell point that integer grid coordinates in *grid_to_crs* map to.
    grid_to_crs : MathTransform, array_like or rasterio Affine, optional
        Transform from grid coordinates to CRS coordinates. Matrices and
        ``rasterio.transform.Affine`` objects are converted with
        ``transforms.linear``.
    crs : pyproj.CRS or str, optional
        Coordinate reference system of the CRS coordinates.
    envelope : GeneralEnvelope, optional
        Envelope to take as given. When omitted it is computed from the
        extent corners. With neither extent nor transform the geometry is
        envelope-only.

    Raises
    ------
    ValidationError
        If neither an extent nor an envelope can be determined.
    MismatchedDimensionError
        If the extent, transform, CRS and envelope dimensions disagree.

    Examples
    --------
    >>> extent = GridExtent.from_size(200, 180)
    >>> grid = GridGeometry(extent, PixelInCell.CELL_CORNER,
    ...                     [[1, 0, 80], [0, -1, 90], [0, 0, 1]], 'OGC:CRS84')
    >>> grid.envelope.to_tuple()
    ((80.0, 280.0), (-90.0, 90.0))
    """

    def __init__(
        self,
        extent: Optional[GridExtent] = None,
        anchor: PixelInCell = PixelInCell.CELL_CENTER,
        grid_to_crs: Any = None,
        crs: Any = None,
        envelope: Optional[GeneralEnvelope] = None,
    ) -> None:
        grid_to_crs = _as_transform(grid_to_crs)
        crs = as_crs(crs)
        if crs is None and envelope is not None:
            crs = envelope.crs
        if grid_to_crs is not None:
            if (extent is not None
                    and extent.dimension != grid_to_crs.source_dimensions):
                raise MismatchedDimensionError(
                    f"Extent has {extent.dimension} dimensions but "
                    f"grid_to_crs expects {grid_to_crs.source_dimensions}"
                )
            target_dim = grid_to_crs.target_dimensions
        elif envelope is not None:
            target_dim = envelope.dimension
        elif crs is not None:
            target_dim = len(crs.axis_info)
        else:
            target_dim = None
        if crs is not None and target_dim != len(crs.axis_info):
            raise MismatchedDimensionError(
                f"CRS {crs.name} has {len(crs.axis_info)} axes, expected "
                f"{target_dim}"
            )
        if envelope is not None and envelope.dimension != target_dim:
            raise MismatchedDimensionError(
                f"Envelope has {envelope.dimension} dimensions, expected "
                f"{target_dim}"
            )
        center = translate_anchor(grid_to_crs, anchor, PixelInCell.CELL_CENTER)
        corner = translate_anchor(grid_to_crs, anchor, PixelInCell.CELL_CORNER)
        if envelope is not None:
            if envelope.crs is None and crs is not None:
                envelope = envelope.with_crs(crs)
            if extent is not None and corner is not None:
                assert extent.to_envelope(corner).equals(
                    envelope.simplify().with_crs(None),
                    tolerance=1e-6 * max(1.0, float(np.nanmax(
                        np.abs(envelope.spans))))), \
                    "envelope is inconsistent with extent and grid_to_crs"
        elif extent is not None and corner is not None:
            envelope = extent.to_envelope(corner, crs)
        elif crs is not None:
            envelope = GeneralEnvelope([np.nan] * target_dim,
                                       [np.nan] * target_dim, crs)
        if extent is None and envelope is None:
            raise ValidationError(
                "A grid geometry needs at least an extent or an envelope"
            )
        self._init(extent, center, corner, envelope, crs,
                   _resolution(center, extent))

    def _init(self, extent, center, corner, envelope, crs, resolution):
        self._extent: Optional[GridExtent] = extent
        self._grid_to_crs: Optional[MathTransform] = center
        self._corner_to_crs: Optional[MathTransform] = corner
        self._envelope: Optional[GeneralEnvelope] = envelope
        self._crs = crs
        self._resolution: Optional[np.ndarray] = resolution
        self._non_linears = non_linear_targets(center)

    @classmethod
    def _create(cls, extent, center, corner, envelope, crs, resolution):
        geometry = cls.__new__(cls)
        geometry._init(extent, center, corner, envelope, crs, resolution)
        return geometry

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_envelope(
        cls,
        anchor: PixelInCell,
        grid_to_crs: Any,
        envelope: GeneralEnvelope,
        rounding: GridRoundingMode = GridRoundingMode.NEAREST,
    ) -> 'GridGeometry':
        """Geometry whose extent is inferred from an envelope.

        The envelope is converted to fractional cell indices through the
        inverse transform, rounded with *rounding*, and the transform
        translation is then adjusted so that the rounded extent maps back
        onto the envelope lower corner.

        Parameters
        ----------
        anchor : PixelInCell
            Cell point that integer grid coordinates map to.
        grid_to_crs : MathTransform or array_like
            Grid-to-CRS transform.
        envelope : GeneralEnvelope
            Region the grid must cover.
        rounding : GridRoundingMode, default=GridRoundingMode.NEAREST
            How fractional cell indices are rounded.

        Returns
        -------
        GridGeometry

        Raises
        ------
        MismatchedDimensionError
            If the envelope dimension differs from the transform target
            dimension.
        """
        grid_to_crs = _as_transform(grid_to_crs)
        if envelope.dimension != grid_to_crs.target_dimensions:
            raise MismatchedDimensionError(
                f"Envelope has {envelope.dimension} dimensions but "
                f"grid_to_crs has {grid_to_crs.target_dimensions} targets"
            )
        corner = translate_anchor(grid_to_crs, anchor, PixelInCell.CELL_CORNER)
        indices = transform_envelope(crs_to_grid(corner, envelope), envelope)
        extent = GridExtent.from_index_envelope(indices, rounding)
        shift = indices.lower - np.array(extent.low, dtype=np.float64)
        shift[~np.isfinite(shift)] = 0.0
        shift[np.abs(shift) <= matrices.COMPARISON_THRESHOLD] = 0.0
        if np.any(shift):
            logger.debug("Compensating rounded extent by %s cells", shift)
            grid_to_crs = concatenate(translation(shift), grid_to_crs)
            corner = translate_anchor(grid_to_crs, anchor,
                                      PixelInCell.CELL_CORNER)
        computed = extent.to_envelope(corner, envelope.crs)
        lower = np.where(np.isnan(computed.lower), envelope.lower,
                         computed.lower)
        upper = np.where(np.isnan(computed.upper), envelope.upper,
                         computed.upper)
        center = translate_anchor(grid_to_crs, anchor, PixelInCell.CELL_CENTER)
        env = GeneralEnvelope._unchecked(lower, upper, envelope.crs)
        return cls._create(extent, center, corner, env, envelope.crs,
                           _resolution(center, extent))

    @classmethod
    def from_extent_and_envelope(
        cls,
        extent: GridExtent,
        envelope: GeneralEnvelope,
        flipped_axes: Sequence[int] = (),
    ) -> 'GridGeometry':
        """Axis-aligned geometry stretching *extent* over *envelope*.

        Parameters
        ----------
        extent : GridExtent
            Cell extent.
        envelope : GeneralEnvelope
            Region covered, same dimension as the extent.
        flipped_axes : sequence of int
            Axes whose grid index increases while the CRS coordinate
            decreases, typically ``(1,)`` for image rows.
        """
        if extent.dimension != envelope.dimension:
            raise MismatchedDimensionError(
                f"Extent has {extent.dimension} dimensions but the envelope "
                f"has {envelope.dimension}"
            )
        env = envelope.simplify()
        m = matrices.create_transform(extent.to_index_envelope(), env,
                                      flipped_axes)
        return cls(extent, PixelInCell.CELL_CORNER, linear(m), envelope.crs,
                   envelope=env)

    @classmethod
    def from_affine(
        cls,
        transform: 'Affine',
        shape: Tuple[int, int],
        crs: Any = None,
    ) -> 'GridGeometry':
        """Geometry of a geocoded raster described by a rasterio affine.

        Parameters
        ----------
        transform : rasterio.transform.Affine
            Maps pixel ``(col, row)`` corners to CRS ``(x, y)``.
        shape : Tuple[int, int]
            Image shape ``(rows, cols)``.
        crs : pyproj.CRS or str, optional
            CRS of the affine output.

        Raises
        ------
        TypeError
            If *transform* is not a ``rasterio.transform.Affine``.
        """
        if not _is_rasterio_affine(transform):
            raise TypeError(
                f"transform must be a rasterio.transform.Affine instance, "
                f"got {type(transform).__name__}"
            )
        rows, cols = shape
        return cls(GridExtent.from_size(cols, rows), PixelInCell.CELL_CORNER,
                   AffineTransform2D.from_affine(transform), crs)

    @classmethod
    def from_reader(cls, reader: Any) -> 'GridGeometry':
        """Geometry from an imagery reader's metadata.

        Works with any reader storing a rasterio ``Affine`` in
        ``metadata['transform']``, a CRS in ``metadata['crs']`` and the
        image size in ``metadata['rows']`` and ``metadata['cols']``.

        Raises
        ------
        ValueError
            If the metadata has no transform.
        """
        transform = reader.metadata.get('transform')
        if transform is None:
            raise ValueError(
                "Reader metadata does not contain an affine transform. "
                "GridGeometry.from_reader requires metadata['transform'] to "
                "be a rasterio.transform.Affine instance."
            )
        shape = (reader.metadata['rows'], reader.metadata['cols'])
        return cls.from_affine(transform, shape, reader.metadata.get('crs'))

    @classmethod
    def _derived(
        cls,
        other: 'GridGeometry',
        extent: GridExtent,
        to_other: Optional[MathTransform],
    ) -> 'GridGeometry':
        """Geometry over *extent* whose grid maps to *other*'s through *to_other*.

        The envelope is clipped to *other*'s envelope when the grid is
        resampled, since the last cells may stick out.
        """
        if to_other is None or to_other.is_identity:
            center = other._grid_to_crs
            corner = other._corner_to_crs
            resolution = other._resolution
            limits = None
        else:
            dim = to_other.source_dimensions
            corner = concatenate(to_other, other._corner_to_crs)
            center = concatenate(translation([0.5] * dim), to_other,
                                 translation([-0.5] * dim),
                                 other._grid_to_crs)
            resolution = _resolution(center, extent)
            limits = other._envelope
        envelope = None
        if corner is not None:
            envelope = extent.to_envelope(corner, other._crs)
            if limits is not None and not limits.is_all_nan:
                envelope = envelope.intersect(limits.simplify())
        elif other._envelope is not None:
            envelope = other._envelope
        return cls._create(extent, center, corner, envelope, other._crs,
                           resolution)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        """Number of grid dimensions."""
        if self._extent is not None:
            return self._extent.dimension
        if self._grid_to_crs is not None:
            return self._grid_to_crs.source_dimensions
        return self._envelope.dimension

    @property
    def target_dimension(self) -> int:
        """Number of CRS dimensions."""
        if self._grid_to_crs is not None:
            return self._grid_to_crs.target_dimensions
        if self._envelope is not None:
            return self._envelope.dimension
        return self.dimension

    def is_defined(self, components: GridComponent) -> bool:
        """Whether all the requested components are present."""
        present = GridComponent(0)
        if self._crs is not None:
            present |= GridComponent.CRS
        if self._envelope is not None and not self._envelope.is_all_nan:
            present |= GridComponent.ENVELOPE
        if self._extent is not None:
            present |= GridComponent.EXTENT
        if self._grid_to_crs is not None:
            present |= GridComponent.GRID_TO_CRS
        if self._resolution is not None:
            present |= GridComponent.RESOLUTION
        return (present & components) == components

    @property
    def is_envelope_only(self) -> bool:
        return (self._extent is None and self._grid_to_crs is None
                and self._envelope is not None)

    @property
    def is_extent_only(self) -> bool:
        return (self._extent is not None and self._grid_to_crs is None
                and self._crs is None)

    @property
    def extent(self) -> GridExtent:
        """Valid cell indices.

        Raises
        ------
        IncompleteGridGeometryError
            If this geometry has no extent.
        """
        if self._extent is None:
            raise IncompleteGridGeometryError("Grid geometry has no extent")
        return self._extent

    @property
    def crs(self):
        """Coordinate reference system, or ``None`` if unknown."""
        return self._crs

    @property
    def envelope(self) -> GeneralEnvelope:
        """Envelope of all cells.

        Raises
        ------
        IncompleteGridGeometryError
            If this geometry has no envelope.
        """
        if self._envelope is None:
            raise IncompleteGridGeometryError("Grid geometry has no envelope")
        return self._envelope

    def get_envelope(self, crs: Any = None) -> GeneralEnvelope:
        """Envelope converted to *crs*, or the native envelope if ``None``."""
        crs = as_crs(crs)
        envelope = self.envelope
        if crs is None or equals_ignore_metadata(self._crs, crs):
            return envelope
        op = find_operation(self._crs, crs)
        return transform_envelope(op, envelope, crs)

    def get_grid_to_crs(
        self, anchor: PixelInCell = PixelInCell.CELL_CENTER
    ) -> MathTransform:
        """Grid-to-CRS transform anchored on cell centers or corners.

        Raises
        ------
        IncompleteGridGeometryError
            If this geometry has no grid-to-CRS transform.
        """
        if self._grid_to_crs is None:
            raise IncompleteGridGeometryError(
                "Grid geometry has no grid-to-CRS transform"
            )
        if anchor is PixelInCell.CELL_CORNER:
            return self._corner_to_crs
        return self._grid_to_crs

    def get_linear_grid_to_crs(
        self, anchor: PixelInCell = PixelInCell.CELL_CENTER
    ) -> LinearTransform:
        """Grid-to-CRS transform, linearised at the extent center if needed."""
        transform = self.get_grid_to_crs(anchor)
        if isinstance(transform, LinearTransform):
            return transform
        return tangent(transform, self.extent.point_of_interest(anchor))

    def resolution(self, allow_estimates: bool = True) -> np.ndarray:
        """Size of a cell in CRS units, per CRS dimension.

        Parameters
        ----------
        allow_estimates : bool, default=True
            Whether a resolution computed at the extent center of a
            non-linear transform is acceptable. When False, non-linear
            dimensions are NaN.

        Raises
        ------
        IncompleteGridGeometryError
            If the resolution cannot be determined.
        """
        if self._resolution is None:
            raise IncompleteGridGeometryError(
                "Grid geometry has no resolution"
            )
        res = np.array(self._resolution)
        if not allow_estimates:
            for dim in self._non_linears:
                res[dim] = np.nan
        return res

    def is_conversion_linear(self, *targets: int) -> bool:
        """Whether the grid-to-CRS transform is linear for the given targets."""
        if not targets:
            targets = tuple(range(self.target_dimension))
        return not any(t in self._non_linears for t in targets)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def derive(self) -> 'GridDerivation':
        """Start deriving a new geometry from this one."""
        from gridref.grid.derivation import GridDerivation
        return GridDerivation(self)

    def translate(self, *offsets: int) -> 'GridGeometry':
        """Same world mapping with grid indices shifted by *offsets*."""
        extent = self.extent.translate(*offsets)
        if extent is self._extent:
            return self
        t = list(offsets) + [0] * (self.dimension - len(offsets))
        shift = translation([-float(v) for v in t])
        center = corner = None
        if self._grid_to_crs is not None:
            center = concatenate(shift, self._grid_to_crs)
            corner = concatenate(shift, self._corner_to_crs)
        return GridGeometry._create(extent, center, corner, self._envelope,
                                    self._crs, self._resolution)

    def relocate(self, extent: GridExtent) -> 'GridGeometry':
        """Same grid-to-CRS transform over a different extent."""
        if extent == self._extent:
            return self
        if extent.dimension != self.dimension:
            raise MismatchedDimensionError(
                f"Extent has {extent.dimension} dimensions, expected "
                f"{self.dimension}"
            )
        envelope = self._envelope
        if self._corner_to_crs is not None:
            envelope = extent.to_envelope(self._corner_to_crs, self._crs)
        return GridGeometry._create(extent, self._grid_to_crs,
                                    self._corner_to_crs, envelope, self._crs,
                                    _resolution(self._grid_to_crs, extent))

    def reduce(self, *dims: int) -> 'GridGeometry':
        """Geometry restricted to the given grid dimensions.

        The CRS is kept when all its dimensions remain, or replaced by the
        matching component of a compound CRS; otherwise it is dropped.
        """
        keep = sorted(set(dims))
        if keep == list(range(self.dimension)):
            return self
        extent = self._extent.reduce_dimension(*keep) \
            if self._extent is not None else None
        center = corner = None
        targets = keep
        if self._grid_to_crs is not None:
            center, targets = separate(self._grid_to_crs, keep)
            corner, _ = separate(self._corner_to_crs, keep)
            targets = list(targets)
        crs = None
        if self._crs is not None:
            if len(targets) == self.target_dimension:
                crs = self._crs
            elif self._crs.is_compound:
                offset = 0
                for sub in self._crs.sub_crs_list:
                    n = len(sub.axis_info)
                    if targets == list(range(offset, offset + n)):
                        crs = sub
                    offset += n
        envelope = None
        if self._envelope is not None:
            envelope = self._envelope.sub_envelope(targets, crs)
        resolution = None
        if self._resolution is not None:
            resolution = self._resolution[targets]
        return GridGeometry._create(extent, center, corner, envelope, crs,
                                    resolution)

    def create_transform_to(
        self,
        target: 'GridGeometry',
        anchor: PixelInCell = PixelInCell.CELL_CENTER,
    ) -> MathTransform:
        """Transform from this grid's coordinates to *target*'s grid coordinates.

        Raises
        ------
        IncompleteGridGeometryError
            If either geometry has no grid-to-CRS transform.
        TransformError
            If no coordinate operation links the two CRS.
        """
        source = self.get_grid_to_crs(anchor)
        destination = target.get_grid_to_crs(anchor)
        steps = [source]
        if not equals_ignore_metadata(self._crs, target._crs):
            steps.append(find_operation(self._crs, target._crs))
        steps.append(destination.inverse())
        return concatenate(*steps)

    def to_affine(self) -> 'Affine':
        """Cell-corner grid-to-CRS transform as a rasterio ``Affine``.

        Raises
        ------
        ValidationError
            If the transform is not a 2-D affine transform.
        """
        corner = self.get_grid_to_crs(PixelInCell.CELL_CORNER)
        if not isinstance(corner, AffineTransform2D):
            raise ValidationError(
                "Only 2-D affine grid-to-CRS transforms convert to Affine"
            )
        return corner.to_affine()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridGeometry):
            return NotImplemented
        if self._crs is None or other._crs is None:
            same_crs = self._crs is other._crs
        else:
            same_crs = self._crs == other._crs
        return (same_crs
                and self._extent == other._extent
                and self._grid_to_crs == other._grid_to_crs
                and self._envelope == other._envelope)

    def __hash__(self) -> int:
        return hash((self._extent, self._grid_to_crs))

    def __repr__(self) -> str:
        parts = []
        if self._extent is not None:
            parts.append(f"extent={self._extent!r}")
        if self._grid_to_crs is not None:
            parts.append(f"grid_to_crs={self._grid_to_crs!r}")
        if self._envelope is not None:
            parts.append(f"envelope={self._envelope!r}")
        return f"GridGeometry({', '.join(parts)})"
