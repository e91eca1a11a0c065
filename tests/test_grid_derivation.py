# -*- coding: utf-8 -*-
"""
Grid Derivation Tests - Sub-grids, slices, margins and subsampling.

Covers sub-grids requested by envelope, grid extent and other grid
geometries (including anti-meridian crossings and compound CRS
components), resolution-driven subsampling, margins, rounding and
clipping modes, slicing, envelope-only derivation and the builder state
rules.

Dependencies
------------
pytest
rasterio

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

import pytest
import numpy as np

from rasterio.transform import Affine

from gridref.exceptions import (
    DerivationStateError,
    DisjointExtentError,
    MismatchedDimensionError,
    PointOutsideCoverageError,
    ValidationError,
)
from gridref.grid.extent import GridExtent
from gridref.grid.geometry import GridGeometry
from gridref.referencing.envelope import GeneralEnvelope
from gridref.referencing.transforms import get_matrix
from gridref.vocabulary import GridClippingMode, GridRoundingMode, PixelInCell


def _grid(xmin, ymin, xmax, ymax, x_scale, y_scale):
    """Corner-anchored grid with an arbitrary (200, 500) translation."""
    matrix = [[x_scale, 0.0, 200.0], [0.0, y_scale, 500.0], [0.0, 0.0, 1.0]]
    return GridGeometry(GridExtent((xmin, ymin), (xmax, ymax)),
                        PixelInCell.CELL_CORNER, matrix)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def world():
    """200x180 one-degree grid starting at longitude 80, CRS84."""
    return GridGeometry(GridExtent.from_size(200, 180), PixelInCell.CELL_CORNER,
                        [[1.0, 0.0, 80.0], [0.0, -1.0, 90.0], [0.0, 0.0, 1.0]],
                        'OGC:CRS84')


@pytest.fixture
def plain():
    """10x20 grid of 2-unit cells without CRS, envelope [0, 20] x [0, 40]."""
    return GridGeometry(GridExtent.from_size(10, 20), PixelInCell.CELL_CORNER,
                        np.diag([2.0, 2.0, 1.0]))


@pytest.fixture
def volume():
    """4x5x6 grid in WGS 84 with EGM96 heights, 10 m vertical cells."""
    return GridGeometry(GridExtent.from_size(4, 5, 6),
                        PixelInCell.CELL_CORNER,
                        np.diag([1.0, 1.0, 10.0, 1.0]), 'EPSG:4326+5773')


# ---------------------------------------------------------------------------
# Sub-grid from another grid
# ---------------------------------------------------------------------------

class TestSubgridFromGrid:
    """Test sub-grids requested by another grid geometry."""

    def test_intersection(self):
        source = _grid(10, -20, 110, 180, 100, -300)
        target = _grid(2000, -1000, 9000, 8000, 2, -1)
        change = target.derive().subgrid(source)
        extent = change.get_intersection()
        assert extent.low == (2000, -1000)
        assert extent.high == (5549, 8000)

    def test_subsampling_and_transform(self):
        source = _grid(10, -20, 110, 180, 100, -300)
        target = _grid(2000, -1000, 9000, 8000, 2, -1)
        change = target.derive().subgrid(source)
        assert change.get_subsampling() == (50, 300)
        assert change.get_subsampling_offsets() == (0, -100)
        result = change.build()
        assert result.extent.low == (40, -3)
        assert result.extent.high == (110, 27)
        np.testing.assert_array_equal(
            get_matrix(result.get_grid_to_crs(PixelInCell.CELL_CORNER)),
            [[100.0, 0.0, 200.0], [0.0, -300.0, 600.0], [0.0, 0.0, 1.0]])

    def test_envelope_clipped_to_base(self):
        source = _grid(10, -20, 110, 180, 100, -300)
        target = _grid(2000, -1000, 9000, 8000, 2, -1)
        result = target.derive().subgrid(source).build()
        assert result.envelope.to_tuple() == (
            (4200.0, 11300.0), (-7501.0, 1500.0))

    def test_resolution_follows_subsampling(self):
        source = _grid(10, -20, 110, 180, 100, -300)
        target = _grid(2000, -1000, 9000, 8000, 2, -1)
        result = target.derive().subgrid(source).build()
        np.testing.assert_allclose(result.resolution(), [100.0, 300.0])

    def test_grid_across_anti_meridian(self, world):
        other = GridGeometry.from_affine(
            Affine(0.5, 0.0, -170.0, 0.0, -0.5, 10.0), (20, 20), 'OGC:CRS84')
        change = world.derive().subgrid(other)
        extent = change.get_intersection()
        assert extent.low == (110, 80)
        assert extent.high == (119, 89)

    def test_grid_across_anti_meridian_envelope(self, world):
        other = GridGeometry.from_affine(
            Affine(0.5, 0.0, -170.0, 0.0, -0.5, 10.0), (20, 20), 'OGC:CRS84')
        result = world.derive().subgrid(other).build()
        assert result.envelope.to_tuple() == ((190.0, 200.0), (0.0, 10.0))

    def test_envelope_only_request(self, plain):
        other = GridGeometry(envelope=GeneralEnvelope([4.0, 8.0],
                                                      [12.0, 20.0]))
        extent = plain.derive().subgrid(other).get_intersection()
        assert extent.low == (2, 4)
        assert extent.high == (5, 9)


# ---------------------------------------------------------------------------
# Sub-grid from an envelope
# ---------------------------------------------------------------------------

class TestSubgridFromEnvelope:
    """Test sub-grids requested by an envelope."""

    def test_anti_meridian(self, world):
        """Test an area of interest crossing the anti-meridian."""
        aoi = GeneralEnvelope([140.0, -90.0], [-179.0, 90.0], 'OGC:CRS84')
        result = world.derive().subgrid(aoi).build()
        assert result.envelope.to_tuple() == ((140.0, 181.0), (-90.0, 90.0))
        assert result.extent.low == (60, 0)
        assert result.extent.high == (100, 179)

    def test_keeps_grid_to_crs(self, world):
        aoi = GeneralEnvelope([100.0, 0.0], [110.0, 10.0], 'OGC:CRS84')
        result = world.derive().subgrid(aoi).build()
        assert result.get_grid_to_crs() is world.get_grid_to_crs()

    def test_other_crs(self, world):
        aoi = GeneralEnvelope([-10.0, 100.0], [10.0, 120.0], 'EPSG:4326')
        result = world.derive().subgrid(aoi).build()
        assert result.extent.low == (20, 80)
        assert result.extent.high == (39, 99)
        assert result.envelope.to_tuple() == ((100.0, 120.0), (-10.0, 10.0))

    def test_disjoint(self, plain):
        aoi = GeneralEnvelope([100.0, 100.0], [200.0, 200.0])
        with pytest.raises(DisjointExtentError):
            plain.derive().subgrid(aoi)

    def test_whole_grid_returns_base(self, plain):
        aoi = GeneralEnvelope([-50.0, -50.0], [50.0, 50.0])
        assert plain.derive().subgrid(aoi).build() is plain

    def test_compound_component(self, volume):
        aoi = GeneralEnvelope([1.0, 1.0], [3.0, 4.0], 'EPSG:4326')
        extent = volume.derive().subgrid(aoi).get_intersection()
        assert extent.low == (1, 1, 0)
        assert extent.high == (2, 3, 5)

    def test_too_many_dimensions(self, plain):
        aoi = GeneralEnvelope([0.0, 0.0, 0.0], [1.0, 1.0, 1.0])
        with pytest.raises(MismatchedDimensionError):
            plain.derive().subgrid(aoi)

    def test_unsupported_type(self, plain):
        with pytest.raises(TypeError):
            plain.derive().subgrid("everything")


class TestResolution:
    """Test subsampling computed from a requested resolution."""

    def test_subsampling(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        change = plain.derive().subgrid(aoi, 6.0, 6.0)
        assert change.get_subsampling() == (3, 3)
        assert change.get_subsampling_offsets() == (2, 1)
        result = change.build()
        assert result.extent.low == (0, 1)
        assert result.extent.high == (1, 2)
        np.testing.assert_allclose(
            get_matrix(result.get_grid_to_crs(PixelInCell.CELL_CORNER)),
            [[6.0, 0.0, 4.0], [0.0, 6.0, 2.0], [0.0, 0.0, 1.0]])
        np.testing.assert_allclose(result.resolution(), [6.0, 6.0])

    def test_envelope_clipped_to_request(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        result = plain.derive().subgrid(aoi, 6.0, 6.0).build()
        assert result.envelope.to_tuple() == ((4.0, 16.0), (8.0, 20.0))

    def test_finer_than_base(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        change = plain.derive().subgrid(aoi, 0.5, 0.5)
        assert change.get_subsampling() == (1, 1)

    def test_maximum_subsampling(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        change = plain.derive().maximum_subsampling(2).subgrid(aoi, 6.0, 6.0)
        assert change.get_subsampling() == (2, 2)

    def test_too_many_resolutions(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        with pytest.raises(MismatchedDimensionError):
            plain.derive().subgrid(aoi, 1.0, 1.0, 1.0)


# ---------------------------------------------------------------------------
# Sub-grid from a grid extent
# ---------------------------------------------------------------------------

class TestSubgridFromExtent:
    """Test sub-grids requested in base grid units."""

    def test_subsampling_factors(self, plain):
        change = plain.derive().subgrid(GridExtent((2, 4), (7, 15)), 2, 3)
        assert change.get_subsampling() == (2, 3)
        assert change.get_subsampling_offsets() == (0, 1)
        result = change.build()
        assert result.extent.low == (1, 1)
        assert result.extent.high == (3, 4)

    def test_clipped(self, plain):
        extent = plain.derive().subgrid(
            GridExtent((5, 5), (50, 50))).get_intersection()
        assert extent.low == (5, 5)
        assert extent.high == (9, 19)

    def test_dimension_mismatch(self, plain):
        with pytest.raises(MismatchedDimensionError):
            plain.derive().subgrid(GridExtent((0,), (3,)))


# ---------------------------------------------------------------------------
# Rounding, clipping, margins and chunks
# ---------------------------------------------------------------------------

class TestRequestOptions:
    """Test configuration applied to sub-grid requests."""

    @pytest.mark.parametrize("mode,low,high", [
        (GridRoundingMode.NEAREST, 2, 4),
        (GridRoundingMode.ENCLOSING, 1, 4),
        (GridRoundingMode.CONTAINED, 2, 3),
    ])
    def test_rounding(self, plain, mode, low, high):
        aoi = GeneralEnvelope([3.0, 3.0], [9.0, 9.0])
        extent = plain.derive().rounding(mode).subgrid(aoi).get_intersection()
        assert extent.low == (low, low)
        assert extent.high == (high, high)

    def test_margin_clipped(self, plain):
        aoi = GeneralEnvelope([0.0, 0.0], [4.0, 4.0])
        extent = plain.derive().margin(2).subgrid(aoi).get_intersection()
        assert extent.low == (0, 0)
        assert extent.high == (3, 3)

    def test_margin_border_expansion(self, plain):
        aoi = GeneralEnvelope([0.0, 0.0], [4.0, 4.0])
        extent = (plain.derive()
                  .clipping(GridClippingMode.BORDER_EXPANSION)
                  .margin(2)
                  .subgrid(aoi)
                  .get_intersection())
        assert extent.low == (-2, -2)
        assert extent.high == (3, 3)

    def test_chunk_size(self, plain):
        aoi = GeneralEnvelope([6.0, 6.0], [10.0, 10.0])
        extent = plain.derive().chunk_size(4).subgrid(aoi).get_intersection()
        assert extent.low == (0, 0)
        assert extent.high == (7, 7)

    def test_margin_only(self, plain):
        """Test a margin without sub-grid expands the extent."""
        result = plain.derive().margin(3).build()
        assert result.extent.low == (-3, -3)
        assert result.extent.high == (12, 22)
        assert result.get_grid_to_crs() is plain.get_grid_to_crs()
        assert result.envelope.to_tuple() == ((-6.0, 26.0), (-6.0, 46.0))

    def test_margin_only_per_dimension(self, plain):
        extent = plain.derive().margin(1, 0).get_intersection()
        assert extent.low == (-1, 0)
        assert extent.high == (10, 19)

    def test_negative_margin(self, plain):
        with pytest.raises(ValidationError):
            plain.derive().margin(-1)

    def test_too_many_margins(self, plain):
        with pytest.raises(MismatchedDimensionError):
            plain.derive().margin(1, 2, 3)

    def test_invalid_chunk_size(self, plain):
        with pytest.raises(ValidationError):
            plain.derive().chunk_size(0)


# ---------------------------------------------------------------------------
# Slices
# ---------------------------------------------------------------------------

class TestSlice:
    """Test collapsing dimensions at a position."""

    def test_slice(self, plain):
        result = plain.derive().slice([5.0, np.nan]).build()
        assert result.extent.low == (2, 0)
        assert result.extent.high == (2, 19)

    def test_interior_boundary_belongs_to_following_cell(self, plain):
        # x = 4 is the corner shared by cells 1 and 2
        extent = plain.derive().slice([4.0, np.nan]).get_intersection()
        assert extent.low == (2, 0)
        assert extent.high == (2, 19)

    def test_interior_boundary_negative_scale(self, world):
        # Latitude 0 is the corner shared by rows 89 and 90
        extent = world.derive().slice([np.nan, 0.0]).get_intersection()
        assert extent.low == (0, 90)
        assert extent.high == (199, 90)

    def test_lower_corner_belongs_to_first_cell(self, world):
        extent = world.derive().slice([80.0, 90.0]).get_intersection()
        assert extent.low == (0, 0)
        assert extent.high == (0, 0)

    def test_upper_corner_belongs_to_last_cell(self, plain):
        extent = plain.derive().slice([20.0, np.nan]).get_intersection()
        assert extent.low == (9, 0)
        assert extent.high == (9, 19)

    def test_outside(self, plain):
        with pytest.raises(PointOutsideCoverageError):
            plain.derive().slice([30.0, np.nan])

    def test_all_nan(self, plain):
        assert plain.derive().slice([np.nan, np.nan]).build() is plain

    def test_compound_component(self, volume):
        extent = volume.derive().slice([25.0], 'EPSG:5773').get_intersection()
        assert extent.low == (0, 0, 2)
        assert extent.high == (3, 4, 2)

    def test_wraparound(self, world):
        extent = world.derive().slice([-170.0, 0.0]).get_intersection()
        assert extent.low == (110, 90)
        assert extent.high == (110, 90)

    def test_after_subgrid(self, plain):
        aoi = GeneralEnvelope([4.0, 8.0], [12.0, 20.0])
        extent = (plain.derive().subgrid(aoi)
                  .slice([np.nan, 10.0]).get_intersection())
        assert extent.low == (2, 5)
        assert extent.high == (5, 5)

    def test_margin_skips_sliced_dimension(self, plain):
        extent = plain.derive().margin(1).slice([5.0, np.nan]) \
            .get_intersection()
        assert extent.low == (2, -1)
        assert extent.high == (2, 20)

    def test_slice_by_ratio(self, volume):
        extent = volume.derive().slice_by_ratio(0.5, 0, 1).get_intersection()
        assert extent.low == (0, 0, 3)
        assert extent.high == (3, 4, 3)


# ---------------------------------------------------------------------------
# Envelope-only derivation
# ---------------------------------------------------------------------------

class TestEnvelopeOnly:
    """Test derivation on geometries without extent."""

    def test_intersection(self):
        base = GridGeometry(envelope=GeneralEnvelope([0.0, 0.0],
                                                     [10.0, 10.0]))
        result = base.derive().subgrid(
            GeneralEnvelope([5.0, 5.0], [20.0, 20.0])).build()
        assert result.is_envelope_only
        assert result.envelope.to_tuple() == ((5.0, 10.0), (5.0, 10.0))

    def test_disjoint(self):
        base = GridGeometry(envelope=GeneralEnvelope([0.0, 0.0],
                                                     [10.0, 10.0]))
        with pytest.raises(DisjointExtentError):
            base.derive().subgrid(GeneralEnvelope([20.0, 20.0], [30.0, 30.0]))


# ---------------------------------------------------------------------------
# Builder state
# ---------------------------------------------------------------------------

class TestState:
    """Test the order in which builder calls are accepted."""

    def test_build_twice(self, plain):
        change = plain.derive()
        change.build()
        with pytest.raises(DerivationStateError, match="already been built"):
            change.build()

    def test_build_after_intersection(self, plain):
        change = plain.derive()
        change.get_intersection()
        with pytest.raises(DerivationStateError):
            change.build()

    def test_configure_after_subgrid(self, plain):
        change = plain.derive().subgrid(GridExtent((0, 0), (4, 4)))
        with pytest.raises(DerivationStateError):
            change.margin(1)

    def test_subgrid_twice(self, plain):
        change = plain.derive().subgrid(GridExtent((0, 0), (4, 4)))
        with pytest.raises(DerivationStateError, match="only once"):
            change.subgrid(GridExtent((0, 0), (2, 2)))

    def test_subgrid_after_slice(self, plain):
        change = plain.derive().slice([5.0, np.nan])
        with pytest.raises(DerivationStateError):
            change.subgrid(GridExtent((0, 0), (4, 4)))

    def test_nothing_requested(self, plain):
        assert plain.derive().build() is plain

    def test_repr(self, plain):
        assert repr(plain.derive()).startswith("GridDerivation(base=")
