# -*- coding: utf-8 -*-
"""
Envelope Tests - Axis-aligned boxes with wraparound support.

Covers validation, spans and medians across the anti-meridian,
intersection and union with period shifting, containment and envelope
transformation through linear and non-linear transforms.

Dependencies
------------
pytest
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

import pytest
import numpy as np

from gridref.exceptions import MismatchedDimensionError, ValidationError
from gridref.referencing.envelope import GeneralEnvelope, transform_envelope
from gridref.referencing.transforms import interpolate, linear


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def crossing():
    """CRS84 envelope crossing the anti-meridian."""
    return GeneralEnvelope([170.0, -10.0], [-170.0, 10.0], 'OGC:CRS84')


@pytest.fixture
def wide():
    """CRS84 envelope of a grid spanning longitudes 80 to 280."""
    return GeneralEnvelope([80.0, -90.0], [280.0, 90.0], 'OGC:CRS84')


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    """Test envelope validation."""

    def test_bounds_are_read_only(self):
        env = GeneralEnvelope([0.0, 1.0], [2.0, 3.0])
        with pytest.raises(ValueError):
            env.lower[0] = 5.0

    def test_from_bounds(self):
        env = GeneralEnvelope.from_bounds([(0, 2), (1, 3)])
        assert env.to_tuple() == ((0.0, 2.0), (1.0, 3.0))

    def test_inverted_non_periodic(self):
        with pytest.raises(ValidationError, match="does not wrap around"):
            GeneralEnvelope([10.0, 0.0], [0.0, 1.0])

    def test_inverted_latitude(self):
        with pytest.raises(ValidationError):
            GeneralEnvelope([0.0, 10.0], [1.0, -10.0], 'OGC:CRS84')

    def test_length_mismatch(self):
        with pytest.raises(MismatchedDimensionError):
            GeneralEnvelope([0.0], [1.0, 2.0])

    def test_crs_dimension_mismatch(self):
        with pytest.raises(MismatchedDimensionError, match="axes"):
            GeneralEnvelope([0.0, 0.0, 0.0], [1.0, 1.0, 1.0], 'EPSG:4326')


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

class TestAccessors:
    """Test spans, medians and periods."""

    def test_periods(self, crossing):
        assert crossing.periods == {0: 360.0}

    def test_crossing_span_and_median(self, crossing):
        assert crossing.crosses_period(0)
        assert not crossing.crosses_period(1)
        assert crossing.span(0) == pytest.approx(20.0)
        assert crossing.median(0) == pytest.approx(180.0)
        np.testing.assert_allclose(crossing.spans, [20.0, 20.0])

    def test_simplify_unwraps(self, crossing):
        simple = crossing.simplify()
        assert simple.to_tuple() == ((170.0, 190.0), (-10.0, 10.0))

    def test_simplify_returns_self(self, wide):
        assert wide.simplify() is wide

    def test_is_empty(self):
        assert GeneralEnvelope([0.0, 0.0], [0.0, 1.0]).is_empty
        assert not GeneralEnvelope([0.0, 0.0], [1.0, 1.0]).is_empty

    def test_is_all_nan(self):
        assert GeneralEnvelope([np.nan], [np.nan]).is_all_nan

    def test_sub_envelope(self, wide):
        sub = wide.sub_envelope([1])
        assert sub.to_tuple() == ((-90.0, 90.0),)
        assert sub.crs is None


# ---------------------------------------------------------------------------
# Set operations
# ---------------------------------------------------------------------------

class TestSetOperations:
    """Test intersection, union and containment."""

    def test_intersect(self):
        a = GeneralEnvelope([0.0, 0.0], [10.0, 10.0])
        b = GeneralEnvelope([5.0, -5.0], [15.0, 5.0])
        assert a.intersect(b).to_tuple() == ((5.0, 10.0), (0.0, 5.0))

    def test_disjoint_intersection_is_nan(self):
        a = GeneralEnvelope([0.0, 0.0], [10.0, 10.0])
        b = GeneralEnvelope([20.0, 0.0], [30.0, 10.0])
        result = a.intersect(b)
        assert np.isnan(result.lower[0])
        assert result.is_empty

    def test_intersect_shifts_period(self, wide):
        other = GeneralEnvelope([-170.0, 0.0], [-160.0, 10.0], 'OGC:CRS84')
        result = wide.intersect(other)
        assert result.to_tuple() == ((190.0, 200.0), (0.0, 10.0))

    def test_intersect_crossing_request(self, wide):
        other = GeneralEnvelope([140.0, -90.0], [-179.0, 90.0], 'OGC:CRS84')
        result = wide.intersect(other)
        assert result.to_tuple() == ((140.0, 181.0), (-90.0, 90.0))

    def test_intersect_different_crs(self, wide):
        other = GeneralEnvelope([0.0, 0.0], [1.0, 1.0], 'EPSG:4326')
        with pytest.raises(ValidationError, match="different CRS"):
            wide.intersect(other)

    def test_union(self):
        a = GeneralEnvelope([0.0, 0.0], [1.0, 1.0])
        b = GeneralEnvelope([2.0, -1.0], [3.0, 0.5])
        assert a.union(b).to_tuple() == ((0.0, 3.0), (-1.0, 1.0))

    def test_contains_crossing(self, crossing):
        assert crossing.contains([175.0, 0.0])
        assert crossing.contains([-175.0, 0.0])
        assert not crossing.contains([0.0, 0.0])

    def test_contains_envelope(self):
        outer = GeneralEnvelope([0.0, 0.0], [10.0, 10.0])
        assert outer.contains_envelope(GeneralEnvelope([1.0, 1.0], [2.0, 2.0]))
        assert not outer.contains_envelope(
            GeneralEnvelope([1.0, 1.0], [20.0, 2.0]))

    def test_shift_into(self, wide):
        request = GeneralEnvelope([-100.0, 0.0], [-90.0, 5.0], 'OGC:CRS84')
        assert request.shift_into(wide).to_tuple() == (
            (260.0, 270.0), (0.0, 5.0))


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------

class TestEquality:
    """Test exact and tolerant comparison."""

    def test_eq_and_hash(self):
        a = GeneralEnvelope([0.0, 1.0], [2.0, 3.0])
        b = GeneralEnvelope([0.0, 1.0], [2.0, 3.0])
        assert a == b
        assert hash(a) == hash(b)

    def test_crs_matters(self):
        a = GeneralEnvelope([0.0, 1.0], [2.0, 3.0])
        b = GeneralEnvelope([0.0, 1.0], [2.0, 3.0], 'OGC:CRS84')
        assert a != b

    def test_equals_tolerance(self):
        a = GeneralEnvelope([0.0], [1.0])
        b = GeneralEnvelope([1e-8], [1.0])
        assert not a.equals(b)
        assert a.equals(b, tolerance=1e-6)


# ---------------------------------------------------------------------------
# transform_envelope
# ---------------------------------------------------------------------------

class TestTransformEnvelope:
    """Test envelope projection through transforms."""

    def test_affine_corners(self):
        t = linear([[1.0, 0.0, 80.0], [0.0, -1.0, 90.0], [0.0, 0.0, 1.0]])
        env = GeneralEnvelope([0.0, 0.0], [200.0, 180.0])
        result = transform_envelope(t, env, 'OGC:CRS84')
        assert result.to_tuple() == ((80.0, 280.0), (-90.0, 90.0))
        assert result.crs is not None

    def test_non_linear_sampling(self):
        t = interpolate(None, [0.0, 2.0, 1.0])
        result = transform_envelope(t, GeneralEnvelope([0.0], [2.0]))
        assert result.to_tuple() == ((0.0, 2.0),)

    def test_dimension_mismatch(self):
        t = linear(np.eye(3))
        with pytest.raises(MismatchedDimensionError):
            transform_envelope(t, GeneralEnvelope([0.0], [1.0]))
