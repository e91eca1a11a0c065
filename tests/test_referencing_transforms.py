# -*- coding: utf-8 -*-
"""
Transform Algebra Tests - Linear transforms, concatenation and simplification.

Verifies factory dispatch to specialised linear classes, point and
derivative evaluation, inverse caching, identity elimination, flattening
and merging of adjacent linear steps, and rasterio ``Affine`` interop.

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
    MismatchedDimensionError,
    NoninvertibleTransformError,
    TransformError,
    ValidationError,
)
from gridref.referencing.transforms import (
    AffineTransform2D,
    ConcatenatedTransform,
    IdentityTransform,
    LinearInterpolator1D,
    LinearTransform,
    LinearTransform1D,
    ProjectiveTransform,
    ScaleTransform,
    TranslationTransform,
    concatenate,
    derivative_and_transform,
    get_matrix,
    get_steps,
    identity,
    interpolate,
    linear,
    linear_1d,
    scale,
    tangent,
    translation,
    uniform_translation,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def affine_a():
    """2-D affine with rotation-like shear."""
    return linear([[2.0, 1.0, 3.0], [0.0, -1.0, 5.0], [0.0, 0.0, 1.0]])


@pytest.fixture
def affine_b():
    """2-D affine scaling and translating."""
    return linear([[0.5, 0.0, -1.0], [0.0, 4.0, 2.0], [0.0, 0.0, 1.0]])


@pytest.fixture
def curve():
    """Non-linear 1-D transform."""
    return interpolate([0.0, 1.0, 3.0], [0.0, 10.0, 12.0])


# ---------------------------------------------------------------------------
# Factory dispatch
# ---------------------------------------------------------------------------

class TestFactoryDispatch:
    """Test that linear() picks the most specific class."""

    def test_identity(self):
        t = linear(np.eye(4))
        assert isinstance(t, IdentityTransform)
        assert t.is_identity
        assert t.source_dimensions == 3

    def test_identity_rejects_zero_dimension(self):
        with pytest.raises(ValidationError):
            identity(0)

    def test_one_dimensional(self):
        t = linear_1d(3.0, -2.0)
        assert isinstance(t, LinearTransform1D)
        assert t.transform([2.0])[0] == pytest.approx(4.0)

    def test_two_dimensional(self, affine_a):
        assert isinstance(affine_a, AffineTransform2D)

    def test_translation_and_scale(self):
        assert isinstance(translation([1, 2, 3]), TranslationTransform)
        assert isinstance(scale([1, 2, 3]), ScaleTransform)

    def test_projective(self):
        m = np.eye(3)
        m[2, 0] = 0.5
        t = linear(m)
        assert isinstance(t, ProjectiveTransform)
        assert not t.is_affine

    def test_non_square(self):
        t = linear([[1.0, 0.0, 0.0, 0.0], [0.0, 0.0, 1.0, 2.0],
                    [0.0, 0.0, 0.0, 1.0]])
        assert (t.source_dimensions, t.target_dimensions) == (3, 2)
        np.testing.assert_allclose(t.transform([7.0, 8.0, 9.0]), [7.0, 11.0])

    def test_linear_returns_same_instance(self, affine_a):
        assert linear(affine_a) is affine_a

    def test_uniform_translation(self):
        t = uniform_translation(3, 0.5)
        np.testing.assert_allclose(t.transform([0, 0, 0]), [0.5, 0.5, 0.5])


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

class TestEvaluation:
    """Test point transforms and derivatives."""

    def test_single_and_batch(self, affine_a):
        single = affine_a.transform([1.0, 2.0])
        np.testing.assert_allclose(single, [7.0, 3.0])
        batch = affine_a.transform([[1.0, 2.0], [0.0, 0.0]])
        assert batch.shape == (2, 2)
        np.testing.assert_allclose(batch[1], [3.0, 5.0])

    def test_dimension_mismatch(self, affine_a):
        with pytest.raises(MismatchedDimensionError):
            affine_a.transform([1.0, 2.0, 3.0])

    def test_projective_division(self):
        t = linear([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 1.0]])
        # (x, y) -> (x, y) / (x + 1)
        np.testing.assert_allclose(t.transform([1.0, 4.0]), [0.5, 2.0])

    def test_projective_derivative(self):
        t = linear([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 1.0]])
        d = t.derivative([1.0, 4.0])
        # d(x/(x+1))/dx = 1/(x+1)^2 ; d(y/(x+1))/dx = -y/(x+1)^2
        np.testing.assert_allclose(d, [[0.25, 0.0], [-1.0, 0.5]])

    def test_derivative_and_transform(self, curve):
        y, d = derivative_and_transform(curve, [2.0])
        np.testing.assert_allclose(y, [11.0])
        np.testing.assert_allclose(d, [[1.0]])

    def test_get_matrix_non_linear(self, curve):
        assert get_matrix(curve) is None

    def test_tangent(self, curve):
        t = tangent(curve, [0.5])
        assert isinstance(t, LinearTransform)
        np.testing.assert_allclose(t.matrix, [[10.0, 0.0], [0.0, 1.0]])

    def test_matrix_is_copy(self, affine_a):
        m = affine_a.matrix
        m[0, 0] = 100.0
        assert affine_a.matrix[0, 0] == 2.0


# ---------------------------------------------------------------------------
# Inverse
# ---------------------------------------------------------------------------

class TestInverse:
    """Test inverse transforms."""

    def test_round_trip(self, affine_a):
        p = np.array([3.5, -7.25])
        np.testing.assert_allclose(
            affine_a.inverse().transform(affine_a.transform(p)), p)

    def test_inverse_is_cached(self, affine_a):
        assert affine_a.inverse() is affine_a.inverse()
        assert affine_a.inverse().inverse() is affine_a

    def test_identity_inverse(self):
        t = identity(2)
        assert t.inverse() is t

    def test_singular(self):
        t = linear([[1.0, 2.0, 0.0], [2.0, 4.0, 0.0], [0.0, 0.0, 1.0]])
        with pytest.raises(NoninvertibleTransformError):
            t.inverse()

    def test_non_monotonic_interpolation(self):
        t = interpolate(None, [0.0, 2.0, 1.0])
        assert isinstance(t, LinearInterpolator1D)
        with pytest.raises(NoninvertibleTransformError, match="monotonic"):
            t.inverse()

    def test_noninvertible_is_transform_error(self):
        assert issubclass(NoninvertibleTransformError, TransformError)
        assert issubclass(TransformError, ArithmeticError)


# ---------------------------------------------------------------------------
# Concatenation
# ---------------------------------------------------------------------------

class TestConcatenate:
    """Test concatenate() flattening and simplification."""

    def test_identity_is_neutral(self, affine_a, curve):
        assert concatenate(identity(2), affine_a) is affine_a
        assert concatenate(affine_a, identity(2)) is affine_a
        assert concatenate(identity(1), curve) is curve
        assert concatenate(curve, identity(1)) is curve

    def test_linear_steps_merge(self, affine_a, affine_b):
        """Test A then B equals linear(B @ A)."""
        t = concatenate(affine_a, affine_b)
        assert isinstance(t, LinearTransform)
        np.testing.assert_allclose(t.matrix, affine_b.matrix @ affine_a.matrix)
        p = np.array([1.0, 2.0])
        np.testing.assert_allclose(
            t.transform(p), affine_b.transform(affine_a.transform(p)))

    def test_inverse_pair_cancels(self, affine_a):
        t = concatenate(affine_a, affine_a.inverse())
        np.testing.assert_allclose(get_matrix(t), np.eye(3), atol=1e-12)

    def test_non_linear_inverse_pair_cancels(self, curve):
        t = concatenate(curve, curve.inverse())
        assert t.is_identity

    def test_dimension_mismatch(self, affine_a):
        with pytest.raises(MismatchedDimensionError):
            concatenate(affine_a, identity(3))

    def test_requires_argument(self):
        with pytest.raises(ValidationError):
            concatenate()

    def test_flattening(self, curve):
        """Test pairwise and single-call composition give the same steps."""
        a = linear_1d(2.0, 1.0)
        b = linear_1d(0.5, -3.0)
        c = linear_1d(-1.0, 4.0)
        pairwise = concatenate(concatenate(a, curve), concatenate(b, c))
        single = concatenate(a, curve, b, c)
        assert isinstance(pairwise, ConcatenatedTransform)
        assert get_steps(pairwise) == get_steps(single)
        assert len(get_steps(single)) == 3
        assert pairwise == single

    def test_no_adjacent_linear_steps(self, curve):
        t = concatenate(linear_1d(2.0, 0.0), linear_1d(3.0, 1.0), curve,
                        linear_1d(1.0, 5.0), linear_1d(2.0, 0.0))
        steps = get_steps(t)
        for before, after in zip(steps, steps[1:]):
            assert not (isinstance(before, LinearTransform)
                        and isinstance(after, LinearTransform))
        np.testing.assert_allclose(steps[0].matrix, [[6.0, 1.0], [0.0, 1.0]])
        np.testing.assert_allclose(steps[2].matrix, [[2.0, 10.0], [0.0, 1.0]])

    def test_chain_rule(self, curve):
        t = concatenate(linear_1d(2.0, 0.0), curve, linear_1d(3.0, 0.0))
        y, d = t.derivative_and_transform([1.0])
        # 2 * 1 = 2 -> 11 -> 33 ; slopes 2 * 1 * 3
        np.testing.assert_allclose(y, [33.0])
        np.testing.assert_allclose(d, [[6.0]])

    def test_concatenated_inverse(self, curve):
        t = concatenate(linear_1d(2.0, 1.0), curve)
        p = np.array([0.7])
        np.testing.assert_allclose(t.inverse().transform(t.transform(p)), p)
        assert t.inverse().inverse() is t


# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------

class TestInterpolate:
    """Test 1-D interpolation factory shortcuts."""

    def test_identity_values(self):
        assert interpolate([0.0, 1.0, 2.0], [0.0, 1.0, 2.0]).is_identity

    def test_constant_slope(self):
        t = interpolate(None, [5.0, 7.0, 9.0])
        assert isinstance(t, LinearTransform)
        assert t.transform([3.0])[0] == pytest.approx(11.0)

    def test_extrapolation(self, curve):
        assert curve.transform([4.0])[0] == pytest.approx(13.0)
        assert curve.transform([-1.0])[0] == pytest.approx(-10.0)

    def test_decreasing_inverse(self):
        t = interpolate([0.0, 1.0, 2.0], [10.0, 5.0, 4.0])
        assert t.inverse().transform([4.5])[0] == pytest.approx(1.5)

    def test_rejects_unsorted_preimage(self):
        with pytest.raises(ValidationError, match="strictly increasing"):
            interpolate([0.0, 2.0, 1.0], [0.0, 1.0, 2.0])


# ---------------------------------------------------------------------------
# rasterio interop
# ---------------------------------------------------------------------------

class TestAffineInterop:
    """Test conversions to and from rasterio Affine."""

    def test_from_affine(self):
        t = linear(Affine(0.01, 0.0, 116.0, 0.0, -0.01, -31.0))
        assert isinstance(t, AffineTransform2D)
        np.testing.assert_allclose(t.transform([100.0, 200.0]),
                                   [117.0, -33.0])

    def test_to_affine_round_trip(self):
        affine = Affine(10.0, 0.0, 500000.0, 0.0, -10.0, 6000000.0)
        assert AffineTransform2D.from_affine(affine).to_affine() == affine

    def test_get_matrix_of_affine(self):
        m = get_matrix(Affine(2.0, 0.0, 1.0, 0.0, 3.0, 4.0))
        np.testing.assert_array_equal(m, [[2, 0, 1], [0, 3, 4], [0, 0, 1]])
