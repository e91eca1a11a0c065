# -*- coding: utf-8 -*-
"""
Pass-Through Tests - Transforms acting on a block of coordinates.

Covers pass_through() collapsing rules, evaluation and Jacobians of
non-linear blocks, nesting, merging of adjacent pass-throughs and
compound() block-diagonal construction.

Dependencies
------------
pytest

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

from gridref.exceptions import ValidationError
from gridref.referencing.transforms import (
    LinearTransform,
    PassThroughTransform,
    compound,
    concatenate,
    get_steps,
    identity,
    interpolate,
    linear_1d,
    pass_through,
    scale,
    translation,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def curve():
    """Non-linear 1-D transform with slopes 10 then 1."""
    return interpolate([0.0, 1.0, 3.0], [0.0, 10.0, 12.0])


# ---------------------------------------------------------------------------
# Factory rules
# ---------------------------------------------------------------------------

class TestFactory:
    """Test pass_through() simplifications."""

    def test_no_passthrough_returns_sub(self, curve):
        assert pass_through(0, curve, 0) is curve

    def test_identity_sub(self):
        t = pass_through(2, identity(1), 1)
        assert t.is_identity
        assert t.source_dimensions == 4

    def test_linear_sub_expands(self):
        t = pass_through(1, linear_1d(2.0, 3.0), 1)
        assert isinstance(t, LinearTransform)
        np.testing.assert_allclose(t.transform([1.0, 1.0, 1.0]),
                                   [1.0, 5.0, 1.0])

    def test_negative_counts(self, curve):
        with pytest.raises(ValidationError, match="non-negative"):
            pass_through(-1, curve, 0)

    def test_nested_passthrough_flattens(self, curve):
        t = pass_through(1, pass_through(2, curve, 0), 1)
        assert isinstance(t, PassThroughTransform)
        assert (t.first, t.trailing) == (3, 1)
        assert t.sub_transform is curve


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

class TestEvaluation:
    """Test non-linear pass-through evaluation."""

    def test_transform(self, curve):
        t = pass_through(1, curve, 1)
        np.testing.assert_allclose(t.transform([5.0, 2.0, 7.0]),
                                   [5.0, 11.0, 7.0])

    def test_batch(self, curve):
        t = pass_through(1, curve, 0)
        out = t.transform([[1.0, 0.5], [2.0, 3.0]])
        np.testing.assert_allclose(out, [[1.0, 5.0], [2.0, 12.0]])

    def test_jacobian_is_block_diagonal(self, curve):
        t = pass_through(1, curve, 1)
        np.testing.assert_allclose(t.derivative([5.0, 0.5, 7.0]),
                                   np.diag([1.0, 10.0, 1.0]))

    def test_inverse(self, curve):
        t = pass_through(1, curve, 1)
        p = np.array([-3.0, 2.5, 4.0])
        np.testing.assert_allclose(t.inverse().transform(t.transform(p)), p)
        assert t.inverse().inverse() is t

    def test_equality(self, curve):
        assert pass_through(1, curve, 1) == pass_through(1, curve, 1)
        assert pass_through(1, curve, 1) != pass_through(0, curve, 2)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

class TestComposition:
    """Test merging and compound construction."""

    def test_same_layout_merges(self, curve):
        t = concatenate(pass_through(1, curve, 0), pass_through(1, curve, 0))
        assert isinstance(t, PassThroughTransform)
        np.testing.assert_allclose(t.transform([4.0, 0.05]), [4.0, 5.0])

    def test_inverse_pair_cancels(self, curve):
        t = concatenate(pass_through(1, curve, 0),
                        pass_through(1, curve.inverse(), 0))
        assert t.is_identity

    def test_compound_linear(self):
        t = compound(translation([1.0, 2.0]), scale([3.0]))
        assert isinstance(t, LinearTransform)
        np.testing.assert_allclose(t.transform([0.0, 0.0, 1.0]),
                                   [1.0, 2.0, 3.0])

    def test_compound_non_linear(self, curve):
        t = compound(curve, linear_1d(2.0, 0.0))
        assert len(get_steps(t)) == 2
        np.testing.assert_allclose(t.transform([0.5, 3.0]), [5.0, 6.0])

    def test_compound_requires_component(self):
        with pytest.raises(ValidationError):
            compound()
