# -*- coding: utf-8 -*-
"""
Pass-Through Transform - Apply a sub-transform to a block of coordinates.

The leading ``first`` and the trailing ``trailing`` coordinates are copied
unchanged; the coordinates in between are handed to the sub-transform.

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
from typing import Optional, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import ValidationError
from gridref.referencing.transforms.base import MathTransform


class PassThroughTransform(MathTransform):
    """Sub-transform embedded between pass-through coordinates.

    Use ``factory.pass_through`` rather than this constructor: the factory
    collapses trivial and linear cases.

    Parameters
    ----------
    first : int
        Number of leading coordinates copied unchanged.
    sub_transform : MathTransform
        Transform applied to the middle block.
    trailing : int
        Number of trailing coordinates copied unchanged.
    """

    def __init__(
        self, first: int, sub_transform: MathTransform, trailing: int
    ) -> None:
        if first < 0 or trailing < 0:
            raise ValidationError(
                f"first and trailing must be non-negative, got "
                f"({first}, {trailing})"
            )
        self.first = first
        self.trailing = trailing
        self._sub = sub_transform
        self._inverse: Optional[MathTransform] = None

    @property
    def sub_transform(self) -> MathTransform:
        return self._sub

    @property
    def source_dimensions(self) -> int:
        return self.first + self._sub.source_dimensions + self.trailing

    @property
    def target_dimensions(self) -> int:
        return self.first + self._sub.target_dimensions + self.trailing

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        f = self.first
        s = self._sub.source_dimensions
        t = self._sub.target_dimensions
        out = np.empty((points.shape[0], self.target_dimensions))
        out[:, :f] = points[:, :f]
        out[:, f:f + t] = self._sub._transform_array(points[:, f:f + s])
        out[:, f + t:] = points[:, f + s:]
        return out

    def derivative_and_transform(
        self, point: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        p = self._as_point(point)
        f = self.first
        s = self._sub.source_dimensions
        t = self._sub.target_dimensions
        y, d = self._sub.derivative_and_transform(p[f:f + s])
        out = np.concatenate([p[:f], y, p[f + s:]])
        jacobian = np.zeros((self.target_dimensions, self.source_dimensions))
        jacobian[:f, :f] = np.eye(f)
        jacobian[f:f + t, f:f + s] = d
        jacobian[f + t:, f + s:] = np.eye(self.trailing)
        return out, jacobian

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        return self.derivative_and_transform(point)[1]

    def inverse(self) -> MathTransform:
        if self._inverse is None:
            from gridref.referencing.transforms.factory import pass_through
            inv = pass_through(self.first, self._sub.inverse(), self.trailing)
            if isinstance(inv, PassThroughTransform):
                inv._inverse = self
            self._inverse = inv
        return self._inverse

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PassThroughTransform):
            return NotImplemented
        return (self.first == other.first
                and self.trailing == other.trailing
                and self._sub == other._sub)

    def __hash__(self) -> int:
        return hash((self.first, self._sub, self.trailing))

    def __repr__(self) -> str:
        return (f"PassThroughTransform(first={self.first}, "
                f"sub={self._sub!r}, trailing={self.trailing})")
