# -*- coding: utf-8 -*-
"""
Linear Interpolator - Piecewise-linear one-dimensional transform.

Maps a sorted preimage onto a sequence of values by linear interpolation,
extrapolating with the slope of the first or last segment outside the
preimage range. Typical use is a non-uniform axis such as irregular
latitude rows or time steps.

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
from typing import Sequence

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import NoninvertibleTransformError, ValidationError
from gridref.referencing.transforms.base import MathTransform


class LinearInterpolator1D(MathTransform):
    """Piecewise-linear mapping from *preimage* to *values*.

    Parameters
    ----------
    preimage : sequence of float
        Strictly increasing input coordinates, at least two.
    values : sequence of float
        Output coordinates, same length as *preimage*.

    Raises
    ------
    ValidationError
        If the arrays differ in length, are shorter than two, contain
        non-finite values, or if *preimage* is not strictly increasing.
    """

    def __init__(
        self, preimage: Sequence[float], values: Sequence[float]
    ) -> None:
        x = np.asarray(preimage, dtype=np.float64).ravel()
        y = np.asarray(values, dtype=np.float64).ravel()
        if x.size != y.size or x.size < 2:
            raise ValidationError(
                f"preimage and values must have the same length >= 2, got "
                f"{x.size} and {y.size}"
            )
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise ValidationError("preimage and values must be finite")
        if np.any(np.diff(x) <= 0):
            raise ValidationError("preimage must be strictly increasing")
        x.setflags(write=False)
        y.setflags(write=False)
        self._x = x
        self._y = y
        self._slopes = np.diff(y) / np.diff(x)

    @property
    def preimage(self) -> np.ndarray:
        return np.array(self._x)

    @property
    def values(self) -> np.ndarray:
        return np.array(self._y)

    @property
    def source_dimensions(self) -> int:
        return 1

    @property
    def target_dimensions(self) -> int:
        return 1

    def _segments(self, x: np.ndarray) -> np.ndarray:
        i = np.searchsorted(self._x, x, side='right') - 1
        return np.clip(i, 0, self._x.size - 2)

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        x = points[:, 0]
        i = self._segments(x)
        y = self._y[i] + self._slopes[i] * (x - self._x[i])
        return y[:, np.newaxis]

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        i = self._segments(point)
        return np.array([[self._slopes[i[0]]]])

    def inverse(self) -> MathTransform:
        from gridref.referencing.transforms.factory import interpolate
        steps = np.diff(self._y)
        if np.all(steps > 0):
            return interpolate(self._y, self._x)
        if np.all(steps < 0):
            return interpolate(self._y[::-1], self._x[::-1])
        raise NoninvertibleTransformError(
            "Interpolated values are not strictly monotonic"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinearInterpolator1D):
            return NotImplemented
        return (np.array_equal(self._x, other._x)
                and np.array_equal(self._y, other._y))

    def __hash__(self) -> int:
        return hash((self._x.tobytes(), self._y.tobytes()))

    def __repr__(self) -> str:
        return (f"LinearInterpolator1D(preimage={self._x.tolist()}, "
                f"values={self._y.tolist()})")
