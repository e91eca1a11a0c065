# -*- coding: utf-8 -*-
"""
Math Transform Base Classes - Abstract interface for coordinate transforms.

Defines the ``MathTransform`` ABC implemented by every coordinate transform
in gridref, and the ``LinearTransform`` ABC shared by all transforms backed
by a homogeneous matrix. Transforms are immutable and map points from
``source_dimensions`` to ``target_dimensions``.

Points are numpy arrays of shape ``(dim,)`` for a single point or
``(N, dim)`` for ``N`` points; the output keeps the same leading shape.

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
from abc import ABC, abstractmethod
from typing import Optional, Tuple, TYPE_CHECKING

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    MismatchedDimensionError,
    NoninvertibleTransformError,
    TransformError,
)
from gridref.referencing import matrix as matrices

if TYPE_CHECKING:
    from gridref.referencing.envelope import GeneralEnvelope


class MathTransform(ABC):
    """Abstract base class for coordinate transforms.

    Subclasses implement ``_transform_array`` on a ``(N, source_dimensions)``
    array and may override ``_derivative`` and ``inverse``. The public
    ``transform`` and ``derivative`` methods handle shape dispatch and
    dimension validation.
    """

    @property
    @abstractmethod
    def source_dimensions(self) -> int:
        """Number of dimensions of input points."""
        ...

    @property
    @abstractmethod
    def target_dimensions(self) -> int:
        """Number of dimensions of output points."""
        ...

    @abstractmethod
    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        """Transform a ``(N, source_dimensions)`` float64 array."""
        ...

    @property
    def is_identity(self) -> bool:
        """Whether this transform leaves every point unchanged."""
        return False

    def transform(self, points: np.ndarray) -> np.ndarray:
        """Transform one point or an array of points.

        Parameters
        ----------
        points : array_like
            Shape ``(source_dimensions,)`` or ``(N, source_dimensions)``.

        Returns
        -------
        np.ndarray
            Shape ``(target_dimensions,)`` or ``(N, target_dimensions)``.

        Raises
        ------
        MismatchedDimensionError
            If the last axis does not have ``source_dimensions`` elements.
        """
        arr = np.asarray(points, dtype=np.float64)
        single = arr.ndim == 1
        if single:
            arr = arr[np.newaxis, :]
        if arr.ndim != 2 or arr.shape[1] != self.source_dimensions:
            raise MismatchedDimensionError(
                f"Expected points with {self.source_dimensions} coordinates, "
                f"got array of shape {np.shape(points)}"
            )
        out = self._transform_array(arr)
        return out[0] if single else out

    def derivative(self, point: np.ndarray) -> np.ndarray:
        """Jacobian matrix of shape ``(target_dimensions, source_dimensions)``.

        Raises
        ------
        TransformError
            If the derivative cannot be computed at *point*.
        """
        return self._derivative(self._as_point(point))

    def derivative_and_transform(
        self, point: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Transformed point and Jacobian at *point* in one call."""
        p = self._as_point(point)
        return self._transform_array(p[np.newaxis, :])[0], self._derivative(p)

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        raise TransformError(
            f"{type(self).__name__} does not provide derivatives"
        )

    def inverse(self) -> 'MathTransform':
        """Inverse transform.

        Raises
        ------
        NoninvertibleTransformError
            If this transform cannot be inverted.
        """
        raise NoninvertibleTransformError(
            f"{type(self).__name__} is not invertible"
        )

    def get_domain(self) -> Optional['GeneralEnvelope']:
        """Region where this transform is valid, or ``None`` if unbounded."""
        return None

    def _as_point(self, point: np.ndarray) -> np.ndarray:
        p = np.asarray(point, dtype=np.float64)
        if p.shape != (self.source_dimensions,):
            raise MismatchedDimensionError(
                f"Expected a point with {self.source_dimensions} "
                f"coordinates, got shape {p.shape}"
            )
        return p


class LinearTransform(MathTransform):
    """Transform defined by a homogeneous ``(M + 1, N + 1)`` matrix.

    Two linear transforms are equal when their matrices are equal,
    whatever their concrete class.

    Parameters
    ----------
    matrix : array_like
        Homogeneous matrix. Copied and made read-only.
    """

    def __init__(self, matrix: np.ndarray) -> None:
        m = matrices.validate(matrix)
        m.setflags(write=False)
        self._matrix = m
        self._affine = matrices.is_affine(m)
        self._inverse: Optional[MathTransform] = None

    @property
    def source_dimensions(self) -> int:
        return self._matrix.shape[1] - 1

    @property
    def target_dimensions(self) -> int:
        return self._matrix.shape[0] - 1

    @property
    def matrix(self) -> np.ndarray:
        """Copy of the homogeneous matrix."""
        return np.array(self._matrix)

    @property
    def is_affine(self) -> bool:
        return self._affine

    @property
    def is_identity(self) -> bool:
        return matrices.is_identity(self._matrix)

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        m = self._matrix
        out = points @ m[:-1, :-1].T + m[:-1, -1]
        if not self._affine:
            w = points @ m[-1, :-1] + m[-1, -1]
            out = out / w[:, np.newaxis]
        return out

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        m = self._matrix
        if self._affine:
            return np.array(m[:-1, :-1])
        # Quotient rule for y = (A p + t) / (c . p + d)
        w = float(m[-1, :-1] @ point + m[-1, -1])
        y = (m[:-1, :-1] @ point + m[:-1, -1]) / w
        return (m[:-1, :-1] - np.outer(y, m[-1, :-1])) / w

    def inverse(self) -> MathTransform:
        if self._inverse is None:
            from gridref.referencing.transforms.factory import linear
            inv = linear(matrices.inverse(self._matrix))
            if isinstance(inv, LinearTransform):
                inv._inverse = self
            self._inverse = inv
        return self._inverse

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinearTransform):
            return NotImplemented
        return matrices.equals(self._matrix, other._matrix)

    def __hash__(self) -> int:
        # Adding 0.0 folds -0.0 into 0.0 so equal matrices hash equally
        return hash((self._matrix.shape, (self._matrix + 0.0).tobytes()))

    def __repr__(self) -> str:
        rows = np.array2string(self._matrix, separator=', ')
        return f"{type(self).__name__}({rows})"
