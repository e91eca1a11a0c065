# -*- coding: utf-8 -*-
"""
Linear Transforms - Specialised matrix-backed transform classes.

Concrete ``LinearTransform`` subclasses picked by the factory functions in
``gridref.referencing.transforms.factory``: identity, pure translation,
pure scale, 1-D affine, 2-D affine and the generic (possibly projective)
matrix transform. The specialised classes only add cheaper evaluation
paths; equality is always decided on the matrix.

Dependencies
------------
numpy
rasterio (optional, for ``AffineTransform2D.to_affine``)

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
from typing import Sequence, TYPE_CHECKING

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import ValidationError
from gridref.referencing import matrix as matrices
from gridref.referencing._backend import require_rasterio
from gridref.referencing.transforms.base import LinearTransform, MathTransform

if TYPE_CHECKING:
    from rasterio.transform import Affine


class IdentityTransform(LinearTransform):
    """Transform leaving every coordinate unchanged."""

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            raise ValidationError(
                f"dimension must be positive, got {dimension}"
            )
        super().__init__(matrices.create_identity(dimension + 1))

    @property
    def is_identity(self) -> bool:
        return True

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        return np.array(points)

    def inverse(self) -> MathTransform:
        return self


class TranslationTransform(LinearTransform):
    """Adds a constant vector to every point."""

    def __init__(self, vector: Sequence[float]) -> None:
        v = np.asarray(vector, dtype=np.float64)
        m = matrices.create_identity(v.size + 1)
        m[:-1, -1] = v
        super().__init__(m)
        self._vector = self._matrix[:-1, -1]

    @property
    def vector(self) -> np.ndarray:
        return np.array(self._vector)

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        return points + self._vector

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        return np.eye(self._vector.size)


class ScaleTransform(LinearTransform):
    """Multiplies each coordinate by its own factor."""

    def __init__(self, factors: Sequence[float]) -> None:
        f = np.asarray(factors, dtype=np.float64)
        m = matrices.create_identity(f.size + 1)
        m[np.arange(f.size), np.arange(f.size)] = f
        super().__init__(m)
        self._factors = np.diag(self._matrix)[:-1]

    @property
    def factors(self) -> np.ndarray:
        return np.array(self._factors)

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        return points * self._factors


class LinearTransform1D(LinearTransform):
    """One-dimensional ``y = scale * x + offset``."""

    def __init__(self, scale: float, offset: float) -> None:
        super().__init__([[scale, offset], [0.0, 1.0]])
        self.scale = float(scale)
        self.offset = float(offset)

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        return points * self.scale + self.offset


class AffineTransform2D(LinearTransform):
    """Two-dimensional affine transform.

    The matrix layout matches the six rasterio / GDAL affine parameters::

        | a  b  c |
        | d  e  f |
        | 0  0  1 |

    Parameters
    ----------
    matrix : array_like
        ``(3, 3)`` affine matrix.

    Examples
    --------
    >>> from rasterio.transform import Affine
    >>> t = AffineTransform2D.from_affine(Affine(10, 0, 500000, 0, -10, 0))
    >>> t.transform([1.0, 2.0])
    array([500010.,    -20.])
    """

    def __init__(self, matrix: np.ndarray) -> None:
        super().__init__(matrix)
        if self._matrix.shape != (3, 3) or not self._affine:
            raise ValidationError(
                f"AffineTransform2D requires a 3x3 affine matrix, got\n"
                f"{self._matrix}"
            )

    @classmethod
    def from_affine(cls, affine: 'Affine') -> 'AffineTransform2D':
        """Create from a ``rasterio.transform.Affine``."""
        return cls(affine_to_matrix(affine))

    def to_affine(self) -> 'Affine':
        """Return the equivalent ``rasterio.transform.Affine``.

        Raises
        ------
        DependencyError
            If rasterio is not installed.
        """
        require_rasterio()
        from rasterio.transform import Affine
        m = self._matrix
        return Affine(m[0, 0], m[0, 1], m[0, 2], m[1, 0], m[1, 1], m[1, 2])


class ProjectiveTransform(LinearTransform):
    """Generic matrix-backed transform of any dimensions, possibly projective."""


def affine_to_matrix(affine: 'Affine') -> np.ndarray:
    """Convert a ``rasterio.transform.Affine`` to a 3x3 matrix."""
    return np.array([
        [affine.a, affine.b, affine.c],
        [affine.d, affine.e, affine.f],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)
