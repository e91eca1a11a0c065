# -*- coding: utf-8 -*-
"""
Matrix Utilities - Dense homogeneous matrices for linear transforms.

A linear transform from ``N`` source dimensions to ``M`` target dimensions is
represented by a ``(M + 1, N + 1)`` float64 array in homogeneous form. The
last column holds the translation terms. When the last row is
``[0, ..., 0, 1]`` the matrix is affine; any other last row makes it
projective.

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
from typing import List, Sequence

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    MismatchedDimensionError,
    NoninvertibleTransformError,
    ValidationError,
)

COMPARISON_THRESHOLD = 1e-9
"""Tolerance, in cell units, below which a fractional index offset is noise."""


def validate(matrix: np.ndarray) -> np.ndarray:
    """Return *matrix* as a float64 array after checking its shape.

    Parameters
    ----------
    matrix : array_like
        Candidate homogeneous matrix.

    Returns
    -------
    np.ndarray
        A new float64 array.

    Raises
    ------
    ValidationError
        If the matrix is not two-dimensional, is empty, or has a
        non-finite last row.
    """
    m = np.array(matrix, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] < 1 or m.shape[1] < 1:
        raise ValidationError(
            f"Expected a 2-D matrix of at least 1x1, got shape {m.shape}"
        )
    if not np.all(np.isfinite(m[-1])):
        raise ValidationError("The last matrix row must be finite")
    return m


def create_identity(size: int) -> np.ndarray:
    """Square identity matrix of the given size (dimension + 1)."""
    return np.eye(size, dtype=np.float64)


def create_diagonal(num_row: int, num_col: int) -> np.ndarray:
    """Matrix with ones on the diagonal and in the lower-right corner."""
    m = np.eye(num_row, num_col, dtype=np.float64)
    m[-1, :] = 0.0
    m[-1, -1] = 1.0
    return m


def create_zero(num_row: int, num_col: int, affine: bool = True) -> np.ndarray:
    """Zero matrix, with the lower-right element set to 1 if *affine*."""
    m = np.zeros((num_row, num_col), dtype=np.float64)
    if affine:
        m[-1, -1] = 1.0
    return m


def create_affine(
    derivative: np.ndarray, translation: Sequence[float]
) -> np.ndarray:
    """Build an affine matrix from a Jacobian and a translation vector.

    Parameters
    ----------
    derivative : np.ndarray
        ``(M, N)`` Jacobian matrix.
    translation : sequence of float
        ``M`` translation terms.

    Returns
    -------
    np.ndarray
        ``(M + 1, N + 1)`` affine matrix.
    """
    d = np.asarray(derivative, dtype=np.float64)
    t = np.asarray(translation, dtype=np.float64)
    if d.ndim != 2 or t.shape != (d.shape[0],):
        raise MismatchedDimensionError(
            f"Derivative of shape {d.shape} does not match translation "
            f"of shape {t.shape}"
        )
    m = create_zero(d.shape[0] + 1, d.shape[1] + 1)
    m[:-1, :-1] = d
    m[:-1, -1] = t
    return m


def create_transform(source, target, flipped_axes: Sequence[int] = ()):
    """Affine matrix mapping the *source* box onto the *target* box.

    Both arguments only need ``lower`` and ``upper`` attributes of the same
    length. Axes listed in *flipped_axes* map the source lower bound to the
    target upper bound.

    Returns
    -------
    np.ndarray
        Square affine matrix.
    """
    src_lo = np.asarray(source.lower, dtype=np.float64)
    src_hi = np.asarray(source.upper, dtype=np.float64)
    dst_lo = np.asarray(target.lower, dtype=np.float64)
    dst_hi = np.asarray(target.upper, dtype=np.float64)
    if src_lo.shape != dst_lo.shape:
        raise MismatchedDimensionError(
            f"Source has {src_lo.size} dimensions but target has "
            f"{dst_lo.size}"
        )
    n = src_lo.size
    m = create_identity(n + 1)
    for i in range(n):
        lo, hi = dst_lo[i], dst_hi[i]
        if i in flipped_axes:
            lo, hi = hi, lo
        scale = (hi - lo) / (src_hi[i] - src_lo[i])
        m[i, i] = scale
        m[i, n] = lo - src_lo[i] * scale
    return m


def create_dimension_select(
    source_dimension: int, selected: Sequence[int]
) -> np.ndarray:
    """Matrix keeping only the *selected* source coordinates, in order."""
    m = create_zero(len(selected) + 1, source_dimension + 1)
    for row, column in enumerate(selected):
        if not 0 <= column < source_dimension:
            raise ValidationError(
                f"Dimension {column} out of range [0, {source_dimension})"
            )
        m[row, column] = 1.0
    return m


def is_affine(matrix: np.ndarray) -> bool:
    """Return whether the last row is ``[0, ..., 0, 1]``."""
    last = matrix[-1]
    return bool(last[-1] == 1.0 and not np.any(last[:-1]))


def is_identity(matrix: np.ndarray, tolerance: float = 0.0) -> bool:
    """Return whether *matrix* is a square identity within *tolerance*."""
    rows, cols = matrix.shape
    if rows != cols:
        return False
    return bool(np.all(np.abs(matrix - np.eye(rows)) <= tolerance))


def is_translation(matrix: np.ndarray) -> bool:
    """Return whether *matrix* is square with an identity linear part."""
    rows, cols = matrix.shape
    if rows != cols or not is_affine(matrix):
        return False
    return bool(np.array_equal(matrix[:-1, :-1], np.eye(rows - 1)))


def is_scale(matrix: np.ndarray) -> bool:
    """Return whether *matrix* is square, affine and diagonal."""
    rows, cols = matrix.shape
    if rows != cols or not is_affine(matrix):
        return False
    linear = matrix[:-1, :-1]
    off_diagonal = linear - np.diag(np.diag(linear))
    return not np.any(off_diagonal) and not np.any(matrix[:-1, -1])


def equals(a: np.ndarray, b: np.ndarray, tolerance: float = 0.0) -> bool:
    """Element-wise comparison of two matrices of the same shape."""
    if a.shape != b.shape:
        return False
    if tolerance == 0.0:
        return bool(np.array_equal(a, b))
    return bool(np.allclose(a, b, rtol=0.0, atol=tolerance))


def multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Matrix product ``a @ b`` with a dimension check.

    Raises
    ------
    MismatchedDimensionError
        If the number of columns of *a* differs from the rows of *b*.
    """
    if a.shape[1] != b.shape[0]:
        raise MismatchedDimensionError(
            f"Cannot multiply a {a.shape} matrix by a {b.shape} matrix"
        )
    return a @ b


def _independent_rows(linear: np.ndarray, count: int) -> List[int]:
    """Greedily select *count* linearly independent rows."""
    selected: List[int] = []
    for row in range(linear.shape[0]):
        candidate = selected + [row]
        if np.linalg.matrix_rank(linear[candidate]) == len(candidate):
            selected = candidate
            if len(selected) == count:
                break
    return selected


def _square_inverse(matrix: np.ndarray) -> np.ndarray:
    try:
        inv = np.linalg.inv(matrix)
    except np.linalg.LinAlgError as exc:
        raise NoninvertibleTransformError(
            f"Matrix is singular:\n{matrix}"
        ) from exc
    if not np.all(np.isfinite(inv)):
        raise NoninvertibleTransformError(f"Matrix is singular:\n{matrix}")
    return inv


def inverse(matrix: np.ndarray) -> np.ndarray:
    """Inverse of a homogeneous matrix.

    Square matrices use the regular inverse. Non-square affine matrices
    are inverted on their independent sub-system: when the matrix has
    more target than source dimensions the redundant target coordinates
    are ignored, and when it has more source than target dimensions the
    unused source coordinates come back as NaN.

    Parameters
    ----------
    matrix : np.ndarray
        ``(M + 1, N + 1)`` matrix.

    Returns
    -------
    np.ndarray
        ``(N + 1, M + 1)`` matrix.

    Raises
    ------
    NoninvertibleTransformError
        If the matrix is singular or a non-square matrix is projective or
        mixes the discarded dimensions into the kept ones.
    """
    m = np.asarray(matrix, dtype=np.float64)
    rows, cols = m.shape
    if rows == cols:
        return _square_inverse(m)
    if not is_affine(m):
        raise NoninvertibleTransformError(
            "Non-square projective matrices cannot be inverted"
        )
    tgt, src = rows - 1, cols - 1
    linear = m[:-1, :-1]
    translation = m[:-1, -1]
    result = create_zero(src + 1, tgt + 1)
    if tgt > src:
        selected = _independent_rows(linear, src)
        if len(selected) < src:
            raise NoninvertibleTransformError(
                f"Matrix has rank lower than {src}:\n{m}"
            )
        inv = _square_inverse(linear[selected])
        result[:-1, selected] = inv
        result[:-1, -1] = -inv @ translation[selected]
    else:
        used = [j for j in range(src) if np.any(linear[:, j])]
        if len(used) != tgt:
            raise NoninvertibleTransformError(
                f"Cannot recover {src} coordinates from {tgt}:\n{m}"
            )
        inv = _square_inverse(linear[:, used])
        result[:-1, -1] = np.nan
        result[used, :-1] = inv
        result[used, -1] = -inv @ translation
    return result
