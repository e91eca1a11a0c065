# -*- coding: utf-8 -*-
"""
Transform Factory - Create, combine and simplify math transforms.

Every transform a caller obtains should come from one of these functions.
Each picks the cheapest adequate representation (identity when a no-op,
specialised 1-D and 2-D affine classes, generic matrix otherwise) and keeps
transform chains in canonical form: concatenations are flat and never hold
two adjacent linear steps.

Dependencies
------------
numpy
rasterio (optional, to accept ``rasterio.transform.Affine`` in
``get_matrix``)

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
from typing import Iterable, List, Optional, Sequence, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import (
    MismatchedDimensionError,
    TransformError,
    ValidationError,
)
from gridref.referencing import matrix as matrices
from gridref.referencing._backend import is_affine as _is_rasterio_affine
from gridref.referencing.transforms.base import LinearTransform, MathTransform
from gridref.referencing.transforms.concatenated import ConcatenatedTransform
from gridref.referencing.transforms.interpolated import LinearInterpolator1D
from gridref.referencing.transforms.linear import (
    AffineTransform2D,
    IdentityTransform,
    LinearTransform1D,
    ProjectiveTransform,
    ScaleTransform,
    TranslationTransform,
    affine_to_matrix,
)
from gridref.referencing.transforms.passthrough import PassThroughTransform
from gridref.referencing.transforms.specialized import SpecializableTransform


# ---------------------------------------------------------------------------
# Linear transforms
# ---------------------------------------------------------------------------

def identity(dimension: int) -> LinearTransform:
    """Identity transform of the given dimension.

    Raises
    ------
    ValidationError
        If *dimension* is not positive.
    """
    return IdentityTransform(dimension)


def linear(matrix) -> LinearTransform:
    """Linear transform for a homogeneous matrix.

    Parameters
    ----------
    matrix : array_like or LinearTransform or rasterio.transform.Affine
        ``(M + 1, N + 1)`` matrix. Non-square matrices are accepted.

    Returns
    -------
    LinearTransform
        ``IdentityTransform`` for an identity matrix, ``LinearTransform1D``
        or ``AffineTransform2D`` for 1-D and 2-D affine matrices,
        ``TranslationTransform`` or ``ScaleTransform`` for pure translations
        and scales, ``ProjectiveTransform`` otherwise.

    Raises
    ------
    ValidationError
        If the matrix is malformed.
    """
    if isinstance(matrix, LinearTransform):
        return matrix
    if _is_rasterio_affine(matrix):
        matrix = affine_to_matrix(matrix)
    m = matrices.validate(matrix)
    rows, cols = m.shape
    if rows == cols:
        n = rows - 1
        if matrices.is_identity(m):
            return IdentityTransform(n)
        if matrices.is_affine(m):
            if n == 1:
                return LinearTransform1D(m[0, 0], m[0, 1])
            if n == 2:
                return AffineTransform2D(m)
            if matrices.is_translation(m):
                return TranslationTransform(m[:-1, -1])
            if matrices.is_scale(m):
                return ScaleTransform(np.diag(m)[:-1])
    return ProjectiveTransform(m)


def linear_1d(scale: float, offset: float) -> LinearTransform:
    """One-dimensional ``y = scale * x + offset``."""
    return linear([[scale, offset], [0.0, 1.0]])


def translation(vector: Sequence[float]) -> LinearTransform:
    """Transform adding *vector* to every point."""
    v = np.asarray(vector, dtype=np.float64).ravel()
    m = matrices.create_identity(v.size + 1)
    m[:-1, -1] = v
    return linear(m)


def uniform_translation(dimension: int, offset: float) -> LinearTransform:
    """Transform adding the same *offset* to every coordinate."""
    return translation([offset] * dimension)


def scale(factors: Sequence[float]) -> LinearTransform:
    """Transform multiplying each coordinate by its factor."""
    f = np.asarray(factors, dtype=np.float64).ravel()
    m = matrices.create_identity(f.size + 1)
    m[np.arange(f.size), np.arange(f.size)] = f
    return linear(m)


def get_matrix(
    transform, position: Optional[Sequence[float]] = None
) -> Optional[np.ndarray]:
    """Matrix of a linear transform, or tangent matrix at *position*.

    Parameters
    ----------
    transform : MathTransform or rasterio.transform.Affine
        Transform to inspect.
    position : sequence of float, optional
        Source point where a non-linear transform is linearised.

    Returns
    -------
    np.ndarray or None
        The homogeneous matrix, or ``None`` when *transform* is not linear
        and no *position* was given.

    Raises
    ------
    TransformError
        If the derivative cannot be computed at *position*.
    """
    if _is_rasterio_affine(transform):
        return affine_to_matrix(transform)
    if isinstance(transform, LinearTransform):
        return transform.matrix
    if position is None:
        return None
    p = np.asarray(position, dtype=np.float64)
    point, jacobian = derivative_and_transform(transform, p)
    return matrices.create_affine(jacobian, point - jacobian @ p)


def tangent(transform: MathTransform, point: Sequence[float]) -> LinearTransform:
    """Linear approximation of *transform* in the vicinity of *point*."""
    return linear(get_matrix(transform, point))


def derivative_and_transform(
    transform: MathTransform, point: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray]:
    """Transform *point* and compute the Jacobian there.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        ``(transformed_point, jacobian)``; the Jacobian has shape
        ``(target_dimensions, source_dimensions)``.

    Raises
    ------
    MismatchedDimensionError
        If *point* does not have ``source_dimensions`` coordinates.
    TransformError
        If *point* is outside the transform domain.
    """
    p = np.asarray(point, dtype=np.float64)
    result, jacobian = transform.derivative_and_transform(p)
    if np.all(np.isfinite(p)) and not (np.all(np.isfinite(result))
                                       and np.all(np.isfinite(jacobian))):
        raise TransformError(
            f"Point {p.tolist()} is outside the domain of {transform!r}"
        )
    return result, jacobian


def get_domain(transform: MathTransform):
    """Domain of validity of *transform*, or ``None`` if unbounded."""
    return transform.get_domain()


# ---------------------------------------------------------------------------
# Concatenation
# ---------------------------------------------------------------------------

def get_steps(transform: Optional[MathTransform]) -> List[MathTransform]:
    """Flat list of the steps of *transform*."""
    if transform is None:
        return []
    if isinstance(transform, ConcatenatedTransform):
        return list(transform.steps)
    return [transform]


_NOT_MERGED = object()


def _try_merge(first: MathTransform, second: MathTransform):
    """Merged form of two adjacent steps, ``None`` if they cancel out."""
    if (isinstance(first, LinearTransform)
            and isinstance(second, LinearTransform)):
        return linear(second._matrix @ first._matrix)
    if (isinstance(first, PassThroughTransform)
            and isinstance(second, PassThroughTransform)
            and first.first == second.first
            and first.trailing == second.trailing):
        return pass_through(
            first.first,
            concatenate(first.sub_transform, second.sub_transform),
            first.trailing,
        )
    if (first.source_dimensions == second.target_dimensions
            and first.target_dimensions == second.source_dimensions):
        try:
            if first.inverse() == second:
                return None
        except TransformError:
            pass
    return _NOT_MERGED


def _simplify(steps: Iterable[MathTransform]) -> List[MathTransform]:
    result: List[MathTransform] = []
    for step in steps:
        if step.is_identity:
            continue
        result.append(step)
        while len(result) >= 2:
            merged = _try_merge(result[-2], result[-1])
            if merged is _NOT_MERGED:
                break
            del result[-2:]
            if merged is not None and not merged.is_identity:
                result.extend(get_steps(merged))
    return result


def _concatenate(first: MathTransform, second: MathTransform) -> MathTransform:
    if first.target_dimensions != second.source_dimensions:
        raise MismatchedDimensionError(
            f"Cannot concatenate a transform with {first.target_dimensions} "
            f"output dimensions and a transform with "
            f"{second.source_dimensions} input dimensions"
        )
    if first.is_identity:
        return second
    if second.is_identity:
        return first
    steps = _simplify(get_steps(first) + get_steps(second))
    if not steps:
        return identity(first.source_dimensions)
    if len(steps) == 1:
        return steps[0]
    return ConcatenatedTransform(steps)


def concatenate(*transforms: MathTransform) -> MathTransform:
    """Transform applying each argument in order.

    Nested concatenations are flattened, adjacent linear steps are merged
    into one matrix, adjacent pass-through steps sharing the same layout
    are merged, and a step followed by its own inverse is removed.

    Raises
    ------
    MismatchedDimensionError
        If the output dimension of a transform differs from the input
        dimension of the next one.
    """
    if not transforms:
        raise ValidationError("At least one transform is required")
    result = transforms[0]
    for transform in transforms[1:]:
        result = _concatenate(result, transform)
    return result


# ---------------------------------------------------------------------------
# Structural combinators
# ---------------------------------------------------------------------------

def pass_through(
    first: int, sub_transform: MathTransform, trailing: int
) -> MathTransform:
    """Apply *sub_transform* between unchanged leading and trailing coordinates.

    Parameters
    ----------
    first : int
        Number of leading coordinates passed through unchanged.
    sub_transform : MathTransform
        Transform applied to the middle block of coordinates.
    trailing : int
        Number of trailing coordinates passed through unchanged.

    Raises
    ------
    ValidationError
        If *first* or *trailing* is negative.
    """
    if first < 0 or trailing < 0:
        raise ValidationError(
            f"first and trailing must be non-negative, got "
            f"({first}, {trailing})"
        )
    if first == 0 and trailing == 0:
        return sub_transform
    if sub_transform.is_identity:
        return identity(first + sub_transform.source_dimensions + trailing)
    m = get_matrix(sub_transform)
    if m is not None and matrices.is_affine(m):
        s = sub_transform.source_dimensions
        t = sub_transform.target_dimensions
        src = first + s + trailing
        tgt = first + t + trailing
        expanded = matrices.create_zero(tgt + 1, src + 1)
        expanded[np.arange(first), np.arange(first)] = 1.0
        expanded[first:first + t, first:first + s] = m[:-1, :-1]
        expanded[first:first + t, src] = m[:-1, -1]
        expanded[np.arange(first + t, tgt), np.arange(first + s, src)] = 1.0
        return linear(expanded)
    if isinstance(sub_transform, PassThroughTransform):
        return pass_through(
            first + sub_transform.first,
            sub_transform.sub_transform,
            trailing + sub_transform.trailing,
        )
    return PassThroughTransform(first, sub_transform, trailing)


def compound(*components: MathTransform) -> MathTransform:
    """Block-diagonal transform applying each component to its own slice.

    Examples
    --------
    >>> t = compound(translation([1.0, 2.0]), scale([3.0]))
    >>> t.transform([0.0, 0.0, 1.0])
    array([1., 2., 3.])
    """
    if not components:
        raise ValidationError("At least one component is required")
    sources = [c.source_dimensions for c in components]
    targets = [c.target_dimensions for c in components]
    steps = []
    for k, component in enumerate(components):
        steps.append(pass_through(sum(targets[:k]), component,
                                  sum(sources[k + 1:])))
    return concatenate(*steps)


def specialize(
    global_transform: MathTransform,
    overrides: Iterable[Tuple[object, MathTransform]],
) -> MathTransform:
    """Global transform replaced by regional overrides where they apply.

    Returns *global_transform* itself when *overrides* is empty. See
    ``SpecializableTransform`` for the region rules.
    """
    overrides = list(overrides)
    if not overrides:
        return global_transform
    return SpecializableTransform(global_transform, overrides)


def interpolate(
    preimage: Optional[Sequence[float]], values: Sequence[float]
) -> MathTransform:
    """Piecewise-linear 1-D transform from *preimage* to *values*.

    Parameters
    ----------
    preimage : sequence of float or None
        Strictly increasing inputs. ``None`` means ``0, 1, 2, ...``.
    values : sequence of float
        Outputs at each preimage value.

    Returns
    -------
    MathTransform
        Identity when values equal the preimage, a linear transform when
        all segments share the same slope, ``LinearInterpolator1D``
        otherwise.
    """
    y = np.asarray(values, dtype=np.float64).ravel()
    if preimage is None:
        x = np.arange(y.size, dtype=np.float64)
    else:
        x = np.asarray(preimage, dtype=np.float64).ravel()
    if x.size == y.size == 1:
        return translation([y[0] - x[0]])
    interpolator = LinearInterpolator1D(x, y)
    if np.array_equal(x, y):
        return identity(1)
    slopes = np.diff(y) / np.diff(x)
    if np.all(slopes == slopes[0]):
        return linear_1d(slopes[0], y[0] - slopes[0] * x[0])
    return interpolator
