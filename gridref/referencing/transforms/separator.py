# -*- coding: utf-8 -*-
"""
Transform Separator - Extract the sub-transform acting on some dimensions.

Given a transform and a subset of its source (or target) dimensions,
returns the transform restricted to those dimensions together with the
dimensions it produces (or consumes). Separation sees through linear,
pass-through and concatenated transforms; any other transform can only be
taken as a whole.

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
from typing import List, Sequence, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import TransformError, ValidationError
from gridref.referencing import matrix as matrices
from gridref.referencing.transforms.base import LinearTransform, MathTransform
from gridref.referencing.transforms.concatenated import ConcatenatedTransform
from gridref.referencing.transforms.factory import (
    concatenate,
    identity,
    linear,
    pass_through,
)
from gridref.referencing.transforms.passthrough import PassThroughTransform


def _check_dimensions(dims: Sequence[int], upper: int) -> List[int]:
    result = sorted(set(int(d) for d in dims))
    if not result:
        raise ValidationError("At least one dimension must be selected")
    if result[0] < 0 or result[-1] >= upper:
        raise ValidationError(
            f"Dimensions {result} out of range [0, {upper})"
        )
    return result


def required_sources(
    transform: MathTransform, target_dimensions: Sequence[int]
) -> List[int]:
    """Source dimensions that the given target dimensions depend on."""
    targets = _check_dimensions(target_dimensions,
                                transform.target_dimensions)
    if isinstance(transform, LinearTransform):
        m = transform._matrix
        used = np.any(m[targets, :-1] != 0, axis=0) | (m[-1, :-1] != 0)
        return [int(j) for j in np.nonzero(used)[0]]
    if isinstance(transform, PassThroughTransform):
        f = transform.first
        sub = transform.sub_transform
        s, t = sub.source_dimensions, sub.target_dimensions
        sources = set()
        for d in targets:
            if d < f:
                sources.add(d)
            elif d < f + t:
                sources.update(range(f, f + s))
            else:
                sources.add(d - t + s)
        return sorted(sources)
    if isinstance(transform, ConcatenatedTransform):
        dims = targets
        for step in reversed(transform.steps):
            dims = required_sources(step, dims)
            if not dims:
                break
        return dims
    return list(range(transform.source_dimensions))


def separate(
    transform: MathTransform, source_dimensions: Sequence[int]
) -> Tuple[MathTransform, Tuple[int, ...]]:
    """Restrict *transform* to the given source dimensions.

    Parameters
    ----------
    transform : MathTransform
        Transform to separate.
    source_dimensions : sequence of int
        Source dimensions to keep.

    Returns
    -------
    Tuple[MathTransform, Tuple[int, ...]]
        The separated transform and the target dimensions of *transform*
        it computes, in increasing order.

    Raises
    ------
    TransformError
        If the selected source dimensions do not drive any target
        dimension independently of the others.
    """
    sources = _check_dimensions(source_dimensions,
                                transform.source_dimensions)
    if len(sources) == transform.source_dimensions:
        return transform, tuple(range(transform.target_dimensions))
    if isinstance(transform, LinearTransform):
        m = transform._matrix
        others = [j for j in range(transform.source_dimensions)
                  if j not in sources]
        if np.any(m[-1, others] != 0):
            raise TransformError(
                "Projective transform cannot be separated"
            )
        rows = [i for i in range(transform.target_dimensions)
                if not np.any(m[i, others])]
        if not rows:
            raise TransformError(
                f"No target dimension depends only on source dimensions "
                f"{sources}"
            )
        sub = m[rows + [m.shape[0] - 1]][:, sources + [m.shape[1] - 1]]
        return linear(sub), tuple(rows)
    if isinstance(transform, PassThroughTransform):
        f = transform.first
        sub = transform.sub_transform
        s, t = sub.source_dimensions, sub.target_dimensions
        before = [d for d in sources if d < f]
        inside = [d - f for d in sources if f <= d < f + s]
        after = [d for d in sources if d >= f + s]
        shifted_after = [d - s + t for d in after]
        if not inside:
            return (identity(len(sources)),
                    tuple(before + shifted_after))
        sub_part, sub_targets = separate(sub, inside)
        part = pass_through(len(before), sub_part, len(after))
        return part, tuple(before + [f + k for k in sub_targets]
                           + shifted_after)
    if isinstance(transform, ConcatenatedTransform):
        parts = []
        dims: Sequence[int] = sources
        for step in transform.steps:
            part, dims = separate(step, dims)
            parts.append(part)
        return concatenate(*parts), tuple(dims)
    raise TransformError(
        f"{type(transform).__name__} cannot be separated on source "
        f"dimensions {sources}"
    )


def separate_target(
    transform: MathTransform, target_dimensions: Sequence[int]
) -> Tuple[MathTransform, Tuple[int, ...]]:
    """Restrict *transform* to the given target dimensions.

    Returns
    -------
    Tuple[MathTransform, Tuple[int, ...]]
        A transform from the required source dimensions to exactly the
        requested target dimensions (in increasing order), and those
        source dimensions.

    Raises
    ------
    TransformError
        If the requested target dimensions cannot be isolated.
    """
    targets = _check_dimensions(target_dimensions,
                                transform.target_dimensions)
    sources = required_sources(transform, targets)
    if not sources:
        raise TransformError(
            f"Target dimensions {targets} do not depend on any source "
            f"dimension"
        )
    part, produced = separate(transform, sources)
    missing = set(targets) - set(produced)
    if missing:
        raise TransformError(
            f"Target dimensions {sorted(missing)} cannot be isolated"
        )
    if list(produced) != targets:
        select = matrices.create_dimension_select(
            len(produced), [produced.index(d) for d in targets]
        )
        part = concatenate(part, linear(select))
    return part, tuple(sources)
