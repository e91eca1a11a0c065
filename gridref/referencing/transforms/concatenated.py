# -*- coding: utf-8 -*-
"""
Concatenated Transform - Flat chain of transform steps.

Instances are created by ``factory.concatenate`` only, which guarantees the
chain is flat (no nested concatenation) and never holds two adjacent
linear steps.

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
from typing import Optional, Sequence, Tuple

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import MismatchedDimensionError
from gridref.referencing.transforms.base import LinearTransform, MathTransform


class ConcatenatedTransform(MathTransform):
    """Applies ``steps[0]``, then ``steps[1]``, and so on.

    Parameters
    ----------
    steps : sequence of MathTransform
        At least two steps with chained dimensions.
    """

    def __init__(self, steps: Sequence[MathTransform]) -> None:
        steps = tuple(steps)
        assert len(steps) >= 2, "use the single step directly"
        for before, after in zip(steps, steps[1:]):
            if before.target_dimensions != after.source_dimensions:
                raise MismatchedDimensionError(
                    f"Step with {before.target_dimensions} output dimensions "
                    f"cannot feed a step with {after.source_dimensions} input "
                    f"dimensions"
                )
            assert not (isinstance(before, LinearTransform)
                        and isinstance(after, LinearTransform)), \
                "adjacent linear steps must be merged"
        self._steps = steps
        self._inverse: Optional[MathTransform] = None

    @property
    def steps(self) -> Tuple[MathTransform, ...]:
        return self._steps

    @property
    def source_dimensions(self) -> int:
        return self._steps[0].source_dimensions

    @property
    def target_dimensions(self) -> int:
        return self._steps[-1].target_dimensions

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        for step in self._steps:
            points = step._transform_array(points)
        return points

    def derivative_and_transform(
        self, point: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        p = self._as_point(point)
        jacobian = np.eye(p.size)
        for step in self._steps:
            p, d = step.derivative_and_transform(p)
            jacobian = d @ jacobian
        return p, jacobian

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        return self.derivative_and_transform(point)[1]

    def inverse(self) -> MathTransform:
        if self._inverse is None:
            from gridref.referencing.transforms.factory import concatenate
            inv = concatenate(*[s.inverse() for s in reversed(self._steps)])
            if isinstance(inv, ConcatenatedTransform):
                inv._inverse = self
            self._inverse = inv
        return self._inverse

    def get_domain(self):
        return self._steps[0].get_domain()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConcatenatedTransform):
            return NotImplemented
        return self._steps == other._steps

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        inner = ',\n  '.join(repr(s) for s in self._steps)
        return f"ConcatenatedTransform(\n  {inner})"
