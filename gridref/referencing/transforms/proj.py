# -*- coding: utf-8 -*-
"""
PROJ Transform - Non-linear coordinate operation backed by pyproj.

Wraps a ``pyproj.Transformer`` between two coordinate reference systems as
a ``MathTransform``. Coordinates follow the axis order declared by each CRS
(``always_xy=False``), consistent with envelopes and grid-to-CRS transforms
which are expressed in CRS axis order. Derivatives are estimated by central
finite differences.

Dependencies
------------
pyproj

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
from typing import Optional, TYPE_CHECKING

# Third-party
import numpy as np

# gridref internal
from gridref.exceptions import TransformError
from gridref.referencing._backend import require_pyproj
from gridref.referencing.transforms.base import MathTransform

if TYPE_CHECKING:
    import pyproj

RELATIVE_STEP = 1e-7
"""Finite-difference step, relative to the coordinate magnitude."""


class ProjTransform(MathTransform):
    """Coordinate operation between two ``pyproj.CRS``.

    Parameters
    ----------
    source_crs : pyproj.CRS
        Source coordinate reference system.
    target_crs : pyproj.CRS
        Target coordinate reference system.

    Raises
    ------
    DependencyError
        If pyproj is not installed.
    TransformError
        If pyproj cannot build a transformer between the two CRS.
    """

    def __init__(
        self, source_crs: 'pyproj.CRS', target_crs: 'pyproj.CRS'
    ) -> None:
        require_pyproj()
        import pyproj
        from pyproj.exceptions import ProjError

        self.source_crs = source_crs
        self.target_crs = target_crs
        try:
            self._transformer = pyproj.Transformer.from_crs(
                source_crs, target_crs, always_xy=False
            )
        except ProjError as exc:
            raise TransformError(
                f"No coordinate operation from {source_crs.name} to "
                f"{target_crs.name}: {exc}"
            ) from exc
        self._source_dim = len(source_crs.axis_info)
        self._target_dim = len(target_crs.axis_info)
        self._inverse: Optional[MathTransform] = None

    @property
    def source_dimensions(self) -> int:
        return self._source_dim

    @property
    def target_dimensions(self) -> int:
        return self._target_dim

    def _transform_array(self, points: np.ndarray) -> np.ndarray:
        n = max(self._source_dim, self._target_dim)
        columns = [points[:, i] for i in range(self._source_dim)]
        columns += [np.zeros(points.shape[0])] * (n - self._source_dim)
        result = self._transformer.transform(*columns, errcheck=False)
        out = np.column_stack(result[:self._target_dim]).astype(np.float64)
        out[~np.isfinite(out)] = np.nan
        return out

    def _derivative(self, point: np.ndarray) -> np.ndarray:
        steps = RELATIVE_STEP * np.maximum(np.abs(point), 1.0)
        probes = np.repeat(point[np.newaxis, :], 2 * point.size, axis=0)
        for i, h in enumerate(steps):
            probes[2 * i, i] += h
            probes[2 * i + 1, i] -= h
        values = self._transform_array(probes)
        jacobian = (values[0::2] - values[1::2]).T / (2.0 * steps)
        if not np.all(np.isfinite(jacobian)):
            raise TransformError(
                f"Cannot compute derivative at {point.tolist()} from "
                f"{self.source_crs.name} to {self.target_crs.name}"
            )
        return jacobian

    def inverse(self) -> MathTransform:
        if self._inverse is None:
            inv = ProjTransform(self.target_crs, self.source_crs)
            inv._inverse = self
            self._inverse = inv
        return self._inverse

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjTransform):
            return NotImplemented
        return (self.source_crs == other.source_crs
                and self.target_crs == other.target_crs)

    def __hash__(self) -> int:
        return hash((self.source_crs.to_string(), self.target_crs.to_string()))

    def __repr__(self) -> str:
        return (f"ProjTransform({self.source_crs.name!r} -> "
                f"{self.target_crs.name!r})")
