# -*- coding: utf-8 -*-
"""
gridref - Grid geometry and coordinate transform library.

Building blocks for describing where the cells of a geospatial raster lie
in a coordinate reference system, and for deriving sub-grids of such
rasters from areas of interest, other grids, slices and resolutions.

Dependencies
------------
numpy
pyproj
rasterio (optional)

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

__version__ = "0.1.0"
__author__ = "Duane Smalley"

from gridref.exceptions import (
    GridrefError,
    ValidationError,
    MismatchedDimensionError,
    DisjointExtentError,
    PointOutsideCoverageError,
    TransformError,
    NoninvertibleTransformError,
    IncompleteGridGeometryError,
    DerivationStateError,
    DependencyError,
)
from gridref.vocabulary import (
    PixelInCell,
    GridRoundingMode,
    GridClippingMode,
    DimensionNameType,
    GridComponent,
)
from gridref.referencing.envelope import GeneralEnvelope
from gridref.grid import GridExtent, GridGeometry, GridDerivation

__all__ = [
    'GridrefError',
    'ValidationError',
    'MismatchedDimensionError',
    'DisjointExtentError',
    'PointOutsideCoverageError',
    'TransformError',
    'NoninvertibleTransformError',
    'IncompleteGridGeometryError',
    'DerivationStateError',
    'DependencyError',
    'PixelInCell',
    'GridRoundingMode',
    'GridClippingMode',
    'DimensionNameType',
    'GridComponent',
    'GeneralEnvelope',
    'GridExtent',
    'GridGeometry',
    'GridDerivation',
]
