# -*- coding: utf-8 -*-
"""
Grid Module - Grid extents, grid geometries and grid derivation.

Key Classes
-----------
- GridExtent: Inclusive integer cell bounds
- GridGeometry: Extent, grid-to-CRS transform, CRS and envelope
- GridDerivation: Single-use builder of derived grid geometries

Usage
-----
    >>> from gridref import GridExtent, GridGeometry, GeneralEnvelope
    >>> from gridref import PixelInCell
    >>> grid = GridGeometry(GridExtent.from_size(200, 180),
    ...                     PixelInCell.CELL_CORNER,
    ...                     [[1, 0, 80], [0, -1, 90], [0, 0, 1]],
    ...                     'OGC:CRS84')
    >>> aoi = GeneralEnvelope([140, -90], [-179, 90], 'OGC:CRS84')
    >>> grid.derive().subgrid(aoi).build().envelope.to_tuple()
    ((140.0, 181.0), (-90.0, 90.0))

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

from gridref.grid.extent import GridExtent
from gridref.grid.geometry import GridGeometry
from gridref.grid.derivation import GridDerivation

__all__ = [
    'GridExtent',
    'GridGeometry',
    'GridDerivation',
]
