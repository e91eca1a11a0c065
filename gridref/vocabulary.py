# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for gridref.

Defines the controlled vocabularies used across the referencing and grid
packages: cell anchors, rounding and clipping policies for grid
derivation, dimension labels and the component flags of a grid geometry.

Author
------
Steven Siebert

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

from enum import Enum, IntFlag


class PixelInCell(Enum):
    """Which point of a grid cell integer grid coordinates refer to.

    ``CELL_CENTER`` maps integer grid coordinates to the middle of each
    cell, ``CELL_CORNER`` to the low corner. The two conventions differ by
    a translation of half a cell in every grid dimension.
    """

    CELL_CENTER = "cell_center"
    CELL_CORNER = "cell_corner"

    @property
    def offset(self) -> float:
        """Position of the anchor relative to the cell low corner."""
        return 0.5 if self is PixelInCell.CELL_CENTER else 0.0


class GridRoundingMode(Enum):
    """How fractional cell indices are turned into an integer extent."""

    NEAREST = "nearest"
    ENCLOSING = "enclosing"
    CONTAINED = "contained"


class GridClippingMode(Enum):
    """How a derived extent is clipped against the base extent.

    ``STRICT`` clips the requested region and its margin to the base
    extent. ``BORDER_EXPANSION`` clips the requested region but lets the
    margin extend beyond the base extent. ``NONE`` does not clip.
    """

    STRICT = "strict"
    BORDER_EXPANSION = "border_expansion"
    NONE = "none"


class DimensionNameType(Enum):
    """Bookkeeping labels attached to grid extent dimensions."""

    COLUMN = "column"
    ROW = "row"
    VERTICAL = "vertical"
    TIME = "time"
    TRACK = "track"
    SAMPLE = "sample"
    LINE = "line"


class GridComponent(IntFlag):
    """Components a grid geometry may or may not carry."""

    CRS = 1
    ENVELOPE = 2
    EXTENT = 4
    GRID_TO_CRS = 8
    RESOLUTION = 16
