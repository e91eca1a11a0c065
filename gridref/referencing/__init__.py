# -*- coding: utf-8 -*-
"""
Referencing Module - Matrices, transforms, envelopes and CRS helpers.

Modules
-------
- matrix: Homogeneous matrix utilities
- transforms: Coordinate transform algebra
- envelope: Axis-aligned boxes with wraparound support
- crs: pyproj-backed CRS helpers and coordinate operations
- wraparound: Period shifting rules for wraparound axes

Dependencies
------------
numpy
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

from gridref.referencing.envelope import GeneralEnvelope, transform_envelope
from gridref.referencing.crs import (
    as_crs,
    equals_ignore_metadata,
    find_operation,
    wraparound_periods,
)

__all__ = [
    'GeneralEnvelope',
    'transform_envelope',
    'as_crs',
    'equals_ignore_metadata',
    'find_operation',
    'wraparound_periods',
]
