# -*- coding: utf-8 -*-
"""
Referencing Backend Detection - Detect available referencing libraries.

Probes for pyproj (coordinate reference systems and coordinate operations)
and rasterio (specifically ``rasterio.transform.Affine``) at import time.
Provides boolean flags and helper functions that the referencing and grid
modules use to verify required packages are installed before relying on
them.

Dependencies
------------
pyproj
rasterio

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

from gridref.exceptions import DependencyError

_HAS_PYPROJ = False
_HAS_RASTERIO = False

try:
    import pyproj  # noqa: F401
    _HAS_PYPROJ = True
except ImportError:
    pass

try:
    from rasterio.transform import Affine  # noqa: F401
    _HAS_RASTERIO = True
except ImportError:
    pass


def require_pyproj() -> None:
    """Verify that pyproj is installed.

    Raises
    ------
    DependencyError
        If pyproj is not installed.
    """
    if not _HAS_PYPROJ:
        raise DependencyError(
            "Coordinate reference system support requires pyproj. "
            "Install with: pip install pyproj"
        )


def require_rasterio() -> None:
    """Verify that rasterio is installed.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    """
    if not _HAS_RASTERIO:
        raise DependencyError(
            "Affine interoperability requires rasterio. "
            "Install with: pip install rasterio"
        )


def is_affine(value: object) -> bool:
    """Return whether *value* is a ``rasterio.transform.Affine``."""
    if not _HAS_RASTERIO:
        return False
    from rasterio.transform import Affine
    return isinstance(value, Affine)
