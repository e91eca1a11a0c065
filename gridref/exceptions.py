# -*- coding: utf-8 -*-
"""
gridref Exception Hierarchy - Domain-specific exceptions for grid operations.

Provides a small exception hierarchy that lets downstream consumers catch
gridref-specific errors distinctly from Python built-in exceptions. All
gridref exceptions subclass both ``GridrefError`` and the appropriate
built-in exception so existing ``except ValueError`` handlers keep working.

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


class GridrefError(Exception):
    """Base exception for all gridref errors."""


class ValidationError(GridrefError, ValueError):
    """Invalid input data, parameters, or construction arguments.

    Raised for malformed matrices, negative dimension counts, inverted
    extent bounds, overlapping override regions, and other input
    validation failures.
    """


class MismatchedDimensionError(ValidationError):
    """Two objects that must agree on a number of dimensions do not."""


class DisjointExtentError(GridrefError, ValueError):
    """A requested region does not intersect the base grid or envelope."""


class PointOutsideCoverageError(GridrefError, ValueError):
    """A slice position falls outside the grid extent."""


class TransformError(GridrefError, ArithmeticError):
    """A coordinate transform could not be evaluated or resolved.

    Raised when a point is outside the transform domain, when a
    coordinate operation between two CRS cannot be found, or when a
    transform cannot be separated into independent dimensions.
    """


class NoninvertibleTransformError(TransformError):
    """The inverse of a transform does not exist or is not implemented."""


class IncompleteGridGeometryError(GridrefError, RuntimeError):
    """A grid geometry lacks the component an operation requires.

    For example asking for the extent of an envelope-only geometry, or
    the grid-to-CRS transform of an extent-only geometry.
    """


class DerivationStateError(GridrefError, RuntimeError):
    """A grid derivation was used out of order or after completion."""


class DependencyError(GridrefError, ImportError):
    """A required optional dependency is not installed.

    Raised when pyproj or rasterio is needed for an operation but
    is not available in the current environment.
    """
