# -*- coding: utf-8 -*-
"""
Transforms Module - Coordinate transform algebra.

Provides the ``MathTransform`` hierarchy together with factory functions
that build, combine and simplify transforms: identity, translation, scale
and generic linear transforms, concatenation, pass-through, piecewise
specialisation, 1-D interpolation and dimension separation.

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

from gridref.referencing.transforms.base import MathTransform, LinearTransform
from gridref.referencing.transforms.linear import (
    IdentityTransform,
    TranslationTransform,
    ScaleTransform,
    LinearTransform1D,
    AffineTransform2D,
    ProjectiveTransform,
)
from gridref.referencing.transforms.concatenated import ConcatenatedTransform
from gridref.referencing.transforms.passthrough import PassThroughTransform
from gridref.referencing.transforms.specialized import SpecializableTransform
from gridref.referencing.transforms.interpolated import LinearInterpolator1D
from gridref.referencing.transforms.proj import ProjTransform
from gridref.referencing.transforms.factory import (
    identity,
    linear,
    linear_1d,
    translation,
    uniform_translation,
    scale,
    concatenate,
    pass_through,
    compound,
    specialize,
    interpolate,
    get_matrix,
    get_steps,
    tangent,
    derivative_and_transform,
    get_domain,
)
from gridref.referencing.transforms.separator import (
    separate,
    separate_target,
    required_sources,
)

__all__ = [
    'MathTransform',
    'LinearTransform',
    'IdentityTransform',
    'TranslationTransform',
    'ScaleTransform',
    'LinearTransform1D',
    'AffineTransform2D',
    'ProjectiveTransform',
    'ConcatenatedTransform',
    'PassThroughTransform',
    'SpecializableTransform',
    'LinearInterpolator1D',
    'ProjTransform',
    'identity',
    'linear',
    'linear_1d',
    'translation',
    'uniform_translation',
    'scale',
    'concatenate',
    'pass_through',
    'compound',
    'specialize',
    'interpolate',
    'get_matrix',
    'get_steps',
    'tangent',
    'derivative_and_transform',
    'get_domain',
    'separate',
    'separate_target',
    'required_sources',
]
