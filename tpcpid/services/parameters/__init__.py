"""
Parameter services.

Sources of calibration coefficients and the layered resolver.
"""

from .sources import ParameterSource, RootFileSource, CcdbSource, bundle_from_histogram
from .resolver import ParameterResolver

__all__ = [
    "ParameterSource",
    "RootFileSource",
    "CcdbSource",
    "bundle_from_histogram",
    "ParameterResolver",
]
