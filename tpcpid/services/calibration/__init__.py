"""
Calibration services.

Energy-loss model and its resolution estimate.
"""

from .bethe_bloch import (
    bethe_bloch_aleph,
    expected_signal,
    signal_resolution,
    normalized_deviation,
)

__all__ = [
    "bethe_bloch_aleph",
    "expected_signal",
    "signal_resolution",
    "normalized_deviation",
]
