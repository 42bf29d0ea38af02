"""
Bethe-Bloch calibration model for the TPC energy loss.

Pure functions over scalars or numpy/awkward arrays: expected dE/dx for a
mass hypothesis, its resolution estimate, and the normalised deviation.
Degenerate inputs (zero or negative momentum) are not guarded and produce
non-finite values instead of raising.
"""
import numpy as np

from tpcpid.domain.species import Species
from tpcpid.domain.parameters import ParameterSet


def bethe_bloch_aleph(bg, bb1: float, bb2: float, bb3: float, bb4: float, bb5: float):
    """ALEPH parametrisation of the energy-loss curve as a function of beta*gamma."""
    bg = np.asarray(bg, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        beta = bg / np.sqrt(1.0 + bg * bg)
        aa = np.power(beta, bb4)
        bb = np.log(bb3 + np.power(bg, -bb5))
        return (bb2 - aa - bb) * bb1 / aa


def _charge_factor(charge: float, params: ParameterSet):
    with np.errstate(invalid="ignore"):
        return np.power(np.float64(charge), params.exp)


def expected_signal(species: Species, momentum, charge: float, params: ParameterSet):
    """
    Expected average dE/dx for a track under a mass hypothesis.

    Args:
        species: Mass hypothesis; its mass over charge normalises the momentum
        momentum: Momentum at the TPC inner wall (scalar or array)
        charge: Charge used in the charge^exp scaling
        params: Calibration coefficients

    Returns:
        Expected signal with the shape of ``momentum``
    """
    momentum = np.asarray(momentum, dtype=np.float64)
    bg = momentum / species.mass_over_charge
    with np.errstate(invalid="ignore", over="ignore"):
        return params.mip * bethe_bloch_aleph(bg, *params.curve) * _charge_factor(charge, params)


def signal_resolution(species: Species, momentum, charge: float, params: ParameterSet):
    """
    Resolution of the expected dE/dx.

    Shift of the expected signal under a momentum smearing of
    ``res * sqrt(expected)``.
    """
    momentum = np.asarray(momentum, dtype=np.float64)
    nominal = expected_signal(species, momentum, charge, params)
    with np.errstate(invalid="ignore", over="ignore"):
        delta_p = params.res * np.sqrt(nominal)
        shifted = expected_signal(species, momentum * (1.0 + delta_p), charge, params)
        return np.abs(shifted - nominal)


def normalized_deviation(measured, expected, resolution):
    """(measured - expected) / resolution, without guarding a zero resolution."""
    measured = np.asarray(measured, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return (measured - expected) / resolution
