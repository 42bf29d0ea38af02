"""
Calibration parameter domain models.

Immutable Bethe-Bloch parameter sets and the named-bin bundles they are read from.
"""

from dataclasses import dataclass, field
from typing import Mapping, Sequence

# Labels of the inline configuration row, in positional order
PARAMETER_LABELS = (
    "Use default tiny",
    "Use default full",
    "Set parameters",
    "bb1",
    "bb2",
    "bb3",
    "bb4",
    "bb5",
    "MIP value",
    "Charge exponent",
    "Resolution",
)

# The 8 coefficient labels, shared by the inline row and the hpar histogram bins
COEFFICIENT_LABELS = PARAMETER_LABELS[3:]

USE_DEFAULT_TINY = "Use default tiny"
USE_DEFAULT_FULL = "Use default full"
SET_PARAMETERS = "Set parameters"

# Flags count as true at or above this value
FLAG_THRESHOLD = 1.5

N_COEFFICIENTS = len(COEFFICIENT_LABELS)


@dataclass(frozen=True)
class ParameterSet:
    """Bethe-Bloch coefficients for one mass hypothesis."""

    bb1: float = 0.03209809958934784
    bb2: float = 19.9768009185791
    bb3: float = 2.5266601063857674e-16
    bb4: float = 2.7212300300598145
    bb5: float = 6.080920219421387
    mip: float = 50.0
    exp: float = 2.299999952316284
    res: float = 0.002

    @classmethod
    def default(cls) -> 'ParameterSet':
        """Compiled-in default coefficients."""
        return cls()

    @classmethod
    def from_values(cls, values: Sequence[float]) -> 'ParameterSet':
        """
        Build a ParameterSet from an ordered sequence of coefficients.

        Args:
            values: bb1..bb5, mip, exp, res

        Raises:
            ValueError: If the sequence does not hold exactly 8 values
        """
        values = list(values)
        if len(values) != N_COEFFICIENTS:
            raise ValueError(
                f"The vector of Bethe-Bloch parameters has the wrong size "
                f"{len(values)} while expecting {N_COEFFICIENTS}"
            )
        return cls(*(float(v) for v in values))

    @property
    def curve(self) -> tuple[float, float, float, float, float]:
        """The five ALEPH shape coefficients."""
        return (self.bb1, self.bb2, self.bb3, self.bb4, self.bb5)

    def describe(self) -> str:
        return (
            f"bb1: {self.bb1}, bb2: {self.bb2}, bb3: {self.bb3}, bb4: {self.bb4}, "
            f"bb5: {self.bb5}, mip: {self.mip}, exp: {self.exp}, res: {self.res}"
        )


@dataclass(frozen=True)
class NamedBinBundle:
    """
    Bin contents of a labelled histogram-like object.

    Attributes:
        name: Object name, used for logging
        bins: Bin label -> content
        declared_size: Number of bins declared by the object's axis
    """

    name: str
    bins: Mapping[str, float] = field(default_factory=dict)
    declared_size: int = 0

    def __post_init__(self):
        if self.declared_size < 0:
            raise ValueError(f"declared_size must be non-negative, got {self.declared_size}")

    def coefficients(self) -> list[float]:
        """
        Read the 8 coefficients by label.

        Raises:
            KeyError: If a coefficient bin is missing
            ValueError: If the bin count disagrees with the declared axis size
        """
        if len(self.bins) != self.declared_size:
            raise ValueError(
                f"The input histogram of Bethe-Bloch parameters has the wrong size "
                f"{len(self.bins)} while expecting {self.declared_size}"
            )
        missing = [label for label in COEFFICIENT_LABELS if label not in self.bins]
        if missing:
            raise KeyError(f"Histogram {self.name} has no bins labelled {missing}")
        return [float(self.bins[label]) for label in COEFFICIENT_LABELS]
