"""
Species domain model.

The nine mass hypotheses with their fixed physical constants.
"""

from enum import Enum


class OutputMode(Enum):
    """Output representation of a PID table."""

    COMPACT = "compact"
    FULL = "full"

    def __str__(self) -> str:
        return self.value


class Species(Enum):
    """
    Mass hypotheses in enumeration order.

    Each member carries (label, display name, mass [GeV/c^2], charge [e]).
    """

    ELECTRON = ("El", "Electron", 0.00051099895, 1)
    MUON = ("Mu", "Muon", 0.1056583755, 1)
    PION = ("Pi", "Pion", 0.13957039, 1)
    KAON = ("Ka", "Kaon", 0.493677, 1)
    PROTON = ("Pr", "Proton", 0.93827208816, 1)
    DEUTERON = ("De", "Deuteron", 1.87561294257, 1)
    TRITON = ("Tr", "Triton", 2.80892113298, 1)
    HELIUM3 = ("He", "Helium3", 2.80839160743, 2)
    ALPHA = ("Al", "Alpha", 3.7273794066, 2)

    def __init__(self, label: str, display_name: str, mass: float, charge: int):
        self.label = label
        self.display_name = display_name
        self.mass = mass
        self.charge = charge

    @property
    def mass_over_charge(self) -> float:
        """Mass divided by the absolute charge."""
        return self.mass / abs(self.charge)

    def table_name(self, mode: OutputMode) -> str:
        """Name of the output table for this species in the given mode."""
        if mode is OutputMode.COMPACT:
            return f"pidTPCLf{self.label}"
        return f"pidTPCLfFull{self.label}"

    @property
    def table_names(self) -> tuple[str, str]:
        """Compact and full table names."""
        return self.table_name(OutputMode.COMPACT), self.table_name(OutputMode.FULL)

    @classmethod
    def from_label(cls, label: str) -> 'Species':
        """
        Look up a species by its short label (e.g. "Pi").

        Raises:
            ValueError: If the label is unknown
        """
        for species in cls:
            if species.label == label:
                return species
        known = [s.label for s in cls]
        raise ValueError(f"Unknown species label '{label}'. Known labels: {known}")

    def __str__(self) -> str:
        return self.label


ALL_TABLE_NAMES = frozenset(
    name for species in Species for name in species.table_names
)
