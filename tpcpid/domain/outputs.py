"""
Output domain models.

Compact (quantised) binning and the per-table column layout.
"""

from dataclasses import dataclass, field
from typing import Mapping

import numpy as np

from .species import Species, OutputMode


class TinyBinning:
    """
    Reduced-precision storage of an n-sigma value in one signed byte.

    254 bins over [-6.35, 6.35]; values outside land in the under/overflow bins.
    """

    binned_t = np.int8
    nbins = (1 << 8 * np.dtype(np.int8).itemsize) - 2
    overflow_bin = nbins >> 1
    underflow_bin = -(nbins >> 1)
    binned_max = 6.35
    binned_min = -6.35
    bin_width = (binned_max - binned_min) / nbins

    @classmethod
    def pack(cls, values) -> np.ndarray:
        """Quantise values into int8 bins, rounding half away from zero."""
        values = np.asarray(values, dtype=np.float64)
        scaled = values / cls.bin_width
        with np.errstate(invalid="ignore"):
            rounded = np.where(values >= 0, scaled + 0.5, scaled - 0.5)
            packed = np.trunc(rounded)
            packed = np.where(values <= cls.binned_min, cls.underflow_bin, packed)
            packed = np.where(values >= cls.binned_max, cls.overflow_bin, packed)
            packed = np.where(np.isnan(values), cls.underflow_bin, packed)
        return packed.astype(cls.binned_t)

    @classmethod
    def unpack(cls, binned) -> np.ndarray:
        """Map int8 bins back to n-sigma values."""
        return np.asarray(binned, dtype=np.float32) * np.float32(cls.bin_width)


def compact_column(species: Species) -> str:
    return f"tpcNSigmaStore{species.label}"


def full_columns(species: Species) -> tuple[str, str]:
    """Resolution and n-sigma column names of the full table."""
    return f"tpcExpSigma{species.label}", f"tpcNSigma{species.label}"


def table_columns(species: Species, mode: OutputMode) -> tuple[str, ...]:
    if mode is OutputMode.COMPACT:
        return (compact_column(species),)
    return full_columns(species)


@dataclass(frozen=True)
class TableChunk:
    """Columns appended to one output table for one track collection."""

    table_name: str
    columns: Mapping[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that all columns have the same length."""
        if not self.table_name:
            raise ValueError("table_name cannot be empty")
        lengths = {name: len(values) for name, values in self.columns.items()}
        if len(set(lengths.values())) > 1:
            raise ValueError(f"Columns of {self.table_name} differ in length: {lengths}")

    @property
    def row_count(self) -> int:
        for values in self.columns.values():
            return len(values)
        return 0
