"""
Track-related domain models.

Read-only track collections as consumed by the PID pipeline.
"""

from dataclasses import dataclass

import awkward as ak
import numpy as np

REQUIRED_FIELDS = ("tpcInnerParam", "tpcSignal")


@dataclass(frozen=True)
class TrackCollection:
    """
    A chunk of tracks read from the input.

    Attributes:
        tracks: Awkward array of track records
        chunk_index: Position of this chunk in the input sequence
    """

    tracks: ak.Array
    chunk_index: int = 0

    def __post_init__(self):
        """Validate the track collection."""
        if self.chunk_index < 0:
            raise ValueError(f"chunk_index must be non-negative, got {self.chunk_index}")
        missing = [name for name in REQUIRED_FIELDS if name not in self.tracks.fields]
        if missing:
            raise ValueError(f"Track collection is missing required fields: {missing}")

    def __len__(self) -> int:
        return len(self.tracks)

    @property
    def momentum(self) -> np.ndarray:
        """Momentum at the TPC inner wall."""
        return self.column("tpcInnerParam", dtype=np.float64)

    @property
    def signal(self) -> np.ndarray:
        """Measured TPC dE/dx."""
        return self.column("tpcSignal", dtype=np.float64)

    def column(self, name: str, dtype=None) -> np.ndarray:
        """
        Flat numpy view of a per-track column.

        Raises:
            KeyError: If the column is absent
        """
        if name not in self.tracks.fields:
            raise KeyError(f"Track collection has no column '{name}'")
        values = ak.to_numpy(self.tracks[name])
        if dtype is not None:
            values = values.astype(dtype, copy=False)
        return values

    @classmethod
    def from_columns(cls, columns: dict, chunk_index: int = 0) -> 'TrackCollection':
        """Create a TrackCollection from a dict of equally long arrays."""
        return cls(tracks=ak.zip(columns, depth_limit=1), chunk_index=chunk_index)
