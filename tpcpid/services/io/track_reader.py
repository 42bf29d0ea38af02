"""
TrackReader service - Reads track columns from ROOT trees.

Single responsibility: turn an AO2D-like tree into TrackCollection chunks.
"""

import logging
from typing import Iterator

import awkward as ak
import uproot
from tqdm import tqdm

from tpcpid.domain.species import Species
from tpcpid.domain.outputs import compact_column, full_columns
from tpcpid.domain.tracks import TrackCollection


def branch_name(field_name: str) -> str:
    """AO2D branch name of a track field (tpcSignal -> fTPCSignal)."""
    return f"fTPC{field_name[3:]}"


def _stored_branch_map() -> dict[str, str]:
    mapping = {}
    for species in Species:
        for column in (compact_column(species), *full_columns(species)):
            mapping[branch_name(column)] = column
    return mapping


class TrackReader:
    """
    Reads tracks from a ROOT file in chunks.

    Branch names follow the AO2D convention (``fTPCInnerParam``,
    ``fTPCSignal``, ``fTPCNSigmaStorePi``...); they are renamed to the
    field names used by TrackCollection.
    """

    BRANCH_MAP = {
        branch_name("tpcInnerParam"): "tpcInnerParam",
        branch_name("tpcSignal"): "tpcSignal",
        **_stored_branch_map(),
    }

    def __init__(self, tree_name: str = "O2track", step_size: int = 100_000, show_progress: bool = False):
        """
        Initialize reader.

        Args:
            tree_name: Name of the track tree
            step_size: Number of entries per chunk
            show_progress: Whether to show a progress bar
        """
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")
        self.tree_name = tree_name
        self.step_size = step_size
        self.show_progress = show_progress
        self.logger = logging.getLogger(self.__class__.__name__)

    def _select_branches(self, available: set[str]) -> dict[str, str]:
        """
        Map available branches to field names.

        Branches already named like fields (``tpcInnerParam``) are accepted too.

        Raises:
            KeyError: If momentum or signal branches are missing
        """
        selected = {}
        for branch, field_name in self.BRANCH_MAP.items():
            if branch in available:
                selected[branch] = field_name
            elif field_name in available:
                selected[field_name] = field_name

        for required in ("tpcInnerParam", "tpcSignal"):
            if required not in selected.values():
                raise KeyError(f"Tree {self.tree_name} has no branch for {required}")
        return selected

    def iterate(self, file_path: str) -> Iterator[TrackCollection]:
        """Yield TrackCollections in input order."""
        with uproot.open(file_path) as f:
            if self.tree_name not in f:
                raise KeyError(f"File {file_path} has no tree {self.tree_name}")
            tree = f[self.tree_name]
            selected = self._select_branches(set(tree.keys()))
            self.logger.info(
                f"Reading {tree.num_entries:,} tracks from {file_path} "
                f"(columns: {sorted(selected.values())})"
            )

            batches = tree.iterate(list(selected), step_size=self.step_size, library="ak")
            if self.show_progress:
                n_chunks = -(-tree.num_entries // self.step_size)
                batches = tqdm(batches, total=n_chunks, desc="Track chunks", unit="chunk")

            for chunk_index, batch in enumerate(batches):
                columns = {selected[branch]: batch[branch] for branch in batch.fields}
                yield TrackCollection(tracks=ak.zip(columns, depth_limit=1), chunk_index=chunk_index)
