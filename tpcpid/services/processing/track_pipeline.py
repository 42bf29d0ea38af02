"""
TrackPipeline service - Computes PID tables for a track collection.

One independent pass per enabled (species, mode) branch, in species order
with the compact branch before the full one. Every branch yields exactly
one row per input track, in input order.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Mapping

import numpy as np

from tpcpid.domain.species import Species, OutputMode
from tpcpid.domain.parameters import ParameterSet, USE_DEFAULT_TINY, USE_DEFAULT_FULL
from tpcpid.domain.config import BranchConfig, InlineParameters
from tpcpid.domain.outputs import TinyBinning, TableChunk, compact_column, full_columns, table_columns
from tpcpid.domain.tracks import TrackCollection
from tpcpid.services.calibration import bethe_bloch


@dataclass(frozen=True)
class SpeciesBranch:
    """Everything one branch needs: species constants, coefficients and mode."""

    species: Species
    mode: OutputMode
    params: ParameterSet
    use_stored: bool

    @property
    def table_name(self) -> str:
        return self.species.table_name(self.mode)


def build_branches(
    branches: BranchConfig,
    inline: InlineParameters,
    parameter_sets: Mapping[Species, ParameterSet],
) -> list[SpeciesBranch]:
    """
    Build the branch table from the configuration snapshot.

    Raises:
        KeyError: If an enabled species has no resolved ParameterSet
    """
    table = []
    for species, mode in branches.enabled_branches():
        flag = USE_DEFAULT_TINY if mode is OutputMode.COMPACT else USE_DEFAULT_FULL
        table.append(SpeciesBranch(
            species=species,
            mode=mode,
            params=parameter_sets[species],
            use_stored=inline.flag(species, flag),
        ))
    return table


def compute_full(tracks: TrackCollection, species: Species, params: ParameterSet):
    """Resolution and normalised deviation for every track."""
    momentum = tracks.momentum
    expected = bethe_bloch.expected_signal(species, momentum, species.charge, params)
    resolution = bethe_bloch.signal_resolution(species, momentum, species.charge, params)
    deviation = bethe_bloch.normalized_deviation(tracks.signal, expected, resolution)
    return resolution, deviation


class TrackPipeline:
    """
    Evaluates the calibration model branch by branch.

    Branches share no mutable state; the pipeline only reads the tracks
    and the frozen ParameterSets.
    """

    def __init__(self, branches: list[SpeciesBranch]):
        self.branches = branches
        self.logger = logging.getLogger(self.__class__.__name__)

    def process(self, tracks: TrackCollection) -> Iterator[TableChunk]:
        """Yield one TableChunk per enabled branch."""
        for branch in self.branches:
            self.logger.debug(f"Filling table for particle: {branch.species.label} ({branch.mode})")
            if branch.mode is OutputMode.COMPACT:
                yield self._compact(branch, tracks)
            else:
                yield self._full(branch, tracks)

    def _compact(self, branch: SpeciesBranch, tracks: TrackCollection) -> TableChunk:
        column = compact_column(branch.species)
        if branch.use_stored:
            values = tracks.column(column).astype(TinyBinning.binned_t)
        else:
            _, deviation = compute_full(tracks, branch.species, branch.params)
            values = TinyBinning.pack(deviation)
        return TableChunk(table_name=branch.table_name, columns={column: values})

    def _full(self, branch: SpeciesBranch, tracks: TrackCollection) -> TableChunk:
        sigma_column, nsigma_column = full_columns(branch.species)
        if branch.use_stored:
            resolution = tracks.column(sigma_column)
            deviation = tracks.column(nsigma_column)
        else:
            resolution, deviation = compute_full(tracks, branch.species, branch.params)
        return TableChunk(
            table_name=branch.table_name,
            columns={
                sigma_column: np.asarray(resolution, dtype=np.float32),
                nsigma_column: np.asarray(deviation, dtype=np.float32),
            },
        )

    def empty_chunk(self, branch: SpeciesBranch) -> TableChunk:
        """Zero-row chunk with the branch's columns, for empty inputs."""
        dtype = TinyBinning.binned_t if branch.mode is OutputMode.COMPACT else np.float32
        return TableChunk(
            table_name=branch.table_name,
            columns={
                column: np.empty(0, dtype=dtype)
                for column in table_columns(branch.species, branch.mode)
            },
        )
