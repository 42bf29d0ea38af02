"""
Tests for TrackPipeline service.
"""

import numpy as np
import pytest

from tpcpid.domain import (
    Species,
    OutputMode,
    ParameterSet,
    TinyBinning,
    TrackCollection,
    BranchConfig,
    InlineParameters,
)
from tpcpid.services.calibration import expected_signal
from tpcpid.services.processing import TrackPipeline, SpeciesBranch, build_branches, compute_full

MOMENTA = np.array([0.3, 0.45, 0.7, 1.1, 2.0, 4.0], dtype=np.float32)
SIGNALS = np.array([180.0, 95.0, 62.0, 51.0, 53.0, 55.0], dtype=np.float32)


def make_tracks(momenta=MOMENTA, signals=SIGNALS, **extra):
    return TrackCollection.from_columns({"tpcInnerParam": momenta, "tpcSignal": signals, **extra})


def make_branch(species, mode, use_stored=False, params=None):
    return SpeciesBranch(
        species=species,
        mode=mode,
        params=params or ParameterSet.default(),
        use_stored=use_stored,
    )


class TestBuildBranches:
    """Tests for the branch table."""

    def test_order_and_flags(self):
        branches = BranchConfig.from_dict({"compact": ["Pr", "Pi"], "full": ["Pi"]})
        inline = InlineParameters.from_dict({"Pi": {"Use default full": 2}})
        params = {Species.PION: ParameterSet.default(), Species.PROTON: ParameterSet.default()}

        table = build_branches(branches, inline, params)

        assert [b.table_name for b in table] == ["pidTPCLfPi", "pidTPCLfFullPi", "pidTPCLfPr"]
        assert [b.use_stored for b in table] == [False, True, False]

    def test_missing_parameter_set_fails(self):
        branches = BranchConfig.from_dict({"compact": ["Pi"]})
        with pytest.raises(KeyError):
            build_branches(branches, InlineParameters(), {})


class TestTrackPipeline:
    """Tests for the per-branch computation."""

    def test_one_row_per_track_per_branch(self):
        pipeline = TrackPipeline([
            make_branch(Species.PION, OutputMode.COMPACT),
            make_branch(Species.PION, OutputMode.FULL),
            make_branch(Species.HELIUM3, OutputMode.FULL),
        ])
        chunks = list(pipeline.process(make_tracks()))

        assert [c.table_name for c in chunks] == ["pidTPCLfPi", "pidTPCLfFullPi", "pidTPCLfFullHe"]
        assert all(c.row_count == len(MOMENTA) for c in chunks)
        assert chunks[0].columns["tpcNSigmaStorePi"].dtype == np.int8
        assert chunks[1].columns["tpcExpSigmaPi"].dtype == np.float32
        assert chunks[1].columns["tpcNSigmaPi"].dtype == np.float32

    def test_compact_and_full_agree_within_half_bin(self):
        pipeline = TrackPipeline([
            make_branch(Species.KAON, OutputMode.COMPACT),
            make_branch(Species.KAON, OutputMode.FULL),
        ])
        compact, full = pipeline.process(make_tracks())

        nsigma = full.columns["tpcNSigmaKa"]
        unpacked = TinyBinning.unpack(compact.columns["tpcNSigmaStoreKa"])
        in_range = np.abs(nsigma) < TinyBinning.binned_max
        assert np.all(np.abs(unpacked[in_range] - nsigma[in_range]) <= TinyBinning.bin_width / 2 + 1e-5)
        np.testing.assert_allclose(np.abs(unpacked[~in_range]), TinyBinning.binned_max, rtol=1e-6)

    def test_zero_deviation_for_expected_signal(self):
        params = ParameterSet.default()
        momenta = MOMENTA.astype(np.float64)
        signals = expected_signal(Species.PROTON, momenta, 1, params)
        tracks = make_tracks(momenta=momenta, signals=signals)
        pipeline = TrackPipeline([
            make_branch(Species.PROTON, OutputMode.COMPACT),
            make_branch(Species.PROTON, OutputMode.FULL),
        ])

        compact, full = pipeline.process(tracks)

        np.testing.assert_array_equal(compact.columns["tpcNSigmaStorePr"], 0)
        np.testing.assert_array_equal(full.columns["tpcNSigmaPr"], 0.0)

    def test_input_order_preserved(self):
        pipeline = TrackPipeline([make_branch(Species.PION, OutputMode.FULL)])
        forward, = pipeline.process(make_tracks())
        backward, = pipeline.process(make_tracks(MOMENTA[::-1].copy(), SIGNALS[::-1].copy()))
        np.testing.assert_array_equal(forward.columns["tpcNSigmaPi"], backward.columns["tpcNSigmaPi"][::-1])

    def test_full_values_match_model(self):
        params = ParameterSet.default()
        tracks = make_tracks()
        resolution, deviation = compute_full(tracks, Species.DEUTERON, params)
        pipeline = TrackPipeline([make_branch(Species.DEUTERON, OutputMode.FULL, params=params)])
        full, = pipeline.process(tracks)
        np.testing.assert_array_equal(full.columns["tpcExpSigmaDe"], resolution.astype(np.float32))
        np.testing.assert_array_equal(full.columns["tpcNSigmaDe"], deviation.astype(np.float32))

    def test_stored_columns_copied(self):
        stored_compact = np.array([1, -2, 3, 127, -127, 0], dtype=np.int8)
        stored_sigma = np.linspace(1.0, 2.0, 6).astype(np.float32)
        stored_nsigma = np.linspace(-3.0, 3.0, 6).astype(np.float32)
        tracks = make_tracks(
            tpcNSigmaStoreTr=stored_compact,
            tpcExpSigmaTr=stored_sigma,
            tpcNSigmaTr=stored_nsigma,
        )
        pipeline = TrackPipeline([
            make_branch(Species.TRITON, OutputMode.COMPACT, use_stored=True),
            make_branch(Species.TRITON, OutputMode.FULL, use_stored=True),
        ])

        compact, full = pipeline.process(tracks)

        np.testing.assert_array_equal(compact.columns["tpcNSigmaStoreTr"], stored_compact)
        np.testing.assert_array_equal(full.columns["tpcExpSigmaTr"], stored_sigma)
        np.testing.assert_array_equal(full.columns["tpcNSigmaTr"], stored_nsigma)

    def test_stored_column_missing_fails(self):
        pipeline = TrackPipeline([make_branch(Species.TRITON, OutputMode.COMPACT, use_stored=True)])
        with pytest.raises(KeyError, match="tpcNSigmaStoreTr"):
            list(pipeline.process(make_tracks()))

    def test_empty_chunk(self):
        pipeline = TrackPipeline([])
        compact = pipeline.empty_chunk(make_branch(Species.ALPHA, OutputMode.COMPACT))
        full = pipeline.empty_chunk(make_branch(Species.ALPHA, OutputMode.FULL))
        assert compact.row_count == 0
        assert compact.columns["tpcNSigmaStoreAl"].dtype == np.int8
        assert set(full.columns) == {"tpcExpSigmaAl", "tpcNSigmaAl"}
