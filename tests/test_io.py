"""
Tests for the I/O services: TrackReader and OutputEmitter.

ROOT files are produced with uproot in a temporary directory.
"""

import numpy as np
import pytest
import uproot

from tpcpid.domain import TableChunk
from tpcpid.services.io import TrackReader, OutputEmitter
from tpcpid.services.io.track_reader import branch_name


def write_tracks(path, n=10, tree_name="O2track", **extra):
    with uproot.recreate(path) as f:
        f[tree_name] = {
            "fTPCInnerParam": np.linspace(0.2, 3.0, n).astype(np.float32),
            "fTPCSignal": np.linspace(150.0, 50.0, n).astype(np.float32),
            **extra,
        }


class TestTrackReader:
    """Tests for TrackReader service."""

    def test_branch_name(self):
        assert branch_name("tpcSignal") == "fTPCSignal"
        assert branch_name("tpcNSigmaStorePi") == "fTPCNSigmaStorePi"
        assert branch_name("tpcExpSigmaHe") == "fTPCExpSigmaHe"

    def test_iterate_in_chunks(self, tmp_path):
        path = str(tmp_path / "tracks.root")
        write_tracks(path, n=10)

        chunks = list(TrackReader(step_size=4).iterate(path))

        assert [len(c) for c in chunks] == [4, 4, 2]
        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        momenta = np.concatenate([c.momentum for c in chunks])
        np.testing.assert_allclose(momenta, np.linspace(0.2, 3.0, 10).astype(np.float32))

    def test_stored_columns_are_renamed(self, tmp_path):
        path = str(tmp_path / "tracks.root")
        write_tracks(path, n=3, fTPCNSigmaStorePi=np.array([1, 2, 3], dtype=np.int8))

        tracks, = TrackReader().iterate(path)

        np.testing.assert_array_equal(tracks.column("tpcNSigmaStorePi"), [1, 2, 3])

    def test_field_named_branches_accepted(self, tmp_path):
        path = str(tmp_path / "tracks.root")
        with uproot.recreate(path) as f:
            f["O2track"] = {
                "tpcInnerParam": np.array([1.0, 2.0]),
                "tpcSignal": np.array([50.0, 52.0]),
            }
        tracks, = TrackReader().iterate(path)
        np.testing.assert_allclose(tracks.signal, [50.0, 52.0])

    def test_missing_tree(self, tmp_path):
        path = str(tmp_path / "tracks.root")
        write_tracks(path, tree_name="Other")
        with pytest.raises(KeyError, match="has no tree O2track"):
            list(TrackReader().iterate(path))

    def test_missing_signal_branch(self, tmp_path):
        path = str(tmp_path / "tracks.root")
        with uproot.recreate(path) as f:
            f["O2track"] = {"fTPCInnerParam": np.array([1.0, 2.0])}
        with pytest.raises(KeyError, match="no branch for tpcSignal"):
            list(TrackReader().iterate(path))

    def test_invalid_step_size(self):
        with pytest.raises(ValueError, match="step_size must be positive"):
            TrackReader(step_size=0)


class TestOutputEmitter:
    """Tests for OutputEmitter service."""

    def test_chunks_concatenated_in_order(self):
        emitter = OutputEmitter()
        emitter.append(TableChunk("pidTPCLfPi", {"tpcNSigmaStorePi": np.array([1, 2], dtype=np.int8)}))
        emitter.append(TableChunk("pidTPCLfPi", {"tpcNSigmaStorePi": np.array([3], dtype=np.int8)}))

        np.testing.assert_array_equal(emitter.table("pidTPCLfPi")["tpcNSigmaStorePi"], [1, 2, 3])
        assert emitter.summary() == {"pidTPCLfPi": 3}

    def test_column_change_fails(self):
        emitter = OutputEmitter()
        emitter.append(TableChunk("pidTPCLfPi", {"tpcNSigmaStorePi": np.zeros(1, dtype=np.int8)}))
        with pytest.raises(ValueError, match="Columns of pidTPCLfPi changed"):
            emitter.append(TableChunk("pidTPCLfPi", {"tpcNSigmaStoreKa": np.zeros(1, dtype=np.int8)}))

    def test_unknown_table(self):
        with pytest.raises(KeyError, match="No rows emitted"):
            OutputEmitter().table("pidTPCLfPi")

    def test_write_root_file(self, tmp_path):
        emitter = OutputEmitter()
        emitter.append(TableChunk("pidTPCLfPi", {"tpcNSigmaStorePi": np.array([5, -5], dtype=np.int8)}))
        emitter.append(TableChunk("pidTPCLfFullHe", {
            "tpcExpSigmaHe": np.array([1.5, 2.5], dtype=np.float32),
            "tpcNSigmaHe": np.array([0.5, -0.5], dtype=np.float32),
        }))

        path = emitter.write(str(tmp_path / "out" / "pid.root"))

        with uproot.open(path) as f:
            compact = f["pidTPCLfPi"].arrays(library="np")
            full = f["pidTPCLfFullHe"].arrays(library="np")
        np.testing.assert_array_equal(compact["tpcNSigmaStorePi"], [5, -5])
        assert compact["tpcNSigmaStorePi"].dtype == np.int8
        np.testing.assert_allclose(full["tpcExpSigmaHe"], [1.5, 2.5])
        np.testing.assert_allclose(full["tpcNSigmaHe"], [0.5, -0.5])
