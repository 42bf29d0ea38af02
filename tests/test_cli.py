"""
Tests for the command line entry point and run directory handling.
"""

import os

import numpy as np
import uproot
import yaml

import main
from tpcpid.utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


class TestPaths:
    """Tests for run directory utilities."""

    def test_timestamped_run_dir(self, tmp_path):
        run_dir = create_timestamped_run_dir(str(tmp_path), "lf_tpc_pid")
        assert os.path.isdir(run_dir)
        assert os.path.basename(run_dir).startswith("lf_tpc_pid_")

    def test_relative_paths_moved_into_run_dir(self, tmp_path):
        run_dir = str(tmp_path / "run")
        config = update_config_paths_with_run_dir(
            {"output": {"output_dir": "./output/tables"}, "ccdb": {"cache_dir": "cache"}},
            run_dir,
        )
        assert config["output"]["output_dir"] == os.path.join(run_dir, "tables")
        assert config["ccdb"]["cache_dir"] == os.path.join(run_dir, "ccdb_cache")

    def test_absolute_paths_kept(self, tmp_path):
        shared = str(tmp_path / "shared_cache")
        config = update_config_paths_with_run_dir(
            {"ccdb": {"cache_dir": shared}}, str(tmp_path / "run")
        )
        assert config["ccdb"]["cache_dir"] == shared

    def test_disabled_cache_stays_disabled(self, tmp_path):
        config = update_config_paths_with_run_dir({"ccdb": {"cache_dir": None}}, str(tmp_path / "run"))
        assert config["ccdb"]["cache_dir"] is None


class TestMain:
    """Tests for main()."""

    def write_config(self, tmp_path, config):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(config))
        return str(path)

    def test_dry_run(self, tmp_path):
        config_path = self.write_config(tmp_path, {
            "branches": {"compact": ["Pi"]},
            "input": {"tracks_file": "tracks.root"},
        })
        assert main.main(["--config", config_path, "--dry-run", "--run-dir", str(tmp_path / "run")]) == 0

    def test_invalid_config_exit_code(self, tmp_path):
        config_path = self.write_config(tmp_path, {"branches": {"compact": ["Xx"]}})
        assert main.main(["--config", config_path, "--run-dir", str(tmp_path / "run")]) == 1

    def test_gate_failure_exit_code(self, tmp_path):
        config_path = self.write_config(tmp_path, {"required_tables": ["pidTPCLfHe"]})
        run_dir = str(tmp_path / "run")

        assert main.main(["--config", config_path, "--run-dir", run_dir]) == 1
        assert os.path.exists(os.path.join(run_dir, "logs", "run_summary.json"))

    def test_full_run(self, tmp_path):
        tracks = str(tmp_path / "tracks.root")
        with uproot.recreate(tracks) as f:
            f["O2track"] = {
                "fTPCInnerParam": np.array([0.5, 1.0, 2.0], dtype=np.float32),
                "fTPCSignal": np.array([70.0, 52.0, 50.0], dtype=np.float32),
            }
        config_path = self.write_config(tmp_path, {
            "branches": {"compact": ["Pi"], "full": ["Pi"]},
            "input": {"tracks_file": tracks, "show_progress_bar": False},
            "output": {"output_filename": "pid.root"},
        })
        run_dir = str(tmp_path / "run")

        assert main.main(["--config", config_path, "--run-dir", run_dir]) == 0
        with uproot.open(os.path.join(run_dir, "tables", "pid.root")) as f:
            assert f["pidTPCLfFullPi"].num_entries == 3
