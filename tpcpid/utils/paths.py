"""
Path utilities for the workflow.

Handles timestamped run directories and path management.
"""

import os
from datetime import datetime


def create_timestamped_run_dir(base_output_dir: str, run_name: str = None) -> str:
    """
    Create a timestamped directory for the current run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "lf_tpc_pid")
        -> "./output/lf_tpc_pid_20260216_211730"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def _set_if_relative(config: dict, key: str, value: str):
    """Only overwrite a path if it's missing or relative (not an absolute override)."""
    if not config.get(key) or not os.path.isabs(config[key]):
        config[key] = value


def update_config_paths_with_run_dir(config_dict: dict, run_dir: str) -> dict:
    """
    Inject default paths into config to use the run directory.

    Relative paths are replaced with the corresponding sub-directory under
    *run_dir*. Absolute paths already set in the config are left untouched,
    so a shared CCDB cache can live outside the run.

    Sub-directory layout under run_dir:
        tables/      - output PID tables
        ccdb_cache/  - pinned CCDB objects
        logs/        - run summary

    Args:
        config_dict: Configuration dictionary
        run_dir: Run directory path

    Returns:
        Updated configuration dictionary
    """
    updated_config = dict(config_dict)

    for d in ("tables", "ccdb_cache", "logs"):
        os.makedirs(os.path.join(run_dir, d), exist_ok=True)

    output_config = dict(updated_config.get("output") or {})
    _set_if_relative(output_config, "output_dir", os.path.join(run_dir, "tables"))
    updated_config["output"] = output_config

    ccdb_config = dict(updated_config.get("ccdb") or {})
    if ccdb_config.get("cache_dir"):
        _set_if_relative(ccdb_config, "cache_dir", os.path.join(run_dir, "ccdb_cache"))
    updated_config["ccdb"] = ccdb_config

    return updated_config
