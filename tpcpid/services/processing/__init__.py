"""
Processing services.

Per-branch PID computation over track collections.
"""

from .track_pipeline import TrackPipeline, SpeciesBranch, build_branches, compute_full

__all__ = ["TrackPipeline", "SpeciesBranch", "build_branches", "compute_full"]
