"""
Domain models for the LF TPC PID workflow.

Pure data structures with validation, no business logic.
"""

from .species import Species, OutputMode, ALL_TABLE_NAMES
from .parameters import ParameterSet, NamedBinBundle
from .tracks import TrackCollection
from .outputs import TinyBinning, TableChunk
from .exceptions import ConfigurationError, ParameterSourceError
from .config import (
    PipelineConfig,
    BranchConfig,
    InlineParameters,
    CcdbConfig,
    InputConfig,
    OutputConfig,
)

__all__ = [
    "Species",
    "OutputMode",
    "ALL_TABLE_NAMES",
    "ParameterSet",
    "NamedBinBundle",
    "TrackCollection",
    "TinyBinning",
    "TableChunk",
    "ConfigurationError",
    "ParameterSourceError",
    "PipelineConfig",
    "BranchConfig",
    "InlineParameters",
    "CcdbConfig",
    "InputConfig",
    "OutputConfig",
]
