"""
State handlers for workflow execution.

Each handler implements logic for a specific workflow state.
"""

from .base import StateHandler
from .requirements_handler import RequirementsHandler
from .parameter_resolution_handler import ParameterResolutionHandler
from .track_processing_handler import TrackProcessingHandler
from .output_writing_handler import OutputWritingHandler

__all__ = [
    "StateHandler",
    "RequirementsHandler",
    "ParameterResolutionHandler",
    "TrackProcessingHandler",
    "OutputWritingHandler",
]
