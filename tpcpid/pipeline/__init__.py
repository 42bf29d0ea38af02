"""
Pipeline execution layer.

High-level executor that wires services and runs the state machine.
"""

from .executor import PipelineExecutor

__all__ = ["PipelineExecutor"]
