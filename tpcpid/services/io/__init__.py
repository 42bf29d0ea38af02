"""
I/O services.

Track input and PID table output.
"""

from .track_reader import TrackReader
from .emitter import OutputEmitter

__all__ = ["TrackReader", "OutputEmitter"]
