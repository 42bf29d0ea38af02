"""
Pipeline states.

Explicit state enumeration for the PID state machine.
"""

from enum import Enum, auto


class PipelineState(Enum):
    """
    All possible states in the workflow execution.

    The order is fixed: every requirement is checked before any
    parameter is resolved, and every parameter is resolved before any
    track is read.
    """

    # Initial state
    IDLE = auto()

    # Startup phase
    CHECKING_REQUIREMENTS = auto()
    RESOLVING_PARAMETERS = auto()

    # Per-track phase
    PROCESSING_TRACKS = auto()

    # Output phase
    WRITING_OUTPUT = auto()

    # Terminal states
    COMPLETED = auto()
    FAILED = auto()

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (PipelineState.COMPLETED, PipelineState.FAILED)

    def __str__(self) -> str:
        return self.name


# Valid state transitions
VALID_TRANSITIONS = {
    PipelineState.IDLE: {
        PipelineState.CHECKING_REQUIREMENTS,
        PipelineState.FAILED,
    },
    PipelineState.CHECKING_REQUIREMENTS: {
        PipelineState.RESOLVING_PARAMETERS,
        PipelineState.COMPLETED,
        PipelineState.FAILED,
    },
    PipelineState.RESOLVING_PARAMETERS: {
        PipelineState.PROCESSING_TRACKS,
        PipelineState.FAILED,
    },
    PipelineState.PROCESSING_TRACKS: {
        PipelineState.WRITING_OUTPUT,
        PipelineState.FAILED,
    },
    PipelineState.WRITING_OUTPUT: {
        PipelineState.COMPLETED,
        PipelineState.FAILED,
    },
    PipelineState.COMPLETED: set(),  # Terminal
    PipelineState.FAILED: set(),     # Terminal
}


def is_valid_transition(from_state: PipelineState, to_state: PipelineState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is valid
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())


# Successor of each non-terminal state on success
NEXT_STATE = {
    PipelineState.IDLE: PipelineState.CHECKING_REQUIREMENTS,
    PipelineState.CHECKING_REQUIREMENTS: PipelineState.RESOLVING_PARAMETERS,
    PipelineState.RESOLVING_PARAMETERS: PipelineState.PROCESSING_TRACKS,
    PipelineState.PROCESSING_TRACKS: PipelineState.WRITING_OUTPUT,
    PipelineState.WRITING_OUTPUT: PipelineState.COMPLETED,
}
