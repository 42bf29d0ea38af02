"""
Pipeline context.

Immutable context object passed between state handlers.
"""

from dataclasses import dataclass, field, replace
from typing import Optional
from datetime import datetime

from tpcpid.domain.config import PipelineConfig
from tpcpid.domain.parameters import ParameterSet
from tpcpid.domain.species import Species
from .states import PipelineState


@dataclass(frozen=True)
class PipelineContext:
    """
    Immutable context for workflow execution.

    Each state handler returns a new context with updated fields.
    """

    # Configuration
    config: PipelineConfig

    # Current state
    current_state: PipelineState

    # Execution metadata
    start_time: datetime = field(default_factory=datetime.now)

    # Startup results
    active_species: tuple[Species, ...] = ()
    parameter_sets: dict[Species, ParameterSet] = field(default_factory=dict)

    # Per-track results
    track_count: int = 0
    chunk_count: int = 0
    table_row_counts: dict[str, int] = field(default_factory=dict)
    output_files: list[str] = field(default_factory=list)

    # Error tracking
    error_message: Optional[str] = None
    error_details: Optional[dict] = None

    def with_state(self, new_state: PipelineState) -> 'PipelineContext':
        return replace(self, current_state=new_state)

    def with_active_species(self, species: list[Species]) -> 'PipelineContext':
        return replace(self, active_species=tuple(species))

    def with_parameter_sets(self, parameter_sets: dict[Species, ParameterSet]) -> 'PipelineContext':
        """
        Return new context with the resolved coefficients.

        Args:
            parameter_sets: Species -> frozen ParameterSet

        Returns:
            New PipelineContext with parameter sets
        """
        return replace(self, parameter_sets=dict(parameter_sets))

    def with_track_stats(self, track_count: int, chunk_count: int) -> 'PipelineContext':
        return replace(self, track_count=track_count, chunk_count=chunk_count)

    def with_table_row_counts(self, row_counts: dict[str, int]) -> 'PipelineContext':
        return replace(self, table_row_counts=dict(row_counts))

    def with_output_files(self, files: list[str]) -> 'PipelineContext':
        return replace(self, output_files=list(files))

    def with_error(self, message: str, details: Optional[dict] = None) -> 'PipelineContext':
        """
        Return new context with error information.

        Args:
            message: Error message
            details: Optional error details dict

        Returns:
            New PipelineContext in FAILED state
        """
        return replace(
            self,
            current_state=PipelineState.FAILED,
            error_message=message,
            error_details=details or {}
        )

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def is_terminal(self) -> bool:
        return self.current_state.is_terminal()

    @property
    def is_successful(self) -> bool:
        return self.current_state == PipelineState.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.current_state == PipelineState.FAILED

    def get_summary(self) -> dict:
        """
        Get summary of workflow execution.

        Returns:
            Dict with execution summary
        """
        return {
            "state": str(self.current_state),
            "elapsed_time_sec": self.elapsed_time,
            "start_time": self.start_time.isoformat(),
            "active_species": [species.label for species in self.active_species],
            "track_count": self.track_count,
            "chunk_count": self.chunk_count,
            "table_row_counts": dict(self.table_row_counts),
            "output_files": list(self.output_files),
            "has_error": self.has_error,
            "error_message": self.error_message,
            "is_successful": self.is_successful,
        }
