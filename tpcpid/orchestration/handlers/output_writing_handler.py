"""
OutputWritingHandler - Handles the WRITING_OUTPUT state.
"""

import os

from tpcpid.orchestration.context import PipelineContext
from tpcpid.orchestration.states import PipelineState
from tpcpid.services.io import OutputEmitter
from .base import StateHandler


class OutputWritingHandler(StateHandler):
    """Writes all emitted tables into one ROOT file."""

    def __init__(self, emitter: OutputEmitter):
        super().__init__()
        self.emitter = emitter

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)

        output_config = context.config.output_config
        output_path = os.path.join(output_config.output_dir, output_config.output_filename)
        written = self.emitter.write(output_path)
        self.logger.info(f"Saved {len(self.emitter.table_names)} tables to {written}")

        context = context.with_output_files([written])
        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context, next_state
