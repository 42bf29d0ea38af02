"""
TrackProcessingHandler - Handles the PROCESSING_TRACKS state.

Streams track chunks through the per-branch pipeline into the emitter.
"""

from datetime import datetime

from tpcpid.orchestration.context import PipelineContext
from tpcpid.orchestration.states import PipelineState
from tpcpid.services.io import TrackReader, OutputEmitter
from tpcpid.services.processing import TrackPipeline, build_branches
from .base import StateHandler


class TrackProcessingHandler(StateHandler):
    """
    Handler for PROCESSING_TRACKS state.

    Every enabled table receives one row per input track, in input
    order, even when the input holds no tracks at all.
    """

    def __init__(self, reader: TrackReader, emitter: OutputEmitter):
        """
        Initialize handler.

        Args:
            reader: Track reader service
            emitter: Output sink shared with the output writing state
        """
        super().__init__()
        self.reader = reader
        self.emitter = emitter

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)

        config = context.config
        branches = build_branches(config.branches, config.bb_parameters, context.parameter_sets)
        pipeline = TrackPipeline(branches)
        for branch in branches:
            source = "stored column" if branch.use_stored else "calibration model"
            self.logger.info(f"{branch.table_name}: filled from {source}")

        start_time = datetime.now()
        track_count = 0
        chunk_count = 0
        for tracks in self.reader.iterate(config.input_config.tracks_file):
            for table_chunk in pipeline.process(tracks):
                self.emitter.append(table_chunk)
            track_count += len(tracks)
            chunk_count += 1
            self.logger.debug(f"Processed chunk {tracks.chunk_index}: {len(tracks):,} tracks")

        if chunk_count == 0:
            self.logger.warning("Input holds no tracks, tables will be empty")
            for branch in branches:
                self.emitter.append(pipeline.empty_chunk(branch))

        elapsed = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Processed {track_count:,} tracks in {chunk_count} chunks ({elapsed:.1f}s)")

        context = context.with_track_stats(track_count, chunk_count)
        context = context.with_table_row_counts(self.emitter.summary())
        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context, next_state
