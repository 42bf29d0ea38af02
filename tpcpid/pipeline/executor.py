"""
PipelineExecutor - High-level workflow orchestrator.

Wires together all services and executes the state machine.
"""

import json
import logging
import os
from typing import Optional

import requests

from tpcpid.domain.config import PipelineConfig
from tpcpid.orchestration import PipelineState, PipelineContext, StateMachine
from tpcpid.orchestration.handlers import (
    RequirementsHandler,
    ParameterResolutionHandler,
    TrackProcessingHandler,
    OutputWritingHandler,
)
from tpcpid.services.ccdb import CcdbClient, BlobCache
from tpcpid.services.gating import SpeciesGate
from tpcpid.services.io import TrackReader, OutputEmitter
from tpcpid.services.parameters import ParameterResolver, RootFileSource, CcdbSource


class PipelineExecutor:
    """
    High-level workflow executor.

    Responsible for:
    1. Creating all services with dependency injection
    2. Building the state machine with handlers
    3. Running the workflow
    4. Returning results
    """

    def __init__(self, config: PipelineConfig, ccdb_session: Optional[requests.Session] = None):
        """
        Initialize executor.

        Args:
            config: Validated workflow configuration
            ccdb_session: Optional HTTP session for the CCDB client
        """
        self.config = config
        self.ccdb_session = ccdb_session
        self.logger = logging.getLogger(self.__class__.__name__)
        self.state_machine = self._build_state_machine()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> PipelineContext:
        """Execute the workflow and return final context."""
        self.logger.info("Initializing workflow execution")
        initial_context = PipelineContext(config=self.config, current_state=PipelineState.IDLE)
        try:
            final_context = self.state_machine.run(initial_context)
        finally:
            self.ccdb_client.close()
        self._log_results(final_context)
        return final_context

    def save_run_summary(self, run_dir: str, context: PipelineContext) -> str:
        """
        Save the run summary JSON.

        Saved to: <run_dir>/logs/run_summary.json

        Args:
            run_dir: Run directory path
            context: Final pipeline context after execution

        Returns:
            Path of the summary file
        """
        summary = {
            "run_name": self.config.run_name,
            "summary": context.get_summary(),
            "parameters": {
                species.label: params.describe()
                for species, params in context.parameter_sets.items()
            },
            "error_details": context.error_details,
        }

        logs_dir = os.path.join(run_dir, "logs")
        os.makedirs(logs_dir, exist_ok=True)
        summary_path = os.path.join(logs_dir, "run_summary.json")

        with open(summary_path, "w") as f:
            json.dump(summary, f, indent=2, default=str)

        self.logger.info(f"Saved run summary to: {summary_path}")
        return summary_path

    # ------------------------------------------------------------------
    # Workflow internals
    # ------------------------------------------------------------------

    def _build_state_machine(self) -> StateMachine:
        self.logger.info("Building state machine with services")
        services = self._create_services()
        handlers = self._create_handlers(services)
        return StateMachine(handlers)

    def _create_services(self) -> dict:
        services = {}
        ccdb = self.config.ccdb

        # The CCDB client is configured before any reference is resolved
        cache = BlobCache(cache_dir=ccdb.cache_dir) if ccdb.cache_dir else None
        self.ccdb_client = CcdbClient(
            url=ccdb.url,
            timestamp=ccdb.timestamp,
            timeout=ccdb.timeout,
            cache=cache,
            session=self.ccdb_session,
        )
        services['resolver'] = ParameterResolver(
            inline=self.config.bb_parameters,
            parameter_files=self.config.parameter_files,
            file_source=RootFileSource(),
            ccdb_source=CcdbSource(self.ccdb_client),
            ccdb_path=ccdb.path,
        )
        services['gate'] = SpeciesGate(self.config.branches, self.config.required_tables)
        services['emitter'] = OutputEmitter()

        ic = self.config.input_config
        if ic is not None:
            services['track_reader'] = TrackReader(
                tree_name=ic.tree_name,
                step_size=ic.step_size,
                show_progress=ic.show_progress_bar,
            )

        return services

    def _create_handlers(self, services: dict) -> dict:
        handlers = {
            PipelineState.CHECKING_REQUIREMENTS: RequirementsHandler(services['gate']),
            PipelineState.RESOLVING_PARAMETERS: ParameterResolutionHandler(services['resolver']),
            PipelineState.WRITING_OUTPUT: OutputWritingHandler(services['emitter']),
        }
        if 'track_reader' in services:
            handlers[PipelineState.PROCESSING_TRACKS] = TrackProcessingHandler(
                reader=services['track_reader'],
                emitter=services['emitter'],
            )
        return handlers

    def _log_results(self, context: PipelineContext):
        self.logger.info("=" * 60)
        self.logger.info("Workflow Execution Summary")
        self.logger.info("=" * 60)

        summary = context.get_summary()
        for key, value in summary.items():
            self.logger.info(f"{key:30s}: {value}")

        self.logger.info("=" * 60)
