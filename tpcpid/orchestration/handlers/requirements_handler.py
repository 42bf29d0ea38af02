"""
RequirementsHandler - Handles the CHECKING_REQUIREMENTS state.

Runs the species gate for every species before anything else happens.
"""

from tpcpid.orchestration.context import PipelineContext
from tpcpid.orchestration.states import PipelineState
from tpcpid.services.gating import SpeciesGate
from .base import StateHandler


class RequirementsHandler(StateHandler):
    """
    Handler for CHECKING_REQUIREMENTS state.

    A ConfigurationError from the gate propagates and fails the run
    before any track is read.
    """

    def __init__(self, gate: SpeciesGate):
        super().__init__()
        self.gate = gate

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)

        active = self.gate.active_species()
        context = context.with_active_species(active)

        if not active:
            self.logger.info("No branch enabled, nothing to process")
            next_state = PipelineState.COMPLETED
        else:
            self.logger.info(f"Active species: {[species.label for species in active]}")
            next_state = self._determine_next_state(context)

        self._log_state_exit(context, next_state)
        return context, next_state
