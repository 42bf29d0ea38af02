"""
ParameterResolutionHandler - Handles the RESOLVING_PARAMETERS state.

Resolves one frozen ParameterSet per active species.
"""

from tpcpid.orchestration.context import PipelineContext
from tpcpid.orchestration.states import PipelineState
from tpcpid.services.parameters import ParameterResolver
from .base import StateHandler


class ParameterResolutionHandler(StateHandler):
    """Handler for RESOLVING_PARAMETERS state."""

    def __init__(self, resolver: ParameterResolver):
        super().__init__()
        self.resolver = resolver

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        """
        Resolve coefficients for the active species.

        Args:
            context: Current pipeline context

        Returns:
            Tuple of (updated_context, next_state)
        """
        self._log_state_entry(context)

        parameter_sets = self.resolver.resolve_all(context.active_species)
        for species, params in parameter_sets.items():
            self.logger.info(f"{species.display_name}: {params.describe()}")

        context = context.with_parameter_sets(parameter_sets)
        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context, next_state
