"""
SpeciesGate service - Startup consistency check of branches vs. requirements.

A species whose tables are required downstream but which has no enabled
branch cannot be served; this is fatal and detected before any track is read.
"""

import logging
from typing import Iterable

from tpcpid.domain.species import Species
from tpcpid.domain.config import BranchConfig
from tpcpid.domain.exceptions import ConfigurationError


class SpeciesGate:
    """Decides per species whether it is active, skipped, or a fatal misconfiguration."""

    def __init__(self, branches: BranchConfig, required_tables: Iterable[str]):
        """
        Initialize gate.

        Args:
            branches: Enabled (species, mode) branches
            required_tables: Table names requested by downstream consumers
        """
        self.branches = branches
        self.required_tables = frozenset(required_tables)
        self.logger = logging.getLogger(self.__class__.__name__)

    def check(self, species: Species) -> bool:
        """
        Check one species.

        Returns:
            True if the species has an enabled branch and needs parameters

        Raises:
            ConfigurationError: If a table of the species is required but no
                branch is enabled
        """
        if self.branches.species_enabled(species):
            self.logger.info(f"Enabling {species.display_name}")
            return True

        self.logger.info(f"Skipping {species.display_name}")
        requested = [name for name in species.table_names if name in self.required_tables]
        if requested:
            raise ConfigurationError(
                f"Requested {species.display_name} table(s) {requested} "
                f"but not enabled in configuration"
            )
        return False

    def active_species(self) -> list[Species]:
        """
        Check all species in enumeration order.

        Returns:
            Species that have at least one enabled branch

        Raises:
            ConfigurationError: On the first inconsistent species
        """
        return [species for species in Species if self.check(species)]
