"""
ParameterResolver service - Decides which coefficients govern each species.

Resolution is an ordered list of fallible steps applied to a working
ParameterSet that starts from the compiled-in default:

    default -> inline configuration -> external reference (file or CCDB)

A step either returns a complete replacement or None ("no change"); a
failing step is logged and leaves the previous layer in place.
"""

import logging
from typing import Callable, Mapping, Optional

from tpcpid.domain.species import Species
from tpcpid.domain.parameters import ParameterSet, SET_PARAMETERS
from tpcpid.domain.config import InlineParameters, CCDB_PREFIX, DEFAULT_CCDB_PATH
from tpcpid.domain.exceptions import ParameterSourceError
from .sources import ParameterSource

ResolverStep = Callable[[Species, ParameterSet], Optional[ParameterSet]]


class ParameterResolver:
    """
    Resolves one authoritative ParameterSet per species.

    The resolver holds no per-species state; ``resolve`` can be called for
    each enabled species independently.
    """

    def __init__(
        self,
        inline: InlineParameters,
        parameter_files: Mapping[Species, str],
        file_source: ParameterSource,
        ccdb_source: Optional[ParameterSource] = None,
        ccdb_path: str = DEFAULT_CCDB_PATH,
    ):
        """
        Initialize resolver.

        Args:
            inline: Inline configuration rows
            parameter_files: Species -> file path or ``ccdb://`` reference
            file_source: Source used for plain file references
            ccdb_source: Source used for ``ccdb://`` references
            ccdb_path: Object path used when a ``ccdb://`` reference has no key
        """
        self.inline = inline
        self.parameter_files = parameter_files
        self.file_source = file_source
        self.ccdb_source = ccdb_source
        self.ccdb_path = ccdb_path.strip("/")
        self.logger = logging.getLogger(self.__class__.__name__)

        self.steps: list[tuple[str, ResolverStep]] = [
            ("inline configuration", self.from_inline),
            ("external reference", self.from_reference),
        ]

    def resolve(self, species: Species) -> ParameterSet:
        """Run all steps left to right and return the frozen result."""
        working = ParameterSet.default()
        source = "default"

        for name, step in self.steps:
            result = step(species, working)
            if result is None:
                continue
            self.logger.info(f"Before: set of parameters -> {working.describe()}")
            self.logger.info(f"After: set of parameters -> {result.describe()}")
            working = result
            source = name

        self.logger.info(f"{species.display_name}: using parameters from {source}")
        return working

    def resolve_all(self, species_list) -> dict[Species, ParameterSet]:
        return {species: self.resolve(species) for species in species_list}

    def from_inline(self, species: Species, current: ParameterSet) -> Optional[ParameterSet]:
        """Inline layer, active when ``Set parameters`` passes the threshold."""
        if not self.inline.flag(species, SET_PARAMETERS):
            self.logger.info(
                f"Using default for {species.label} input vector size "
                f"{self.inline.get(species, SET_PARAMETERS)} < 1.5"
            )
            return None

        self.logger.info(
            f"Setting custom Bethe-Bloch parameters for mass hypothesis {species.label}"
        )
        try:
            return ParameterSet.from_values(self.inline.coefficients(species))
        except ValueError as e:
            self.logger.error(f"{species.label}: {e}")
            return None

    def from_reference(self, species: Species, current: ParameterSet) -> Optional[ParameterSet]:
        """External layer: local file or CCDB object named by the species reference."""
        reference = self.parameter_files.get(species, "") or ""
        if len(reference) <= 1:
            return None

        self.logger.info(f"Loading parameters for {species.label} from {reference}")
        try:
            source, key = self._source_for(species, reference)
            bundle = source.fetch(key)
            self.logger.info(f"Setting custom Bethe-Bloch parameters from histogram {bundle.name}")
            return ParameterSet.from_values(bundle.coefficients())
        except (ParameterSourceError, KeyError, ValueError) as e:
            self.logger.error(f"{species.label}: could not use {reference}: {e}")
            return None

    def _source_for(self, species: Species, reference: str) -> tuple[ParameterSource, str]:
        if reference.startswith(CCDB_PREFIX):
            if self.ccdb_source is None:
                raise ParameterSourceError("No CCDB source configured")
            key = reference[len(CCDB_PREFIX):].strip("/")
            if not key:
                key = f"{self.ccdb_path}/{species.label}"
            return self.ccdb_source, key
        return self.file_source, reference
