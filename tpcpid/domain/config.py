"""
Configuration domain models.

Validated, immutable configuration snapshot for the PID workflow.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from .species import Species, OutputMode, ALL_TABLE_NAMES
from .parameters import PARAMETER_LABELS, COEFFICIENT_LABELS, FLAG_THRESHOLD

InlineRow = Union[tuple[float, ...], Mapping[str, float]]

CCDB_PREFIX = "ccdb://"
DEFAULT_CCDB_URL = "http://alice-ccdb.cern.ch"
DEFAULT_CCDB_PATH = "Analysis/PID/TPC/Response"


@dataclass(frozen=True)
class BranchConfig:
    """Which (species, mode) branches run."""

    compact: frozenset[Species] = field(default_factory=frozenset)
    full: frozenset[Species] = field(default_factory=frozenset)

    def is_enabled(self, species: Species, mode: OutputMode) -> bool:
        if mode is OutputMode.COMPACT:
            return species in self.compact
        return species in self.full

    def species_enabled(self, species: Species) -> bool:
        """Check if any branch of the species is enabled."""
        return species in self.compact or species in self.full

    def any_enabled(self) -> bool:
        return bool(self.compact or self.full)

    def enabled_branches(self) -> list[tuple[Species, OutputMode]]:
        """Enabled branches in species order, compact before full."""
        branches = []
        for species in Species:
            for mode in (OutputMode.COMPACT, OutputMode.FULL):
                if self.is_enabled(species, mode):
                    branches.append((species, mode))
        return branches

    @classmethod
    def from_dict(cls, branches_dict: dict) -> 'BranchConfig':
        return cls(
            compact=frozenset(Species.from_label(l) for l in branches_dict.get("compact") or []),
            full=frozenset(Species.from_label(l) for l in branches_dict.get("full") or []),
        )


@dataclass(frozen=True)
class InlineParameters:
    """
    Inline Bethe-Bloch configuration: species -> row of labelled values.

    A row is either a positional tuple in PARAMETER_LABELS order or a
    mapping of parameter label to value. Absent entries read as 0.
    """

    rows: Mapping[Species, InlineRow] = field(default_factory=dict)

    def get(self, species: Species, label: str) -> float:
        """Value of one labelled entry for a species."""
        if label not in PARAMETER_LABELS:
            raise KeyError(f"Unknown parameter label '{label}'")
        row = self.rows.get(species)
        if row is None:
            return 0.0
        if isinstance(row, tuple):
            index = PARAMETER_LABELS.index(label)
            return float(row[index]) if index < len(row) else 0.0
        return float(row.get(label, 0.0))

    def flag(self, species: Species, label: str) -> bool:
        """Check a sentinel flag against the 1.5 threshold."""
        return self.get(species, label) >= FLAG_THRESHOLD

    def coefficients(self, species: Species) -> list[float]:
        """Coefficients as present in the row, in positional order."""
        row = self.rows.get(species)
        if row is None:
            return [0.0] * len(COEFFICIENT_LABELS)
        if isinstance(row, tuple):
            return [float(v) for v in row[len(PARAMETER_LABELS) - len(COEFFICIENT_LABELS):]]
        return [float(row[label]) for label in COEFFICIENT_LABELS if label in row]

    @classmethod
    def from_dict(cls, params_dict: dict) -> 'InlineParameters':
        rows = {}
        for label, row in (params_dict or {}).items():
            species = Species.from_label(label)
            if isinstance(row, dict):
                unknown = set(row) - set(PARAMETER_LABELS)
                if unknown:
                    raise ValueError(f"Unknown parameter labels for {label}: {sorted(unknown)}")
            try:
                if isinstance(row, dict):
                    rows[species] = {key: float(value) for key, value in row.items()}
                else:
                    rows[species] = tuple(float(value) for value in row)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Non-numeric Bethe-Bloch parameter for {label}: {e}") from e
        return cls(rows=rows)


@dataclass(frozen=True)
class CcdbConfig:
    """Remote conditions store settings."""

    url: str = DEFAULT_CCDB_URL
    path: str = DEFAULT_CCDB_PATH
    timestamp: int = 0  # ms since epoch; 0 means latest
    cache_dir: Optional[str] = None
    timeout: int = 60

    def __post_init__(self):
        """Validate CCDB configuration."""
        if not self.url:
            raise ValueError("url cannot be empty")
        if self.timestamp < 0:
            raise ValueError(f"timestamp must be non-negative, got {self.timestamp}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def is_pinned(self) -> bool:
        return self.timestamp != 0


@dataclass(frozen=True)
class InputConfig:
    """Track input settings."""

    tracks_file: str
    tree_name: str = "O2track"
    step_size: int = 100_000
    show_progress_bar: bool = True

    def __post_init__(self):
        """Validate input configuration."""
        if not self.tracks_file:
            raise ValueError("tracks_file cannot be empty")
        if not self.tree_name:
            raise ValueError("tree_name cannot be empty")
        if self.step_size <= 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")


@dataclass(frozen=True)
class OutputConfig:
    """Output table settings."""

    output_dir: str = "./output"
    output_filename: str = "lf_tpc_pid.root"

    def __post_init__(self):
        if not self.output_dir:
            raise ValueError("output_dir cannot be empty")
        if not self.output_filename:
            raise ValueError("output_filename cannot be empty")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete workflow configuration.

    Immutable configuration object validated at creation.
    """

    branches: BranchConfig
    bb_parameters: InlineParameters = field(default_factory=InlineParameters)
    parameter_files: Mapping[Species, str] = field(default_factory=dict)
    ccdb: CcdbConfig = field(default_factory=CcdbConfig)
    required_tables: frozenset[str] = field(default_factory=frozenset)

    input_config: Optional[InputConfig] = None
    output_config: OutputConfig = field(default_factory=OutputConfig)

    run_name: str = "lf_tpc_pid"

    def __post_init__(self):
        """Validate pipeline configuration."""
        unknown = set(self.required_tables) - ALL_TABLE_NAMES
        if unknown:
            raise ValueError(f"Unknown required tables: {sorted(unknown)}")
        if self.branches.any_enabled() and self.input_config is None:
            raise ValueError("input config required when any branch is enabled")

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance
        """
        branches = BranchConfig.from_dict(config_dict.get("branches") or {})

        parameter_files = {
            Species.from_label(label): (value or "")
            for label, value in (config_dict.get("parameter_files") or {}).items()
        }

        ccdb_dict = config_dict.get("ccdb") or {}
        ccdb = CcdbConfig(
            url=ccdb_dict.get("url", DEFAULT_CCDB_URL),
            path=ccdb_dict.get("path", DEFAULT_CCDB_PATH),
            timestamp=int(ccdb_dict.get("timestamp", 0)),
            cache_dir=ccdb_dict.get("cache_dir"),
            timeout=int(ccdb_dict.get("timeout", 60)),
        )

        input_config = None
        input_dict = config_dict.get("input")
        if input_dict:
            input_config = InputConfig(
                tracks_file=input_dict.get("tracks_file", ""),
                tree_name=input_dict.get("tree_name", "O2track"),
                step_size=int(input_dict.get("step_size", 100_000)),
                show_progress_bar=input_dict.get("show_progress_bar", True),
            )

        output_dict = config_dict.get("output") or {}
        output_config = OutputConfig(
            output_dir=output_dict.get("output_dir", "./output"),
            output_filename=output_dict.get("output_filename", "lf_tpc_pid.root"),
        )

        run_metadata = config_dict.get("run_metadata") or {}

        return cls(
            branches=branches,
            bb_parameters=InlineParameters.from_dict(config_dict.get("bb_parameters") or {}),
            parameter_files=parameter_files,
            ccdb=ccdb,
            required_tables=frozenset(config_dict.get("required_tables") or []),
            input_config=input_config,
            output_config=output_config,
            run_name=run_metadata.get("run_name", "lf_tpc_pid"),
        )
