"""
Configuration for the schema compiler pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# FHIRPath system types used as the value types of primitive elements
DEFAULT_PRIMITIVE_ALIASES = [
    "System.Boolean",
    "System.Integer",
    "System.Integer64",
    "System.Long",
    "System.Decimal",
    "System.String",
    "System.Date",
    "System.DateTime",
    "System.Time",
    "System.Quantity",
]


class Severity(str, Enum):
    """How a non-fatal diagnostic is surfaced."""

    WARNING = "warning"  # Default: log and record, keep compiling
    ERROR = "error"  # Abort the compile


@dataclass
class OutputConfig:
    """Configuration for generated artifacts.

    Attributes:
        index_file_name: Name of the aggregated index written in each target directory
        file_extension: Extension of the per-type artifacts
    """

    index_file_name: str = "__init__.py"
    file_extension: str = "py"


@dataclass
class CompilerConfig:
    """Configuration options for compiling a schema bundle."""

    # Number of legitimate hierarchy roots
    max_roots: int = 1

    # Whether exceeding max_roots is fatal
    multiple_roots_severity: Severity = Severity.WARNING

    # Use a supplied snapshot as-is instead of reconciling the differential
    prefer_snapshot: bool = True

    # Type names accepted as references without being defined in the bundle
    external_types: list[str] = field(default_factory=list)

    # Recognised primitive data type aliases
    primitive_aliases: list[str] = field(default_factory=lambda: list(DEFAULT_PRIMITIVE_ALIASES))

    # Types to skip at emission
    ignore_types: list[str] = field(default_factory=list)

    # Worker threads for reconciliation and artifact writes (1 = sequential)
    workers: int = 1

    # Add generation comment at top of each artifact
    add_generation_comment: bool = True

    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CompilerConfig:
        """Create a config from a dictionary."""
        config = CompilerConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                config.output = OutputConfig(**v)
            elif k == "multiple_roots_severity":
                config.multiple_roots_severity = Severity(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "max_roots": self.max_roots,
            "multiple_roots_severity": self.multiple_roots_severity.value,
            "prefer_snapshot": self.prefer_snapshot,
            "external_types": self.external_types,
            "primitive_aliases": self.primitive_aliases,
            "ignore_types": self.ignore_types,
            "workers": self.workers,
            "add_generation_comment": self.add_generation_comment,
            "output": {
                "index_file_name": self.output.index_file_name,
                "file_extension": self.output.file_extension,
            },
        }
