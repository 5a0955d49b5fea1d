"""FHIR Schema to Code Generator

A Python package for compiling FHIR structure definition bundles into an
inheritance-aware type model and generating one Python dataclass module
per type, plus an index module.
"""

__version__ = "1.0.0"

from .pipeline import (
    CompilerConfig,
    FileSystemWriter,
    OutputConfig,
    PipelineGenerator,
    SchemaCompileError,
    SchemaKind,
    Severity,
)

__all__ = [
    "__version__",
    "PipelineGenerator",
    "CompilerConfig",
    "OutputConfig",
    "Severity",
    "SchemaKind",
    "SchemaCompileError",
    "FileSystemWriter",
]
