"""
Pipeline - FHIR schema bundle to Python type modules.

This module compiles a bundle of structure definitions into an
inheritance-aware type model and emits it, in phases:

1. Phase 1 (Parser / Classifier): Read the bundle into raw entries and
   partition them by kind
2. Phase 2 (Analyzer): Resolve the hierarchy, reconcile differentials and
   parse cardinalities into the type model
3. Phase 3 (Backend / Emitter): Render one module per type and the index,
   written through the file-system writer
"""

from __future__ import annotations

from .config import CompilerConfig, OutputConfig, Severity
from .emitter import FileSystemWriter
from .errors import SchemaCompileError
from .generator import PipelineGenerator
from .schema_ast import SchemaKind

__all__ = [
    "PipelineGenerator",
    "CompilerConfig",
    "OutputConfig",
    "Severity",
    "SchemaKind",
    "SchemaCompileError",
    "FileSystemWriter",
]
