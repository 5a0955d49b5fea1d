"""
Pipeline generator orchestrating all phases of type module generation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .analyzer import SchemaAnalyzer, TypeModel
from .analyzer.ir_nodes import ModuleDescriptor
from .analyzer.name_resolver import NameResolver, Normalizer
from .config import CompilerConfig
from .emitter import FileSystemWriter, TypeModelEmitter
from .schema_ast import BundleParser, EntryClassifier, SchemaEntry, SchemaKind

logger = logging.getLogger(__name__)

PROGRAM_NAME = "fhir_schema_to_code"


class PipelineGenerator:
    """
    Main generator class orchestrating the pipeline.

    The compile is a pure function of the bundles, the configuration and
    the identifier normalizer: every call rebuilds the type model, and
    nothing is kept between runs.
    """

    def __init__(
        self,
        documents: list[dict[str, Any]] | None = None,
        config: CompilerConfig | None = None,
        normalizer: Normalizer | None = None,
        writer: FileSystemWriter | None = None,
        paths: list[str | Path] | None = None,
    ):
        """
        Initialize the pipeline generator.

        Args:
            documents: In-memory bundle documents, entries are taken in list order
            config: Compiler configuration
            normalizer: Schema id to module identifier function
            writer: File-system writer
            paths: Bundle files, read before the in-memory documents
        """
        self.documents = documents or []
        self.paths = list(paths or [])
        self.config = config or CompilerConfig()
        self.name_resolver = NameResolver(normalizer)
        self.writer = writer or FileSystemWriter()

    @classmethod
    def from_files(
        cls,
        paths: list[str | Path],
        config: CompilerConfig | None = None,
        normalizer: Normalizer | None = None,
    ) -> PipelineGenerator:
        """Create a generator reading bundles from JSON files."""
        return cls(config=config, normalizer=normalizer, paths=paths)

    def entries(self) -> list[SchemaEntry]:
        """Phase 1: parse every bundle, positions continuing across bundles."""
        parser = BundleParser()
        entries = parser.load_many(self.paths) if self.paths else []
        for document in self.documents:
            entries.extend(parser.parse(document, start=len(entries)))
        return entries

    def compile(self) -> TypeModel:
        """
        Build the resolved type model.

        Returns:
            The TypeModel of every entry of every bundle

        Raises:
            SchemaCompileError: On the first classification or resolution error
        """
        bundle = EntryClassifier().classify(self.entries())
        return SchemaAnalyzer(self.config).analyze(bundle)

    def generate(
        self,
        kind: SchemaKind | str,
        output_dir: str | Path,
        command_line: str | None = None,
    ) -> list[ModuleDescriptor]:
        """
        Compile, then write the modules of one kind and their index.

        Nothing is written unless the whole type model resolves.

        Args:
            kind: Kind partition to generate
            output_dir: Target directory
            command_line: Invoking command line, for the generation comment

        Returns:
            The emitted descriptors, in emission order
        """
        model = self.compile()
        emitter = TypeModelEmitter(self.config, self.name_resolver, writer=self.writer)
        return emitter.emit(model, SchemaKind(kind), Path(output_dir), self.generation_comment(command_line))

    def generation_comment(self, command_line: str | None = None) -> str:
        """Comment line placed at the top of every artifact."""
        if not self.config.add_generation_comment:
            return ""

        from .. import __version__

        return f"# Generated by {PROGRAM_NAME} v{__version__} : {command_line or PROGRAM_NAME}"
