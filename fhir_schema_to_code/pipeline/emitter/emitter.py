"""
Type model emitter.

Phase 3 of the pipeline: walk one kind partition of the type model in
document order, render a module per type and hand the writes to the
file-system writer, then let the index aggregator finalize the index.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..analyzer.ir_nodes import ModuleDescriptor, TypeModel, TypeNode
from ..analyzer.name_resolver import NameResolver
from ..backends.base import CodeBackend
from ..backends.python_backend import PythonBackend
from ..config import CompilerConfig
from ..schema_ast.nodes import SchemaKind
from .aggregator import IndexAggregator
from .filesystem import FileSystemWriter

logger = logging.getLogger(__name__)


class TypeModelEmitter:
    """Emits the modules of one kind partition and their index."""

    def __init__(
        self,
        config: CompilerConfig | None = None,
        name_resolver: NameResolver | None = None,
        backend: CodeBackend | None = None,
        writer: FileSystemWriter | None = None,
    ):
        """
        Initialize the emitter.

        Args:
            config: Compiler configuration
            name_resolver: Identifier normalizer, defaults to snake_case conversion
            backend: Code backend, defaults to the Python backend
            writer: File-system writer
        """
        self.config = config or CompilerConfig()
        self.name_resolver = name_resolver or NameResolver()
        self.backend = backend or PythonBackend(self.config, self.name_resolver)
        self.writer = writer or FileSystemWriter()

    def module_names(self, model: TypeModel) -> dict[str, str]:
        """
        Module identifier of every emitted type of the run.

        Raises:
            IdentifierCollisionError: If two type ids normalize to the same identifier
        """
        ignored = set(self.config.ignore_types)
        return self.name_resolver.resolve_names(type_id for type_id in model.nodes if type_id not in ignored)

    def descriptors(self, model: TypeModel, kind: SchemaKind) -> list[ModuleDescriptor]:
        """The descriptors of a partition, in emission order, without writing anything."""
        names = self.module_names(model)
        return [ModuleDescriptor(node.id, names[node.id], node.kind) for node in self._emitted_nodes(model, kind)]

    def emit(
        self,
        model: TypeModel,
        kind: SchemaKind,
        output_dir: Path,
        generation_comment: str = "",
    ) -> list[ModuleDescriptor]:
        """
        Write one module per type of a partition, then the index.

        Every module is rendered and validated before the first write. The
        index is finalized last, and only when every write succeeded.

        Args:
            model: The resolved type model
            kind: Partition to emit
            output_dir: Target directory
            generation_comment: Comment line placed at the top of each artifact

        Returns:
            The emitted descriptors, in emission order

        Raises:
            IdentifierCollisionError: If two type ids normalize to the same identifier
            ArtifactValidationError: If a rendered module is not valid source code
        """
        output_dir = Path(output_dir)
        all_names = self.module_names(model)
        nodes = self._emitted_nodes(model, kind)
        names = {node.id: all_names[node.id] for node in nodes}

        extension = self.config.output.file_extension
        rendered: list[tuple[TypeNode, Path, str]] = []
        for node in nodes:
            path = output_dir / f"{names[node.id]}.{extension}"
            content = self.backend.render_module(node, model, names, generation_comment)
            self.writer.validate(path, content)
            rendered.append((node, path, content))

        self.writer.ensure_directory(output_dir)
        aggregator = IndexAggregator(
            output_dir / self.config.output.index_file_name,
            self.backend,
            self.writer,
            generation_comment,
        )

        def write(position: int) -> bool:
            node, path, content = rendered[position]
            created = self.writer.create_if_absent(path, content, validate=False)
            if created:
                logger.info("Wrote %s", path)
            aggregator.submit(position, ModuleDescriptor(node.id, names[node.id], node.kind))
            return created

        positions = range(len(rendered))
        if self.config.workers > 1 and len(rendered) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                created = list(pool.map(write, positions))
        else:
            created = [write(position) for position in positions]

        descriptors = aggregator.finalize()
        logger.info(
            "Emitted %d %s modules into %s (%d new)",
            len(descriptors),
            kind.value,
            output_dir,
            sum(created),
        )
        return descriptors

    def _emitted_nodes(self, model: TypeModel, kind: SchemaKind) -> list[TypeNode]:
        ignored = set(self.config.ignore_types)
        skipped = [node.id for node in model.partition(kind) if node.id in ignored]
        if skipped:
            logger.debug("Ignoring %s", ", ".join(skipped))
        return [node for node in model.partition(kind) if node.id not in ignored]
