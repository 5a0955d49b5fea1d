"""
Schema analyzer that builds the type model.

Phase 2 of the pipeline: resolve the inheritance hierarchy, then
reconcile and resolve the elements of every type, parents before
children, and collect the result into a TypeModel.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import CompilerConfig
from ..schema_ast.nodes import ClassifiedBundle, SchemaEntry, SchemaKind
from .element_resolver import ElementResolver
from .hierarchy import Hierarchy, HierarchyResolver
from .ir_nodes import TypeModel, TypeNode
from .reconciler import SnapshotReconciler

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Analyzes classified entries and builds the type model."""

    def __init__(self, config: CompilerConfig | None = None):
        """
        Initialize the analyzer.

        Args:
            config: Compiler configuration
        """
        self.config = config or CompilerConfig()

    def analyze(self, bundle: ClassifiedBundle) -> TypeModel:
        """
        Build the type model of a classified bundle.

        Types are processed one hierarchy level at a time. Within a level
        no type depends on another, so with workers > 1 they are resolved
        concurrently; a level starts only once the previous one is done.

        Args:
            bundle: Entries partitioned by kind

        Returns:
            The resolved TypeModel
        """
        entries = bundle.all_entries()
        hierarchy = HierarchyResolver(entries, self.config).resolve()

        element_resolver = ElementResolver(set(hierarchy.entries), self.config)
        reconciler = SnapshotReconciler(element_resolver, self.config)
        kinds = {entry.id: SchemaKind(entry.kind) for entry in entries}

        nodes: dict[str, TypeNode] = {}
        for level in hierarchy.levels:
            level_entries = [hierarchy.entries[type_id] for type_id in level]
            if self.config.workers > 1 and len(level_entries) > 1:
                with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                    resolved = list(
                        pool.map(
                            lambda e: self._build_node(e, kinds[e.id], hierarchy, nodes, reconciler),
                            level_entries,
                        )
                    )
            else:
                resolved = [self._build_node(e, kinds[e.id], hierarchy, nodes, reconciler) for e in level_entries]

            for node in resolved:
                nodes[node.id] = node

        model = TypeModel(
            nodes={entry.id: nodes[entry.id] for entry in entries},
            partitions={kind: tuple(e.id for e in partition) for kind, partition in bundle.partitions.items()},
            roots=list(hierarchy.roots),
            diagnostics=list(hierarchy.diagnostics),
        )
        logger.info("Resolved %d types", len(model.nodes))
        return model

    def _build_node(
        self,
        entry: SchemaEntry,
        kind: SchemaKind,
        hierarchy: Hierarchy,
        nodes: dict[str, TypeNode],
        reconciler: SnapshotReconciler,
    ) -> TypeNode:
        """Resolve one type; its parent is already in nodes."""
        parent_id = hierarchy.parents[entry.id]
        parent = nodes[parent_id] if parent_id is not None else None

        return TypeNode(
            id=entry.id,
            kind=kind,
            parent=parent_id,
            is_abstract=entry.abstract,
            resolved_elements=reconciler.reconcile(entry, parent, hierarchy.ancestors[entry.id]),
            root_sentinel=hierarchy.sentinels.get(entry.id),
            description=entry.description,
            url=entry.url,
            version=entry.version,
            position=entry.position,
        )
