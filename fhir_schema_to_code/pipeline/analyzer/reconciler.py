"""
Snapshot reconciler.

Merges a type's differential onto the resolved elements of its parent,
or takes a supplied snapshot as authoritative.
"""

from __future__ import annotations

import dataclasses
import logging

from ..config import CompilerConfig
from ..errors import CardinalityWideningError, ElementPathError, TypeWideningError
from ..schema_ast.nodes import ElementConstraint, SchemaEntry
from .element_resolver import ElementResolver
from .ir_nodes import ResolvedElement, TypeNode

logger = logging.getLogger(__name__)


class SnapshotReconciler:
    """Produces the resolved element list of one type."""

    def __init__(self, element_resolver: ElementResolver, config: CompilerConfig | None = None):
        self.element_resolver = element_resolver
        self.config = config or CompilerConfig()

    def uses_snapshot(self, entry: SchemaEntry) -> bool:
        """Whether the entry's snapshot is taken as-is."""
        if not entry.has_snapshot:
            return False
        return self.config.prefer_snapshot or not entry.has_differential

    def reconcile(
        self,
        entry: SchemaEntry,
        parent: TypeNode | None,
        ancestor_ids: list[str],
    ) -> tuple[ResolvedElement, ...]:
        """
        Resolve the elements of a type.

        Args:
            entry: The type's raw entry
            parent: The already resolved parent, None for a root
            ancestor_ids: Ids of all ancestors, parent first

        Returns:
            The resolved elements, inherited ones first in inherited order

        Raises:
            ElementPathError: If an element path is not rooted at the type
                or one of its ancestors
            CardinalityWideningError: If a differential loosens an inherited cardinality
            TypeWideningError: If a differential allows a type its base does not
        """
        prefixes = {entry.id, entry.type_name, *ancestor_ids}
        inherited = parent.resolved_elements if parent else ()

        if self.uses_snapshot(entry):
            logger.debug("Using snapshot of %s (%d elements)", entry.id, len(entry.snapshot_elements))
            return self._from_snapshot(entry, inherited, prefixes)

        logger.debug("Reconciling %s onto %s", entry.id, parent.id if parent else "<root>")
        return self._overlay(entry, inherited, prefixes)

    def _from_snapshot(
        self,
        entry: SchemaEntry,
        inherited: tuple[ResolvedElement, ...],
        prefixes: set[str],
    ) -> tuple[ResolvedElement, ...]:
        declared_by = {e.relative_path: e.declared_by for e in inherited}
        elements: dict[str, ResolvedElement] = {}
        for constraint in entry.snapshot_elements:
            relative = self._relative_path(constraint, entry, prefixes)
            element = self.element_resolver.resolve(constraint, entry.id, relative, elements.get(relative))
            if relative in declared_by:
                element = dataclasses.replace(element, declared_by=declared_by[relative])
            elements[relative] = element
        return tuple(elements.values())

    def _overlay(
        self,
        entry: SchemaEntry,
        inherited: tuple[ResolvedElement, ...],
        prefixes: set[str],
    ) -> tuple[ResolvedElement, ...]:
        elements: dict[str, ResolvedElement] = {e.relative_path: e for e in inherited}

        for constraint in entry.differential_elements:
            relative = self._relative_path(constraint, entry, prefixes)
            base = elements.get(relative)
            element = self.element_resolver.resolve(constraint, entry.id, relative, base)
            if base is not None:
                self._check_narrowing(entry, constraint, element, base)
            elements[relative] = element

        return tuple(elements.values())

    def _check_narrowing(
        self,
        entry: SchemaEntry,
        constraint: ElementConstraint,
        element: ResolvedElement,
        base: ResolvedElement,
    ) -> None:
        if not element.cardinality.narrows(base.cardinality):
            raise CardinalityWideningError(
                f"Cardinality {element.cardinality} widens inherited {base.cardinality}",
                type_id=entry.id,
                path=constraint.path,
            )

        if base.type_refs:
            extra = [ref for ref in element.type_refs if ref not in base.type_refs]
            if extra:
                raise TypeWideningError(
                    f"Type(s) {', '.join(extra)} not allowed by inherited {', '.join(base.type_refs)}",
                    type_id=entry.id,
                    path=constraint.path,
                )

    @staticmethod
    def _relative_path(constraint: ElementConstraint, entry: SchemaEntry, prefixes: set[str]) -> str:
        """Split the type prefix off an element path."""
        head, _, rest = constraint.path.partition(".")
        if head not in prefixes:
            raise ElementPathError(
                f"Element path must start with '{entry.id}' or an ancestor id",
                type_id=entry.id,
                path=constraint.path or None,
            )
        return rest
