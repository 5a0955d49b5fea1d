"""
Hierarchy resolver for baseDefinition references.

Resolves each entry's base reference to another entry, rejects cycles,
counts roots, and groups types into levels so that a type is always
processed after its parent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import CompilerConfig, Severity
from ..errors import ClassificationError, CyclicHierarchyError, MultipleRootsError
from ..schema_ast.nodes import SchemaEntry

logger = logging.getLogger(__name__)


@dataclass
class ResolvedBase:
    """A resolved baseDefinition reference."""

    parent_id: str | None = None  # Id of the base entry, when inside the bundle
    sentinel: str | None = None  # Last URL segment, when outside the bundle


@dataclass
class Hierarchy:
    """Resolved inheritance graph."""

    entries: dict[str, SchemaEntry] = field(default_factory=dict)
    parents: dict[str, str | None] = field(default_factory=dict)
    sentinels: dict[str, str] = field(default_factory=dict)

    # Ancestors from direct parent to root
    ancestors: dict[str, list[str]] = field(default_factory=dict)

    roots: list[str] = field(default_factory=list)

    # Ids grouped by depth, each level in document order
    levels: list[list[str]] = field(default_factory=list)

    diagnostics: list[str] = field(default_factory=list)

    def depth(self, type_id: str) -> int:
        return len(self.ancestors[type_id])


class HierarchyResolver:
    """Builds the inheritance graph from baseDefinition references."""

    def __init__(self, entries: list[SchemaEntry], config: CompilerConfig | None = None):
        """
        Initialize the resolver.

        Args:
            entries: All entries across all kinds, in document order
            config: Compiler configuration (root limits)
        """
        self.entries = entries
        self.config = config or CompilerConfig()
        self._by_id: dict[str, SchemaEntry] = {}
        self._by_url: dict[str, SchemaEntry] = {}
        self._parents: dict[str, str | None] = {}
        self._ancestors: dict[str, list[str]] = {}
        self._build_index()

    def _build_index(self) -> None:
        """Index entries by id and canonical url."""
        for entry in self.entries:
            other = self._by_id.get(entry.id)
            if other is not None:
                raise ClassificationError(
                    f"Id declared as both {other.kind} and {entry.kind}",
                    type_id=entry.id,
                )
            self._by_id[entry.id] = entry
            if entry.url:
                self._by_url[entry.url] = entry

    def resolve_base(self, entry: SchemaEntry) -> ResolvedBase:
        """
        Resolve an entry's baseDefinition.

        Args:
            entry: The entry whose base to resolve

        Returns:
            ResolvedBase naming the parent id, or the sentinel for a
            reference outside the bundle
        """
        reference = entry.base_definition
        if not reference:
            return ResolvedBase()

        target = self._by_url.get(reference)
        if target is None:
            target = self._by_id.get(self._last_segment(reference))
        if target is None:
            return ResolvedBase(sentinel=self._last_segment(reference))
        return ResolvedBase(parent_id=target.id)

    @staticmethod
    def _last_segment(reference: str) -> str:
        return reference.rstrip("/").rsplit("/", 1)[-1]

    def resolve(self) -> Hierarchy:
        """
        Resolve the whole hierarchy.

        Returns:
            Hierarchy with parents, ancestors, roots and levels

        Raises:
            CyclicHierarchyError: If base references form a cycle
            MultipleRootsError: If there are too many roots and the
                configured severity is "error"
        """
        hierarchy = Hierarchy(entries=dict(self._by_id))

        for entry in self.entries:
            base = self.resolve_base(entry)
            self._parents[entry.id] = base.parent_id
            if base.sentinel:
                hierarchy.sentinels[entry.id] = base.sentinel

        for entry in self.entries:
            self._walk(entry.id)

        hierarchy.parents = dict(self._parents)
        hierarchy.ancestors = {e.id: self._ancestors[e.id] for e in self.entries}
        hierarchy.roots = [e.id for e in self.entries if self._parents[e.id] is None]
        hierarchy.levels = self._levels(hierarchy)

        logger.info("Resolved hierarchy: %d types, %d root(s)", len(self.entries), len(hierarchy.roots))
        self._check_roots(hierarchy)
        return hierarchy

    def _walk(self, type_id: str) -> list[str]:
        """Walk the base chain of a type, memoising ancestor lists."""
        chain: list[str] = []
        visiting: dict[str, int] = {}  # id -> index in chain

        current = type_id
        while current is not None and current not in self._ancestors:
            if current in visiting:
                raise CyclicHierarchyError(chain[visiting[current] :] + [current])
            visiting[current] = len(chain)
            chain.append(current)
            current = self._parents[current]

        tail = [] if current is None else [current] + self._ancestors[current]
        for index in range(len(chain) - 1, -1, -1):
            self._ancestors[chain[index]] = chain[index + 1 :] + tail
        return self._ancestors[type_id]

    def _levels(self, hierarchy: Hierarchy) -> list[list[str]]:
        levels: list[list[str]] = []
        for entry in self.entries:
            depth = hierarchy.depth(entry.id)
            while len(levels) <= depth:
                levels.append([])
            levels[depth].append(entry.id)
        return levels

    def _check_roots(self, hierarchy: Hierarchy) -> None:
        if len(hierarchy.roots) <= self.config.max_roots:
            return

        error = MultipleRootsError(hierarchy.roots, self.config.max_roots)
        if self.config.multiple_roots_severity == Severity.ERROR:
            raise error
        logger.warning("%s", error)
        hierarchy.diagnostics.append(str(error))
