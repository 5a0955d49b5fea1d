"""
IR (Intermediate Representation) node definitions.

These nodes represent the resolved type model: every base reference is
resolved, every element carries its parsed cardinality and type set,
and inherited elements are merged into each type.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from ..schema_ast.nodes import SchemaKind


class Unbounded(Enum):
    """Sentinel type for an unbounded maximum cardinality."""

    UNBOUNDED = "*"

    def __repr__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = Unbounded.UNBOUNDED


@dataclass(frozen=True)
class Cardinality:
    """Allowed repetition count of an element."""

    min: int = 0
    max: int | Unbounded = UNBOUNDED

    @property
    def is_required(self) -> bool:
        return self.min > 0

    @property
    def is_repeating(self) -> bool:
        return self.max is UNBOUNDED or self.max > 1

    @property
    def is_prohibited(self) -> bool:
        return self.max == 0

    @property
    def upper(self) -> float:
        """Maximum as a number, infinity when unbounded."""
        return math.inf if self.max is UNBOUNDED else self.max

    def narrows(self, inherited: Cardinality) -> bool:
        """Whether this cardinality lies within the inherited one."""
        return self.min >= inherited.min and self.upper <= inherited.upper

    def __str__(self) -> str:
        return f"{self.min}..{'*' if self.max is UNBOUNDED else self.max}"


@dataclass(frozen=True)
class ChoiceVariant:
    """One legal alternative of a choice element."""

    type_ref: str = ""
    json_name: str = ""  # e.g. "valueQuantity" for value[x] typed Quantity


@dataclass(frozen=True)
class ChoiceType:
    """Tagged variant over the legal types of a choice element."""

    stem: str = ""  # Element name without the [x] marker
    variants: tuple[ChoiceVariant, ...] = ()

    def variant_for(self, type_ref: str) -> ChoiceVariant | None:
        for variant in self.variants:
            if variant.type_ref == type_ref:
                return variant
        return None

    @property
    def type_refs(self) -> tuple[str, ...]:
        return tuple(v.type_ref for v in self.variants)


@dataclass(frozen=True)
class ResolvedElement:
    """An element with constraints merged across the inheritance chain."""

    path: str = ""  # As written by the type that introduced the element, e.g. "Quantity.value"
    relative_path: str = ""  # Path below the type, "" for the type's own element
    cardinality: Cardinality = field(default_factory=Cardinality)
    type_refs: tuple[str, ...] = ()
    is_choice: bool = False
    choice: ChoiceType | None = None

    # Type that introduced the element
    declared_by: str = ""

    short: str | None = None

    @property
    def name(self) -> str:
        """Last path segment, e.g. "value[x]"."""
        return self.relative_path.rsplit(".", 1)[-1]

    @property
    def is_direct_child(self) -> bool:
        return bool(self.relative_path) and "." not in self.relative_path


@dataclass(frozen=True)
class TypeNode:
    """A fully resolved type."""

    id: str = ""
    kind: SchemaKind = SchemaKind.COMPLEX_TYPE
    parent: str | None = None  # Id of the base type, None for a root
    is_abstract: bool = False
    resolved_elements: tuple[ResolvedElement, ...] = ()

    # Last segment of an unresolved base reference, e.g. "DataType"
    root_sentinel: str | None = None

    description: str | None = None
    url: str | None = None
    version: str | None = None
    position: int = 0

    def element(self, relative_path: str) -> ResolvedElement | None:
        for element in self.resolved_elements:
            if element.relative_path == relative_path:
                return element
        return None

    def child_elements(self) -> list[ResolvedElement]:
        """Elements directly below the type, in order."""
        return [e for e in self.resolved_elements if e.is_direct_child]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Emitter output for one type."""

    source_id: str = ""
    normalized_identifier: str = ""
    kind: SchemaKind = SchemaKind.COMPLEX_TYPE


@dataclass
class TypeModel:
    """The complete resolved type model of one compile."""

    # Arena of nodes addressed by id
    nodes: dict[str, TypeNode] = field(default_factory=dict)

    # Node ids per kind, in the classifier's document order
    partitions: dict[SchemaKind, tuple[str, ...]] = field(default_factory=dict)

    roots: list[str] = field(default_factory=list)

    # Non-fatal diagnostics (e.g. multiple roots at warning severity)
    diagnostics: list[str] = field(default_factory=list)

    def __getitem__(self, type_id: str) -> TypeNode:
        return self.nodes[type_id]

    def __contains__(self, type_id: object) -> bool:
        return type_id in self.nodes

    def partition(self, kind: SchemaKind) -> list[TypeNode]:
        return [self.nodes[i] for i in self.partitions.get(kind, ())]

    def ancestors(self, type_id: str) -> list[str]:
        """Ancestor ids from the direct parent up to the root."""
        chain = []
        parent = self.nodes[type_id].parent
        while parent is not None:
            chain.append(parent)
            parent = self.nodes[parent].parent
        return chain
