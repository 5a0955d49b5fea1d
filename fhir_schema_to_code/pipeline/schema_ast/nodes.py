"""
Raw node definitions for a schema bundle.

These nodes hold the resources exactly as read from the document,
before classification, hierarchy resolution, or cardinality parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SchemaKind(str, Enum):
    """Declared kind of a structure definition."""

    PRIMITIVE_TYPE = "primitive-type"
    COMPLEX_TYPE = "complex-type"
    RESOURCE = "resource"
    EXTENSION = "extension"
    LOGICAL = "logical"


@dataclass(frozen=True)
class ElementConstraint:
    """One element line of a snapshot or differential."""

    path: str = ""
    min: Any = None  # Raw value, parsed by the element resolver
    max: Any = None  # Raw value, "*" or a digit string in practice
    type_codes: tuple[str, ...] = ()  # Raw type[].code values, in order
    short: str | None = None

    @property
    def has_cardinality(self) -> bool:
        return self.min is not None or self.max is not None


@dataclass(frozen=True)
class SchemaEntry:
    """A raw structure definition read from the bundle."""

    id: str = ""
    kind: str | None = None
    base_definition: str | None = None
    abstract: bool = False
    url: str | None = None
    type: str | None = None  # Constrained type name, e.g. "Quantity" for SimpleQuantity
    description: str | None = None
    version: str | None = None

    snapshot_elements: tuple[ElementConstraint, ...] = ()
    differential_elements: tuple[ElementConstraint, ...] = ()
    has_snapshot: bool = False
    has_differential: bool = False

    # Index of the entry in the bundle (document order)
    position: int = 0

    @property
    def type_name(self) -> str:
        return self.type or self.id


@dataclass
class ClassifiedBundle:
    """Entries partitioned by kind, each partition in document order."""

    partitions: dict[SchemaKind, tuple[SchemaEntry, ...]] = field(default_factory=dict)

    def get(self, kind: SchemaKind) -> tuple[SchemaEntry, ...]:
        return self.partitions.get(kind, ())

    def all_entries(self) -> list[SchemaEntry]:
        """All entries in document order."""
        entries = [entry for partition in self.partitions.values() for entry in partition]
        return sorted(entries, key=lambda e: e.position)

    def count(self) -> int:
        return sum(len(p) for p in self.partitions.values())
