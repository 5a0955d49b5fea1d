"""
Errors raised while compiling a schema bundle.

Every error aborts the whole compile: downstream generation assumes a
fully resolved, cycle-free hierarchy, so there is no partial result.
"""

from __future__ import annotations


class SchemaCompileError(Exception):
    """Base class for all compile errors.

    Attributes:
        type_id: Id of the offending type, when known
        path: Offending element path, when known
    """

    def __init__(self, message: str, type_id: str | None = None, path: str | None = None):
        self.message = message
        self.type_id = type_id
        self.path = path
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.type_id:
            context.append(f"type '{self.type_id}'")
        if self.path:
            context.append(f"path '{self.path}'")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class BundleFormatError(SchemaCompileError):
    """Raised when the input document is not a bundle of resources."""


class ClassificationError(SchemaCompileError):
    """Raised when an entry cannot be classified.

    This can happen when:
    - The kind is missing or not recognised
    - An id repeats within a kind partition
    - An id is declared under two different kinds
    - The id casing does not match its kind
    """


class CyclicHierarchyError(SchemaCompileError):
    """Raised when base definitions form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Cyclic base definition: {' -> '.join(self.cycle)}", type_id=self.cycle[0])


class MultipleRootsError(SchemaCompileError):
    """Raised when more roots are found than configured."""

    def __init__(self, roots: list[str], max_roots: int):
        self.roots = list(roots)
        self.max_roots = max_roots
        super().__init__(f"Found {len(self.roots)} hierarchy roots, at most {max_roots} allowed: {', '.join(self.roots)}")


class ElementPathError(SchemaCompileError):
    """Raised when an element path does not start with its type's id."""


class CardinalityWideningError(SchemaCompileError):
    """Raised when a derived type loosens an inherited cardinality."""


class TypeWideningError(SchemaCompileError):
    """Raised when a derived type allows a type its base does not."""


class MalformedCardinalityError(SchemaCompileError):
    """Raised when min/max cannot be read as a cardinality."""


class UnknownTypeReferenceError(SchemaCompileError):
    """Raised when an element references a type that does not exist."""

    def __init__(self, reference: str, type_id: str | None = None, path: str | None = None):
        self.reference = reference
        super().__init__(f"Unknown type reference '{reference}'", type_id=type_id, path=path)


class IdentifierCollisionError(SchemaCompileError):
    """Raised when two type ids normalize to the same module identifier,
    or two elements of a type to the same field name (type_id given)."""

    def __init__(self, identifier: str, first_id: str, second_id: str, type_id: str | None = None):
        self.identifier = identifier
        self.colliding_ids = (first_id, second_id)
        if type_id is None:
            super().__init__(
                f"Types '{first_id}' and '{second_id}' both normalize to '{identifier}'",
                type_id=second_id,
            )
        else:
            super().__init__(
                f"Elements '{first_id}' and '{second_id}' both map to field '{identifier}'",
                type_id=type_id,
                path=second_id,
            )


class ArtifactValidationError(SchemaCompileError):
    """Raised when a rendered artifact is not valid source code."""
