"""
Name resolver for module, class and field identifiers.

Converts schema type ids to module identifiers (the normalizer can be
swapped for any deterministic callable) and rejects collisions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from ...utils import pascal_to_snake_case, python_safe_identifier, snake_to_pascal_case
from ..errors import IdentifierCollisionError
from .element_resolver import CHOICE_MARKER

Normalizer = Callable[[str], str]


def default_normalizer(schema_id: str) -> str:
    """Normalize a schema id to a Python module name ("CodeableConcept" -> "codeable_concept")."""
    return python_safe_identifier(pascal_to_snake_case(schema_id))


class NameResolver:
    """Resolves generated names and checks their uniqueness."""

    def __init__(self, normalizer: Normalizer | None = None):
        """
        Initialize the resolver.

        Args:
            normalizer: Schema id to module identifier function; must be
                deterministic. Defaults to snake_case conversion.
        """
        self.normalizer = normalizer or default_normalizer

    def normalize(self, schema_id: str) -> str:
        return self.normalizer(schema_id)

    def resolve_names(self, schema_ids: Iterable[str]) -> dict[str, str]:
        """
        Normalize every id, checking the mapping is injective.

        Args:
            schema_ids: All type ids of the run

        Returns:
            Mapping from schema id to module identifier, in input order

        Raises:
            IdentifierCollisionError: If two ids normalize to the same identifier
        """
        names: dict[str, str] = {}
        owners: dict[str, str] = {}
        for schema_id in schema_ids:
            identifier = self.normalize(schema_id)
            if identifier in owners and owners[identifier] != schema_id:
                raise IdentifierCollisionError(identifier, owners[identifier], schema_id)
            owners[identifier] = schema_id
            names[schema_id] = identifier
        return names

    @staticmethod
    def class_name(schema_id: str) -> str:
        """Class name of a generated type ("dateTime" -> "DateTime")."""
        return snake_to_pascal_case(schema_id)

    @staticmethod
    def field_name(element_name: str) -> str:
        """Field name of an element ("value[x]" -> "value", "modifierExtension" -> "modifier_extension")."""
        if element_name.endswith(CHOICE_MARKER):
            element_name = element_name[: -len(CHOICE_MARKER)]
        return python_safe_identifier(pascal_to_snake_case(element_name))
