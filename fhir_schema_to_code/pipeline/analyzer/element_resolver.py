"""
Element and cardinality resolver.

Parses raw min/max tokens into a Cardinality, raw type codes into a
type reference set, and marks polymorphic choice elements.
"""

from __future__ import annotations

import re
from typing import Any

from ..config import CompilerConfig
from ..errors import MalformedCardinalityError, UnknownTypeReferenceError
from ..schema_ast.nodes import ElementConstraint
from .ir_nodes import UNBOUNDED, Cardinality, ChoiceType, ChoiceVariant, ResolvedElement, Unbounded

CHOICE_MARKER = "[x]"
UNBOUNDED_MARKER = "*"

FHIRPATH_SYSTEM_PREFIX = "http://hl7.org/fhirpath/"

_DIGITS = re.compile(r"[0-9]+")

# Cardinality of an element introduced without min/max
DEFAULT_CARDINALITY = Cardinality(0, UNBOUNDED)


class ElementResolver:
    """Resolves element constraints into ResolvedElement values."""

    def __init__(self, known_types: set[str], config: CompilerConfig | None = None):
        """
        Initialize the resolver.

        Args:
            known_types: Ids of every type in the bundle
            config: Compiler configuration (aliases, external types)
        """
        self.config = config or CompilerConfig()
        self.known_types = frozenset(known_types) | set(self.config.primitive_aliases) | set(self.config.external_types)

    def resolve(
        self,
        constraint: ElementConstraint,
        type_id: str,
        relative_path: str,
        inherited: ResolvedElement | None = None,
    ) -> ResolvedElement:
        """
        Resolve one element constraint.

        Where the constraint is silent, the inherited element's values apply.

        Args:
            constraint: The raw constraint
            type_id: Id of the type being resolved (for error context)
            relative_path: Path of the element below its type
            inherited: The element inherited at the same path, if any

        Returns:
            The resolved element
        """
        default = inherited.cardinality if inherited else DEFAULT_CARDINALITY
        cardinality = self.parse_cardinality(constraint.min, constraint.max, type_id, constraint.path, default)

        type_refs = self.parse_type_refs(constraint.type_codes)
        if not type_refs and inherited:
            type_refs = inherited.type_refs
        self.check_references(type_refs, type_id, constraint.path)

        name = relative_path.rsplit(".", 1)[-1]
        is_choice = len(type_refs) > 1 or name.endswith(CHOICE_MARKER)

        return ResolvedElement(
            path=inherited.path if inherited else constraint.path,
            relative_path=relative_path,
            cardinality=cardinality,
            type_refs=type_refs,
            is_choice=is_choice,
            choice=self.build_choice(name, type_refs) if is_choice else None,
            declared_by=inherited.declared_by if inherited else type_id,
            short=constraint.short or (inherited.short if inherited else None),
        )

    def parse_cardinality(
        self,
        raw_min: Any,
        raw_max: Any,
        type_id: str | None = None,
        path: str | None = None,
        default: Cardinality = DEFAULT_CARDINALITY,
    ) -> Cardinality:
        """
        Parse a min/max token pair.

        Args:
            raw_min: Non-negative integer (or digit string), None to use the default
            raw_max: Non-negative integer, digit string or "*", None to use the default
            type_id: Type id for error context
            path: Element path for error context
            default: Cardinality supplying missing bounds

        Returns:
            The parsed Cardinality

        Raises:
            MalformedCardinalityError: If a token is malformed or min > max
        """
        minimum = default.min if raw_min is None else self._parse_bound(raw_min, "min", type_id, path)

        if raw_max is None:
            maximum: int | Unbounded = default.max
        elif raw_max == UNBOUNDED_MARKER:
            maximum = UNBOUNDED
        else:
            maximum = self._parse_bound(raw_max, "max", type_id, path)

        if maximum is not UNBOUNDED and minimum > maximum:
            raise MalformedCardinalityError(f"min {minimum} exceeds max {maximum}", type_id=type_id, path=path)
        return Cardinality(minimum, maximum)

    def _parse_bound(self, raw: Any, name: str, type_id: str | None, path: str | None) -> int:
        if isinstance(raw, bool):
            raise MalformedCardinalityError(f"{name} must be a non-negative integer, got {raw!r}", type_id=type_id, path=path)
        if isinstance(raw, int) and raw >= 0:
            return raw
        if isinstance(raw, str) and _DIGITS.fullmatch(raw):
            return int(raw)
        raise MalformedCardinalityError(f"{name} must be a non-negative integer, got {raw!r}", type_id=type_id, path=path)

    def parse_type_refs(self, codes: tuple[str, ...]) -> tuple[str, ...]:
        """Normalize raw type codes, dropping duplicates but keeping order."""
        refs: list[str] = []
        for code in codes:
            ref = self.normalize_type_code(code)
            if ref not in refs:
                refs.append(ref)
        return tuple(refs)

    @staticmethod
    def normalize_type_code(code: str) -> str:
        """
        Normalize a type code.

        Examples:
            "http://hl7.org/fhirpath/System.String" -> "System.String"
            "http://hl7.org/fhir/StructureDefinition/Quantity" -> "Quantity"
            "CodeableConcept" -> "CodeableConcept"
        """
        if code.startswith(FHIRPATH_SYSTEM_PREFIX):
            return code[len(FHIRPATH_SYSTEM_PREFIX) :]
        if "/" in code:
            return code.rstrip("/").rsplit("/", 1)[-1]
        return code

    def check_references(self, type_refs: tuple[str, ...], type_id: str | None, path: str | None) -> None:
        """Raise UnknownTypeReferenceError for the first unknown reference."""
        for ref in type_refs:
            if ref not in self.known_types:
                raise UnknownTypeReferenceError(ref, type_id=type_id, path=path)

    def build_choice(self, name: str, type_refs: tuple[str, ...]) -> ChoiceType:
        """Build the tagged variant of a choice element."""
        stem = name[: -len(CHOICE_MARKER)] if name.endswith(CHOICE_MARKER) else name
        variants = tuple(ChoiceVariant(type_ref=ref, json_name=stem + self._variant_suffix(ref)) for ref in type_refs)
        return ChoiceType(stem=stem, variants=variants)

    @staticmethod
    def _variant_suffix(type_ref: str) -> str:
        # System.String -> String, dateTime -> DateTime
        name = type_ref.rsplit(".", 1)[-1]
        return name[:1].upper() + name[1:]
