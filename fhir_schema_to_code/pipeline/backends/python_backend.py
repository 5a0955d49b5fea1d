"""
Python code generation backend.

Generates one Python dataclass module per type, plus the index module
re-exporting every generated class.
"""

from __future__ import annotations

import collections
from typing import Any

from ..analyzer.ir_nodes import ModuleDescriptor, ResolvedElement, TypeModel, TypeNode
from ..analyzer.name_resolver import NameResolver
from ..config import CompilerConfig
from ..schema_ast.nodes import SchemaKind
from .base import CodeBackend

# Element of a primitive type holding its actual value
PRIMITIVE_VALUE_ELEMENT = "value"


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    TYPE_MAP = {
        "System.Boolean": "bool",
        "System.Integer": "int",
        "System.Integer64": "int",
        "System.Long": "int",
        "System.Decimal": "float",
        "System.String": "str",
        "System.Date": "str",
        "System.DateTime": "str",
        "System.Time": "str",
        "System.Quantity": "str",
    }

    STDLIB_MODULES = {"dataclasses", "typing"}

    def __init__(self, config: CompilerConfig, name_resolver: NameResolver | None = None):
        super().__init__(config, name_resolver)
        self.python_imports: set[tuple[str, str]] = set()
        self.sibling_imports: set[tuple[str, str]] = set()
        self._current: str | None = None  # Id of the type being rendered

    def render_module(
        self,
        node: TypeNode,
        model: TypeModel,
        names: dict[str, str],
        generation_comment: str = "",
    ) -> str:
        """
        Generate the Python module of one type.

        Classes are flat: every field, inherited ones included, is declared
        on the class itself. Classes of the same directory are imported after
        the class body, so modules referencing each other import in any order
        and dataclasses_json still resolves every annotation.
        """
        self.python_imports = {
            ("__future__", "annotations"),
            ("dataclasses", "dataclass"),
            ("dataclasses_json", "dataclass_json"),
        }
        self.sibling_imports = set()
        self._current = node.id

        context = self._prepare_class_context(node, model, names)

        prefix = self.prefix_template.render(
            generation_comment=generation_comment,
            required_imports=self._assemble_imports(),
        )
        suffix = self.suffix_template.render(sibling_imports=self._assemble_sibling_imports())
        return prefix + self.class_template.render(**context) + suffix

    def render_index(
        self,
        descriptors: list[ModuleDescriptor],
        existing_lines: list[str] | None = None,
        generation_comment: str = "",
    ) -> str:
        """Generate the index module; every entry line appears exactly once."""
        lines = list(dict.fromkeys(existing_lines or []))
        for descriptor in descriptors:
            line = self.index_line(descriptor)
            if line not in lines:
                lines.append(line)
        return self.index_template.render(generation_comment=generation_comment, lines=lines)

    def index_line(self, descriptor: ModuleDescriptor) -> str:
        return f"from .{descriptor.normalized_identifier} import {self.name_resolver.class_name(descriptor.source_id)}"

    def translate_type(self, type_ref: str, model: TypeModel, names: dict[str, str]) -> str:
        """
        Translate a type reference to a Python annotation.

        FHIRPath system types map to builtins. Types emitted into the same
        directory map to their class. Primitive types emitted elsewhere map
        to the builtin of their value element; anything else is Any.
        """
        if type_ref in self.TYPE_MAP:
            return self.TYPE_MAP[type_ref]

        if type_ref in names:
            class_name = self.name_resolver.class_name(type_ref)
            if type_ref != self._current:
                self.sibling_imports.add((f".{names[type_ref]}", class_name))
            return class_name

        if type_ref in model and model[type_ref].kind == SchemaKind.PRIMITIVE_TYPE:
            value = model[type_ref].element(PRIMITIVE_VALUE_ELEMENT)
            if value is not None and len(value.type_refs) == 1 and value.type_refs[0] in self.TYPE_MAP:
                return self.TYPE_MAP[value.type_refs[0]]

        self.python_imports.add(("typing", "Any"))
        return "Any"

    def _prepare_field_context(
        self,
        element: ResolvedElement,
        model: TypeModel,
        names: dict[str, str],
    ) -> dict[str, Any]:
        """
        Prepare the template context for one field.

        Repeating elements become lists, optional ones default to None and
        choice elements become a union of their variants.
        """
        name = self.name_resolver.field_name(element.name)
        json_name = element.choice.stem if element.choice else element.name

        type_names: list[str] = []
        for type_ref in element.type_refs:
            translated = self.translate_type(type_ref, model, names)
            if translated not in type_names:
                type_names.append(translated)
        if not type_names:
            self.python_imports.add(("typing", "Any"))
            type_names = ["Any"]
        if "Any" in type_names:
            type_names = ["Any"]
        base_type = " | ".join(type_names)

        cardinality = element.cardinality
        field_args = []
        if cardinality.is_repeating:
            field_type = f"list[{base_type}]"
            field_args.append("default_factory=list")
        elif cardinality.is_required:
            field_type = base_type
        else:
            field_type = base_type if base_type == "Any" else f"{base_type} | None"
            field_args.append("default=None")

        # Choice fields are written under one json name per variant
        if name != json_name and not element.is_choice:
            self.python_imports.add(("dataclasses_json", "config"))
            field_args.append(f'metadata=config(field_name="{json_name}")')

        if field_args == ["default=None"]:
            default = "None"
        elif field_args:
            self.python_imports.add(("dataclasses", "field"))
            default = f"field({', '.join(field_args)})"
        else:
            default = ""

        comments = []
        if element.short:
            comments.append(self._comment_text(element.short))
        if element.choice:
            comments.append("one of: " + ", ".join(v.json_name for v in element.choice.variants))

        return {
            "name": name,
            "type": field_type,
            "default": default,
            "comment": "; ".join(comments),
        }

    def _assemble_imports(self) -> list[str]:
        """Assemble Python import statements."""
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)

        groups = [
            {m: import_groups[m] for m in import_groups if m == "__future__"},
            {m: import_groups[m] for m in import_groups if m in self.STDLIB_MODULES},
            {m: import_groups[m] for m in import_groups if m not in self.STDLIB_MODULES and m != "__future__"},
        ]

        assembled: list[str] = []
        for group in groups:
            if not group:
                continue
            if assembled:
                assembled.append("")
            for module in sorted(group.keys()):
                assembled.append(f"from {module} import {', '.join(sorted(group[module]))}")
        return assembled

    def _assemble_sibling_imports(self) -> list[str]:
        return [f"from {module} import {name}  # noqa: E402" for module, name in sorted(self.sibling_imports)]
