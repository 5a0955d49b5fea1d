"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import ModuleDescriptor, ResolvedElement, TypeModel, TypeNode
from ..analyzer.name_resolver import NameResolver
from ..config import CompilerConfig
from ..errors import IdentifierCollisionError


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from FHIRPath system types to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: CompilerConfig, name_resolver: NameResolver | None = None):
        """
        Initialize the backend.

        Args:
            config: Compiler configuration
            name_resolver: Resolver for module, class and field names
        """
        self.config = config
        self.name_resolver = name_resolver or NameResolver()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")
        self.index_template = self.jinja_env.get_template(f"index.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def render_module(
        self,
        node: TypeNode,
        model: TypeModel,
        names: dict[str, str],
        generation_comment: str = "",
    ) -> str:
        """
        Render the module of one type.

        Args:
            node: The type to render
            model: The complete type model, for reference lookups
            names: Module identifier of every type emitted into the same directory
            generation_comment: Comment line placed at the top, empty for none

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def render_index(
        self,
        descriptors: list[ModuleDescriptor],
        existing_lines: list[str] | None = None,
        generation_comment: str = "",
    ) -> str:
        """
        Render the index of a target directory.

        Args:
            descriptors: Emitted modules, in emission order
            existing_lines: Entry lines of an index already on disk, kept first
            generation_comment: Comment line placed at the top, empty for none

        Returns:
            Generated index as a string
        """

    @abstractmethod
    def translate_type(self, type_ref: str, model: TypeModel, names: dict[str, str]) -> str:
        """
        Translate a type reference to a language-specific type string.

        Args:
            type_ref: Type id or FHIRPath system type
            model: The complete type model
            names: Module identifier of every type emitted into the same directory

        Returns:
            Language-specific type string
        """

    @abstractmethod
    def index_line(self, descriptor: ModuleDescriptor) -> str:
        """The index entry of one module."""

    def _field_elements(self, node: TypeNode) -> list[ResolvedElement]:
        """
        Direct child elements rendered as fields, inherited ones included.

        Prohibited elements (max 0) are left out.
        """
        return [e for e in node.child_elements() if not e.cardinality.is_prohibited]

    def _prepare_class_context(
        self,
        node: TypeNode,
        model: TypeModel,
        names: dict[str, str],
    ) -> dict[str, Any]:
        """
        Prepare the template context for a class.

        Args:
            node: The type being rendered
            model: The complete type model
            names: Module identifier of every type emitted into the same directory

        Returns:
            Dictionary of template variables

        Raises:
            IdentifierCollisionError: If two elements map to the same field name
        """
        properties = {}
        declared_by: dict[str, str] = {}
        for element in self._field_elements(node):
            field_ctx = self._prepare_field_context(element, model, names)
            name = field_ctx["name"]
            if name in declared_by:
                raise IdentifierCollisionError(name, declared_by[name], element.name, type_id=node.id)
            declared_by[name] = element.name
            properties[name] = field_ctx

        details = []
        if node.url:
            details.append(f"URL: {self._docstring_text(node.url)}")
        if node.version:
            details.append(f"Version: {self._docstring_text(node.version)}")

        return {
            "CLASS_NAME": self.name_resolver.class_name(node.id),
            "DESCRIPTION": self._docstring_text(node.description or node.id),
            "DETAILS": details,
            "properties": properties,
        }

    @abstractmethod
    def _prepare_field_context(
        self,
        element: ResolvedElement,
        model: TypeModel,
        names: dict[str, str],
    ) -> dict[str, Any]:
        """Prepare the template context for one field."""

    @staticmethod
    def _docstring_text(text: str) -> str:
        """One line of text, safe inside triple double quotes."""
        text = " ".join(text.replace("\\", "\\\\").split())
        text = text.replace('"""', "'''")
        if text.endswith('"'):
            text = text[:-1] + '\\"'
        return text

    @staticmethod
    def _comment_text(text: str | None) -> str:
        """One line of text for a trailing comment."""
        return " ".join((text or "").split())
