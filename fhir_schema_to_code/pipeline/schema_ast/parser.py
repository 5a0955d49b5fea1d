"""
Bundle parser that reads structure definitions.

Phase 1 of the pipeline: Read the bundle document into raw SchemaEntry
nodes without classifying, resolving bases, or parsing cardinalities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import BundleFormatError
from .nodes import ElementConstraint, SchemaEntry

logger = logging.getLogger(__name__)


class BundleParser:
    """Parses a schema bundle into raw entries."""

    STRUCTURE_DEFINITION = "StructureDefinition"

    def load(self, path: str | Path) -> list[SchemaEntry]:
        """
        Load and parse a bundle file.

        Args:
            path: Path to the JSON bundle

        Returns:
            Entries in document order
        """
        entries = self.parse(self.read(path))
        logger.info("Loaded %d structure definitions from %s", len(entries), path)
        return entries

    def load_many(self, paths: list[str | Path]) -> list[SchemaEntry]:
        """Load several bundles, concatenating their entries in argument order."""
        entries: list[SchemaEntry] = []
        for path in paths:
            entries.extend(self.parse(self.read(path), start=len(entries)))
        logger.info("Loaded %d structure definitions from %d bundle(s)", len(entries), len(paths))
        return entries

    def read(self, path: str | Path) -> Any:
        """Decode a bundle file without parsing it."""
        with open(path, "rb") as f:
            try:
                return json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise BundleFormatError(f"Bundle '{path}' is not valid JSON: {e}") from e

    def parse(self, document: Any, start: int = 0) -> list[SchemaEntry]:
        """
        Parse an in-memory bundle document.

        Args:
            document: The decoded JSON bundle
            start: Position assigned to the first entry

        Returns:
            Entries in document order

        Raises:
            BundleFormatError: If the document is not a bundle of resources
        """
        if not isinstance(document, dict):
            raise BundleFormatError("Bundle document must be a JSON object")

        raw_entries = document.get("entry", [])
        if not isinstance(raw_entries, list):
            raise BundleFormatError("Bundle 'entry' must be a list")

        entries = []
        for index, wrapper in enumerate(raw_entries):
            resource = wrapper.get("resource") if isinstance(wrapper, dict) else None
            if not isinstance(resource, dict):
                raise BundleFormatError(f"Bundle entry #{index} has no resource object")

            resource_type = resource.get("resourceType")
            if resource_type is not None and resource_type != self.STRUCTURE_DEFINITION:
                logger.debug("Skipping entry #%d of resourceType %s", index, resource_type)
                continue

            entries.append(self._parse_resource(resource, start + len(entries)))
        return entries

    def _parse_resource(self, resource: dict[str, Any], position: int) -> SchemaEntry:
        """Parse one structure definition resource."""
        type_id = self._string(resource, "id", None) or ""
        snapshot = resource.get("snapshot")
        differential = resource.get("differential")

        abstract = resource.get("abstract", False)
        if not isinstance(abstract, bool):
            raise BundleFormatError(f"'abstract' must be a boolean, got {abstract!r}", type_id=type_id or None)

        return SchemaEntry(
            id=type_id,
            kind=self._string(resource, "kind", type_id),
            base_definition=self._string(resource, "baseDefinition", type_id),
            abstract=abstract,
            url=self._string(resource, "url", type_id),
            type=self._string(resource, "type", type_id),
            description=self._string(resource, "description", type_id),
            version=self._string(resource, "version", type_id),
            snapshot_elements=self._parse_elements(snapshot, type_id),
            differential_elements=self._parse_elements(differential, type_id),
            has_snapshot=isinstance(snapshot, dict),
            has_differential=isinstance(differential, dict),
            position=position,
        )

    @staticmethod
    def _string(container: dict[str, Any], key: str, type_id: str | None, path: str | None = None) -> str | None:
        """An optional string property; any other JSON value is a format error."""
        value = container.get(key)
        if value is not None and not isinstance(value, str):
            raise BundleFormatError(f"'{key}' must be a string, got {value!r}", type_id=type_id or None, path=path)
        return value

    def _parse_elements(self, container: Any, type_id: str) -> tuple[ElementConstraint, ...]:
        """Parse the element list of a snapshot or differential."""
        if not isinstance(container, dict):
            return ()
        elements = container.get("element") or []
        if not isinstance(elements, list):
            raise BundleFormatError("Element list must be a list", type_id=type_id or None)
        return tuple(self._parse_element(element, index, type_id) for index, element in enumerate(elements))

    def _parse_element(self, element: Any, index: int, type_id: str) -> ElementConstraint:
        """Parse one element definition."""
        if not isinstance(element, dict):
            raise BundleFormatError(f"Element #{index} must be a JSON object, got {element!r}", type_id=type_id or None)

        path = self._string(element, "path", type_id) or self._string(element, "id", type_id) or ""

        types = element.get("type") or []
        if not isinstance(types, list):
            raise BundleFormatError("Element 'type' must be a list", type_id=type_id or None, path=path)

        type_codes = []
        for type_info in types:
            if not isinstance(type_info, dict):
                raise BundleFormatError(
                    f"Element type must be a JSON object, got {type_info!r}",
                    type_id=type_id or None,
                    path=path,
                )
            code = self._string(type_info, "code", type_id, path)
            if code:
                type_codes.append(code)

        return ElementConstraint(
            path=path,
            min=element.get("min"),
            max=element.get("max"),
            type_codes=tuple(type_codes),
            short=self._string(element, "short", type_id, path),
        )
