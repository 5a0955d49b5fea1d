"""
Entry classifier.

Partitions raw entries by declared kind and enforces the per-kind
uniqueness and id casing rules.
"""

from __future__ import annotations

import logging

from ..errors import ClassificationError
from .nodes import ClassifiedBundle, SchemaEntry, SchemaKind

logger = logging.getLogger(__name__)

# Required case of the first letter of an id, per kind
_LOWERCASE_KINDS = {SchemaKind.PRIMITIVE_TYPE}
_UPPERCASE_KINDS = {SchemaKind.COMPLEX_TYPE, SchemaKind.RESOURCE}


class EntryClassifier:
    """Classifies entries into kind partitions."""

    def classify(self, entries: list[SchemaEntry]) -> ClassifiedBundle:
        """
        Partition entries by kind.

        Args:
            entries: Raw entries in document order

        Returns:
            ClassifiedBundle with one ordered partition per kind present

        Raises:
            ClassificationError: On a missing or unknown kind, a duplicate
                id within a kind, or an id whose casing contradicts its kind
        """
        partitions: dict[SchemaKind, list[SchemaEntry]] = {}
        seen: dict[SchemaKind, set[str]] = {}

        for entry in entries:
            kind = self._kind_of(entry)
            self._check_id(entry, kind)

            ids = seen.setdefault(kind, set())
            if entry.id in ids:
                raise ClassificationError(f"Duplicate id in {kind.value} partition", type_id=entry.id)
            ids.add(entry.id)
            partitions.setdefault(kind, []).append(entry)

        bundle = ClassifiedBundle(partitions={k: tuple(v) for k, v in partitions.items()})
        logger.info(
            "Classified %d entries: %s",
            bundle.count(),
            ", ".join(f"{len(v)} {k.value}" for k, v in bundle.partitions.items()),
        )
        return bundle

    def _kind_of(self, entry: SchemaEntry) -> SchemaKind:
        if not entry.kind:
            raise ClassificationError("Missing kind", type_id=entry.id or None)
        try:
            return SchemaKind(entry.kind)
        except ValueError:
            raise ClassificationError(f"Unrecognised kind '{entry.kind}'", type_id=entry.id or None) from None

    def _check_id(self, entry: SchemaEntry, kind: SchemaKind) -> None:
        if not entry.id:
            raise ClassificationError(f"Entry #{entry.position} of kind {kind.value} has no id")

        first = entry.id[0]
        if kind in _LOWERCASE_KINDS and not first.islower():
            raise ClassificationError(f"{kind.value} id must start with a lowercase letter", type_id=entry.id)
        if kind in _UPPERCASE_KINDS and not first.isupper():
            raise ClassificationError(f"{kind.value} id must start with an uppercase letter", type_id=entry.id)
