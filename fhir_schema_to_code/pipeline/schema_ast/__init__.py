"""
Schema AST module.

Contains the raw entry nodes, the bundle parser, and the entry classifier.
"""

from __future__ import annotations

from .classifier import EntryClassifier
from .nodes import ClassifiedBundle, ElementConstraint, SchemaEntry, SchemaKind
from .parser import BundleParser

__all__ = [
    "SchemaKind",
    "SchemaEntry",
    "ElementConstraint",
    "ClassifiedBundle",
    "BundleParser",
    "EntryClassifier",
]
