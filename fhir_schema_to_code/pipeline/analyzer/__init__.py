"""
Analyzer module.

Contains hierarchy resolution, snapshot reconciliation, element and
cardinality resolution, name resolution, and type model building.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .element_resolver import ElementResolver
from .hierarchy import Hierarchy, HierarchyResolver
from .ir_nodes import (
    UNBOUNDED,
    Cardinality,
    ChoiceType,
    ChoiceVariant,
    ModuleDescriptor,
    ResolvedElement,
    TypeModel,
    TypeNode,
)
from .name_resolver import NameResolver, default_normalizer
from .reconciler import SnapshotReconciler

__all__ = [
    "UNBOUNDED",
    "Cardinality",
    "ChoiceType",
    "ChoiceVariant",
    "ResolvedElement",
    "TypeNode",
    "TypeModel",
    "ModuleDescriptor",
    "Hierarchy",
    "HierarchyResolver",
    "ElementResolver",
    "SnapshotReconciler",
    "NameResolver",
    "default_normalizer",
    "SchemaAnalyzer",
]
