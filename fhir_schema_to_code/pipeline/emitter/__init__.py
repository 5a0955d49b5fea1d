"""
Emitter module.

Contains the type model emitter, the single-writer index aggregator and
the file-system writer.
"""

from __future__ import annotations

from .aggregator import IndexAggregator
from .emitter import TypeModelEmitter
from .filesystem import FileSystemWriter

__all__ = ["FileSystemWriter", "IndexAggregator", "TypeModelEmitter"]
