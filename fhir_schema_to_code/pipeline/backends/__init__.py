"""
Backends module.

Contains the language-specific renderers of type modules and indexes.
"""

from __future__ import annotations

from .base import CodeBackend
from .python_backend import PythonBackend

__all__ = ["CodeBackend", "PythonBackend"]
