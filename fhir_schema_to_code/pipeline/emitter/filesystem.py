"""
File-system writer for generated artifacts.

Per-type artifacts are created if absent and never overwritten; the
index is replaced as a whole. Every write goes through a temporary
file in the target directory so an interrupted run never leaves a
partially written artifact behind.
"""

from __future__ import annotations

import ast
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import ArtifactValidationError

logger = logging.getLogger(__name__)


class FileSystemWriter:
    """Writes artifacts atomically, validating Python sources first.

    Two-phase approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Link (create-if-absent) or rename (replace) it onto the target
    """

    def __init__(self, validate_python: Callable[[str, Path], None] | None = None):
        """Initialize the writer.

        Args:
            validate_python: Optional validation function for Python code
        """
        self._validate_python = validate_python or self._default_validate_python

    def ensure_directory(self, path: Path) -> None:
        """Create a directory and its parents if needed."""
        path.mkdir(parents=True, exist_ok=True)

    def create_if_absent(self, path: Path, content: str, validate: bool = True) -> bool:
        """Write content only if the file doesn't exist.

        The existence check and the creation are a single atomic link, so
        concurrent writers of the same path cannot both succeed.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate Python content before finalizing

        Returns:
            True if the file was created, False if it already existed

        Raises:
            ArtifactValidationError: If validation fails
            OSError: If file operations fail
        """
        if path.exists():
            logger.debug("Keeping existing %s", path)
            return False

        temp_path = self._write_temp(path, content, validate)
        try:
            os.link(temp_path, path)
        except FileExistsError:
            logger.debug("Keeping %s created concurrently", path)
            return False
        finally:
            temp_path.unlink(missing_ok=True)
        return True

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically, replacing any existing file.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate Python content before finalizing

        Raises:
            ArtifactValidationError: If validation fails
            OSError: If file operations fail
        """
        temp_path = self._write_temp(path, content, validate)
        try:
            # rename() is atomic on POSIX when both paths are on the same filesystem
            temp_path.replace(path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def validate(self, path: Path, content: str) -> None:
        """Validate content destined for path; only Python sources are checked."""
        if path.suffix == ".py":
            self._validate_python(content, path)

    def _write_temp(self, path: Path, content: str, validate: bool) -> Path:
        """Write and validate content in a temporary file next to path."""
        self.ensure_directory(path.parent)

        # Same directory keeps link and rename on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            if validate:
                self.validate(path, content)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path

    @staticmethod
    def _default_validate_python(content: str, path: Path) -> None:
        """Validate that content is syntactically valid Python.

        Raises:
            ArtifactValidationError: If content is not valid Python
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ArtifactValidationError(f"Generated Python code is not valid: {e}", path=str(path)) from e
