"""
Tests for atomic create-if-absent and replace writes.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from fhir_schema_to_code.pipeline.emitter import FileSystemWriter
from fhir_schema_to_code.pipeline.errors import ArtifactValidationError


def leftovers(directory) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name.endswith(".tmp"))


class TestFileSystemWriter:
    """Test the file-system writer"""

    def test_create_if_absent(self, tmp_path):
        path = tmp_path / "pkg" / "human_name.py"

        assert FileSystemWriter().create_if_absent(path, "x = 1\n") is True
        assert path.read_text() == "x = 1\n"
        assert leftovers(path.parent) == []

    def test_existing_file_is_never_overwritten(self, tmp_path):
        path = tmp_path / "human_name.py"
        path.write_text("# customised\n")

        assert FileSystemWriter().create_if_absent(path, "x = 1\n") is False
        assert path.read_text() == "# customised\n"

    def test_concurrent_creates_write_once(self, tmp_path):
        path = tmp_path / "quantity.py"
        writer = FileSystemWriter()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda i: writer.create_if_absent(path, f"x = {i}\n"), range(16)))

        assert results.count(True) == 1
        assert path.read_text() == f"x = {results.index(True)}\n"
        assert leftovers(tmp_path) == []

    def test_write_replaces(self, tmp_path):
        path = tmp_path / "__init__.py"
        path.write_text("old = 1\n")

        FileSystemWriter().write(path, "new = 1\n")
        assert path.read_text() == "new = 1\n"
        assert leftovers(tmp_path) == []

    def test_invalid_python_is_rejected(self, tmp_path):
        path = tmp_path / "broken.py"

        with pytest.raises(ArtifactValidationError) as excinfo:
            FileSystemWriter().create_if_absent(path, "class :\n")
        assert excinfo.value.path == str(path)
        assert not path.exists()
        assert leftovers(tmp_path) == []

    def test_validation_can_be_skipped(self, tmp_path):
        path = tmp_path / "broken.py"
        assert FileSystemWriter().create_if_absent(path, "class :\n", validate=False)

    def test_only_python_is_validated(self, tmp_path):
        path = tmp_path / "notes.txt"
        FileSystemWriter().write(path, "class :\n")
        assert path.read_text() == "class :\n"

    def test_custom_validator(self, tmp_path):
        seen = []
        writer = FileSystemWriter(validate_python=lambda content, path: seen.append(path.name))

        writer.write(tmp_path / "a.py", "a = 1\n")
        assert seen == ["a.py"]
