"""
Tests for emitting type modules and the single-writer index.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fhir_schema_to_code.pipeline import CompilerConfig, PipelineGenerator, SchemaKind
from fhir_schema_to_code.pipeline.analyzer import ModuleDescriptor, NameResolver
from fhir_schema_to_code.pipeline.backends import PythonBackend
from fhir_schema_to_code.pipeline.emitter import FileSystemWriter, IndexAggregator, TypeModelEmitter
from fhir_schema_to_code.pipeline.errors import IdentifierCollisionError

TEST_DATA_DIR = Path(__file__).with_name("test_data")

COMPLEX_MODULES = [
    "base",
    "element",
    "data_type",
    "primitive_type",
    "quantity",
    "age",
    "coding",
    "codeable_concept",
    "human_name",
    "extension",
]


@pytest.fixture(scope="module")
def model():
    return PipelineGenerator.from_files([TEST_DATA_DIR / "types_bundle.json"]).compile()


class FailingWriter(FileSystemWriter):
    """Writer failing on one artifact name."""

    def __init__(self, fail_on: str):
        super().__init__()
        self.fail_on = fail_on

    def create_if_absent(self, path, content, validate=True):
        if path.name == self.fail_on:
            raise OSError(f"disk full writing {path.name}")
        return super().create_if_absent(path, content, validate)


class TestIndexAggregator:
    """Test the index aggregator"""

    def make(self, tmp_path) -> IndexAggregator:
        return IndexAggregator(tmp_path / "__init__.py", PythonBackend(CompilerConfig()), FileSystemWriter())

    def test_reorders_by_position(self, tmp_path):
        aggregator = self.make(tmp_path)
        aggregator.submit(1, ModuleDescriptor("string", "string", SchemaKind.PRIMITIVE_TYPE))
        aggregator.submit(0, ModuleDescriptor("boolean", "boolean", SchemaKind.PRIMITIVE_TYPE))

        descriptors = aggregator.finalize()

        assert [d.source_id for d in descriptors] == ["boolean", "string"]
        assert (tmp_path / "__init__.py").read_text() == "from .boolean import Boolean\nfrom .string import String\n"

    def test_merges_existing_index_once(self, tmp_path):
        (tmp_path / "__init__.py").write_text("# old header\nfrom .boolean import Boolean\n\nfrom .custom import Custom\n")
        aggregator = self.make(tmp_path)
        aggregator.submit(0, ModuleDescriptor("boolean", "boolean", SchemaKind.PRIMITIVE_TYPE))
        aggregator.submit(1, ModuleDescriptor("code", "code", SchemaKind.PRIMITIVE_TYPE))
        aggregator.finalize()

        assert (tmp_path / "__init__.py").read_text().splitlines() == [
            "from .boolean import Boolean",
            "from .custom import Custom",
            "from .code import Code",
        ]

    def test_finalize_only_once(self, tmp_path):
        aggregator = self.make(tmp_path)
        aggregator.finalize()
        with pytest.raises(RuntimeError):
            aggregator.finalize()


class TestTypeModelEmitter:
    """Test the type model emitter"""

    def test_emits_partition_in_document_order(self, model, tmp_path):
        descriptors = TypeModelEmitter().emit(model, SchemaKind.COMPLEX_TYPE, tmp_path)

        assert [d.normalized_identifier for d in descriptors] == COMPLEX_MODULES
        assert all(d.kind == SchemaKind.COMPLEX_TYPE for d in descriptors)
        for identifier in COMPLEX_MODULES:
            assert (tmp_path / f"{identifier}.py").exists()

        index = (tmp_path / "__init__.py").read_text().splitlines()
        assert index[0] == "from .base import Base"
        assert index[-1] == "from .extension import Extension"
        assert len(index) == len(COMPLEX_MODULES)

    def test_parallel_emission_matches_sequential(self, model, tmp_path):
        sequential = TypeModelEmitter().emit(model, SchemaKind.COMPLEX_TYPE, tmp_path / "seq")
        parallel = TypeModelEmitter(CompilerConfig(workers=4)).emit(model, SchemaKind.COMPLEX_TYPE, tmp_path / "par")

        assert parallel == sequential
        for identifier in COMPLEX_MODULES + ["__init__"]:
            assert (tmp_path / "par" / f"{identifier}.py").read_text() == (tmp_path / "seq" / f"{identifier}.py").read_text()

    def test_existing_module_kept_and_indexed_once(self, model, tmp_path):
        (tmp_path / "age.py").write_text("# hand written\n")
        emitter = TypeModelEmitter()

        emitter.emit(model, SchemaKind.COMPLEX_TYPE, tmp_path)
        emitter.emit(model, SchemaKind.COMPLEX_TYPE, tmp_path)

        assert (tmp_path / "age.py").read_text() == "# hand written\n"
        index = (tmp_path / "__init__.py").read_text().splitlines()
        assert index.count("from .age import Age") == 1
        assert len(index) == len(COMPLEX_MODULES)

    def test_ignore_types(self, model, tmp_path):
        emitter = TypeModelEmitter(CompilerConfig(ignore_types=["Age", "boolean"]))
        descriptors = emitter.emit(model, SchemaKind.COMPLEX_TYPE, tmp_path)

        assert "age" not in [d.normalized_identifier for d in descriptors]
        assert not (tmp_path / "age.py").exists()

    def test_descriptors_without_writing(self, model, tmp_path):
        descriptors = TypeModelEmitter().descriptors(model, SchemaKind.PRIMITIVE_TYPE)
        assert [d.source_id for d in descriptors] == ["boolean", "string", "integer", "decimal", "code"]
        assert list(tmp_path.iterdir()) == []

    def test_collision_fails_before_any_write(self, model, tmp_path):
        # Every primitive collides with the first one
        emitter = TypeModelEmitter(name_resolver=NameResolver(lambda schema_id: "same"))

        with pytest.raises(IdentifierCollisionError):
            emitter.emit(model, SchemaKind.PRIMITIVE_TYPE, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_collision_checked_across_partitions(self, model, tmp_path):
        def normalizer(schema_id: str) -> str:
            return "shared" if schema_id in ("boolean", "Quantity") else schema_id.lower()

        emitter = TypeModelEmitter(name_resolver=NameResolver(normalizer))
        with pytest.raises(IdentifierCollisionError) as excinfo:
            emitter.emit(model, SchemaKind.PRIMITIVE_TYPE, tmp_path)
        assert excinfo.value.colliding_ids == ("boolean", "Quantity")

    def test_failed_write_leaves_index_unwritten(self, model, tmp_path):
        emitter = TypeModelEmitter(CompilerConfig(workers=3), writer=FailingWriter("coding.py"))

        with pytest.raises(OSError, match="disk full"):
            emitter.emit(model, SchemaKind.COMPLEX_TYPE, tmp_path)
        assert not (tmp_path / "__init__.py").exists()

    def test_custom_index_name(self, model, tmp_path):
        config = CompilerConfig()
        config.output.index_file_name = "types_index.py"
        TypeModelEmitter(config).emit(model, SchemaKind.PRIMITIVE_TYPE, tmp_path)

        assert (tmp_path / "types_index.py").read_text().startswith("from .boolean import Boolean\n")
        assert not (tmp_path / "__init__.py").exists()
