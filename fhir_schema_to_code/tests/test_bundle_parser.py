"""
Tests for reading schema bundles into raw entries.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fhir_schema_to_code.pipeline.errors import BundleFormatError, SchemaCompileError
from fhir_schema_to_code.pipeline.schema_ast import BundleParser

TEST_DATA_DIR = Path(__file__).with_name("test_data")


class TestBundleParser:
    """Test the bundle loader"""

    def test_load_types_bundle(self):
        entries = BundleParser().load(TEST_DATA_DIR / "types_bundle.json")

        assert [e.id for e in entries][:4] == ["Base", "Element", "DataType", "PrimitiveType"]
        assert [e.position for e in entries] == list(range(len(entries)))

        element = entries[1]
        assert element.kind == "complex-type"
        assert element.abstract is True
        assert element.base_definition == "http://hl7.org/fhir/StructureDefinition/Base"
        assert element.has_differential and not element.has_snapshot
        assert [c.path for c in element.differential_elements] == ["Element", "Element.id", "Element.extension"]

        extension = element.differential_elements[2]
        assert extension.min == 0
        assert extension.max == "*"
        assert extension.type_codes == ("Extension",)

    def test_non_structure_definitions_are_skipped(self):
        entries = BundleParser().load(TEST_DATA_DIR / "resources_bundle.json")
        assert [e.id for e in entries] == ["Resource", "DomainResource", "Observation"]

    def test_load_many_continues_positions(self):
        parser = BundleParser()
        types = parser.load(TEST_DATA_DIR / "types_bundle.json")
        entries = parser.load_many([TEST_DATA_DIR / "types_bundle.json", TEST_DATA_DIR / "resources_bundle.json"])

        assert len(entries) == len(types) + 3
        assert entries[len(types)].id == "Resource"
        assert entries[len(types)].position == len(types)

    def test_snapshot_and_differential(self):
        entries = BundleParser().load(TEST_DATA_DIR / "types_bundle.json")
        coding = next(e for e in entries if e.id == "Coding")
        assert coding.has_snapshot and coding.has_differential
        assert len(coding.snapshot_elements) == 6
        assert coding.snapshot_elements[1].path == "Element.id"

    def test_type_defaults_to_id(self):
        entries = BundleParser().parse({"entry": [{"resource": {"id": "Foo", "kind": "complex-type"}}]})
        assert entries[0].type_name == "Foo"

    def test_path_falls_back_to_element_id(self):
        document = {
            "entry": [
                {
                    "resource": {
                        "id": "Foo",
                        "kind": "complex-type",
                        "differential": {"element": [{"id": "Foo.bar", "type": [{"code": "string"}, {}]}]},
                    }
                }
            ]
        }
        constraint = BundleParser().parse(document)[0].differential_elements[0]
        assert constraint.path == "Foo.bar"
        assert constraint.type_codes == ("string",)
        assert constraint.min is None and constraint.max is None

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"entry": {"resource": {}}},
            {"entry": [{"fullUrl": "http://example.org/no-resource"}]},
            {"entry": ["not an object"]},
            {"entry": [{"resource": {"id": "X", "differential": {"element": ["X.value"]}}}]},
            {"entry": [{"resource": {"id": "X", "snapshot": {"element": [{"path": "X.value", "type": "string"}]}}}]},
            {"entry": [{"resource": {"id": "X", "differential": {"element": [{"path": "X.value", "type": ["string"]}]}}}]},
            {"entry": [{"resource": {"id": "X", "differential": {"element": [{"path": 42}]}}}]},
            {"entry": [{"resource": {"id": "X", "baseDefinition": {"url": "Base"}}}]},
            {"entry": [{"resource": {"id": 7, "kind": "complex-type"}}]},
        ],
    )
    def test_malformed_documents(self, document):
        with pytest.raises(BundleFormatError):
            BundleParser().parse(document)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")

        with pytest.raises(SchemaCompileError, match="not valid JSON"):
            BundleParser().load(path)

    def test_empty_bundle(self):
        assert BundleParser().parse({"resourceType": "Bundle"}) == []

    def test_undecodable_bytes(self, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"entry": [\xff]}')

        with pytest.raises(BundleFormatError, match="not valid JSON"):
            BundleParser().load(path)

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_abstract_must_be_a_boolean(self, value):
        document = {"entry": [{"resource": {"id": "Foo", "kind": "complex-type", "abstract": value}}]}

        with pytest.raises(BundleFormatError, match="'abstract' must be a boolean") as exc_info:
            BundleParser().parse(document)
        assert exc_info.value.type_id == "Foo"

    def test_element_errors_name_type_and_path(self):
        document = {
            "entry": [
                {"resource": {"id": "Foo", "differential": {"element": [{"path": "Foo.bar", "type": [{"code": 5}]}]}}}
            ]
        }

        with pytest.raises(BundleFormatError) as exc_info:
            BundleParser().parse(document)
        assert exc_info.value.type_id == "Foo"
        assert exc_info.value.path == "Foo.bar"
