"""
Tests for the command line interface.
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from fhir_schema_to_code.fhir_schema_to_code import fhir_schema_to_code

TEST_DATA_DIR = Path(__file__).with_name("test_data")
TYPES = str(TEST_DATA_DIR / "types_bundle.json")
RESOURCES = str(TEST_DATA_DIR / "resources_bundle.json")


def write_bundle(path: Path, *resources: dict) -> str:
    path.write_text(json.dumps({"resourceType": "Bundle", "entry": [{"resource": r} for r in resources]}))
    return str(path)


class TestCli:
    """Test the generation commands"""

    def test_primitive_types(self, tmp_path):
        result = CliRunner().invoke(fhir_schema_to_code, ["primitive-types", TYPES, str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Generated 5 primitive-type modules" in result.output
        assert (tmp_path / "boolean.py").exists()
        first_line = (tmp_path / "boolean.py").read_text().splitlines()[0]
        assert first_line.startswith("# Generated by fhir_schema_to_code v")
        assert "primitive-types types_bundle.json" in first_line

    def test_complex_types(self, tmp_path):
        result = CliRunner().invoke(fhir_schema_to_code, ["complex-types", TYPES, str(tmp_path)])

        assert result.exit_code == 0, result.output
        index = (tmp_path / "__init__.py").read_text()
        assert "from .codeable_concept import CodeableConcept\n" in index

    def test_resources_from_several_bundles(self, tmp_path):
        result = CliRunner().invoke(fhir_schema_to_code, ["resources", TYPES, RESOURCES, str(tmp_path), "--workers", "2"])

        assert result.exit_code == 0, result.output
        assert "Generated 3 resource modules" in result.output
        assert (tmp_path / "observation.py").exists()

    def test_compile_error_exits_non_zero(self, tmp_path):
        bundle = write_bundle(
            tmp_path / "cycle.json",
            {"resourceType": "StructureDefinition", "id": "X", "kind": "complex-type", "baseDefinition": "X"},
        )
        result = CliRunner().invoke(fhir_schema_to_code, ["complex-types", bundle, str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Cyclic base definition: X -> X" in result.output
        assert not (tmp_path / "out").exists()

    def test_malformed_bundle_exits_non_zero(self, tmp_path):
        elements = write_bundle(
            tmp_path / "elements.json",
            {"resourceType": "StructureDefinition", "id": "X", "kind": "complex-type", "differential": {"element": ["X.value"]}},
        )
        binary = tmp_path / "binary.json"
        binary.write_bytes(b'{"entry": [\xff]}')

        for bundle in (elements, str(binary)):
            result = CliRunner().invoke(fhir_schema_to_code, ["complex-types", bundle, str(tmp_path / "out")])

            assert result.exit_code == 1, result.output
            assert "Error: " in result.output
            assert not (tmp_path / "out").exists()

    def test_strict_roots(self, tmp_path):
        bundle = write_bundle(
            tmp_path / "roots.json",
            {"resourceType": "StructureDefinition", "id": "boolean", "kind": "primitive-type"},
            {"resourceType": "StructureDefinition", "id": "HumanName", "kind": "complex-type", "baseDefinition": "DataType"},
        )
        lenient = CliRunner().invoke(fhir_schema_to_code, ["primitive-types", bundle, str(tmp_path / "a")])
        strict = CliRunner().invoke(fhir_schema_to_code, ["primitive-types", bundle, str(tmp_path / "b"), "--strict-roots"])

        assert lenient.exit_code == 0, lenient.output
        assert strict.exit_code == 1
        assert "hierarchy roots" in strict.output

    def test_config_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"ignore_types": ["code"], "add_generation_comment": False}))

        result = CliRunner().invoke(fhir_schema_to_code, ["primitive-types", TYPES, str(tmp_path / "out"), "-c", str(config)])

        assert result.exit_code == 0, result.output
        assert not (tmp_path / "out" / "code.py").exists()
        assert (tmp_path / "out" / "boolean.py").read_text().startswith("from __future__ import annotations\n")

    def test_missing_bundle(self, tmp_path):
        result = CliRunner().invoke(fhir_schema_to_code, ["complex-types", str(tmp_path / "missing.json"), str(tmp_path)])
        assert result.exit_code == 2

    def test_verbose_logs_modules(self, tmp_path):
        result = CliRunner().invoke(fhir_schema_to_code, ["-v", "primitive-types", TYPES, str(tmp_path)])
        assert result.exit_code == 0, result.output
