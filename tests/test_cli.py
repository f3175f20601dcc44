"""Tests for the schemalens command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from schemalens.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestSchemaCommands:
    """Tests for resolve, example, fields and tree."""

    def test_resolve_by_name(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(petstore_json), "Pet"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["required"] == ["name", "tag", "id"]
        assert "allOf" not in data

    def test_resolve_by_pointer(self, runner: CliRunner, petstore_yaml: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(petstore_yaml), "#/components/schemas/Broken"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"unresolvedRef": "Missing"}

    def test_example(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["example", str(petstore_json), "NewPet"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"name": "string", "tag": "dog"}

    def test_fields_json(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["fields", str(petstore_json), "Category", "--json", "-r", "name"])

        assert result.exit_code == 0, result.output
        fields = json.loads(result.output)
        assert [(f["key"], f["category"], f["required"]) for f in fields] == [
            ("id", "number", True),
            ("name", "text", True),
        ]

    def test_fields_table(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["fields", str(petstore_json), "Owner"])

        assert result.exit_code == 0, result.output
        assert "email" in result.output

    def test_tree(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["tree", str(petstore_json), "Category"])

        assert result.exit_code == 0, result.output
        assert "Category" in result.output
        assert "integer" in result.output


class TestValidateCommand:
    """Tests for validate."""

    def test_valid_file(self, runner: CliRunner, petstore_json: Path, tmp_path: Path) -> None:
        data = tmp_path / "category.json"
        data.write_text('{"id": 1, "name": "Dogs"}', encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(petstore_json), "Category", str(data)])

        assert result.exit_code == 0, result.output
        assert "Valid Category" in result.output

    def test_invalid_stdin_exits_2(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["validate", str(petstore_json), "Category", "-"], input='{"id": "one"}')

        assert result.exit_code == 2
        assert "Invalid Category" in result.output
        assert "id:" in result.output


class TestDocumentCommands:
    """Tests for endpoints and body."""

    def test_endpoints(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["endpoints", str(petstore_json)])

        assert result.exit_code == 0, result.output
        assert "Petstore" in result.output
        assert "/pets" in result.output
        assert "https://eu.petstore.example.com/v1" in result.output

    def test_body_json(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["body", str(petstore_json), "post", "/pets"])

        assert result.exit_code == 0, result.output
        assert "json" in result.output
        assert '"tag": "dog"' in result.output

    def test_body_form(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["body", str(petstore_json), "PUT", "/pets/{petId}/photo"])

        assert result.exit_code == 0, result.output
        assert "form-data" in result.output
        assert "avatar" in result.output

    def test_unknown_endpoint(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["body", str(petstore_json), "PATCH", "/pets"])
        assert result.exit_code == 1


class TestErrorsAndOptions:
    """Tests for error reporting and global options."""

    def test_missing_document(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(tmp_path / "nope.json"), "Pet"])

        assert result.exit_code == 1
        assert "E001" in result.output

    def test_non_utf8_document(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "latin.json"
        path.write_bytes('{"info": {"title": "Café"}}'.encode("latin-1"))

        result = runner.invoke(cli, ["endpoints", str(path)])

        assert result.exit_code == 1
        assert "E002" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_unknown_schema(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["example", str(petstore_json), "Unicorn"])

        assert result.exit_code == 1
        assert "E004" in result.output

    def test_verbose_errors_include_suggestions(self, runner: CliRunner, petstore_json: Path) -> None:
        result = runner.invoke(cli, ["-v", "example", str(petstore_json), "Unicorn"])

        assert result.exit_code == 1
        assert "Suggestions:" in result.output

    def test_config_file(self, runner: CliRunner, petstore_json: Path, tmp_path: Path) -> None:
        config = tmp_path / "schemalens.yaml"
        config.write_text("placeholder_string: text\n", encoding="utf-8")

        result = runner.invoke(cli, ["-c", str(config), "example", str(petstore_json), "NewPet"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["name"] == "text"

    def test_bad_config_file(self, runner: CliRunner, petstore_json: Path, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["-c", str(tmp_path / "absent.yaml"), "example", str(petstore_json), "NewPet"])

        assert result.exit_code == 1
        assert "E102" in result.output
