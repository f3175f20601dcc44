"""Tests for composition resolution (allOf / anyOf / oneOf)."""

from __future__ import annotations

from typing import Any

import pytest

from schemalens.config import EngineSettings
from schemalens.resolution import ResolvedSchema, resolve, variant_label


class TestAllOf:
    """Tests for allOf merging."""

    def test_merges_properties_and_required(self) -> None:
        node = {
            "allOf": [
                {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]},
                {"properties": {"b": {"type": "number"}}, "required": ["b"]},
            ]
        }
        resolved = resolve(node, {})

        assert list(resolved.properties) == ["a", "b"]
        assert set(resolved.required) == {"a", "b"}
        assert resolved.kind == "object"

    @pytest.mark.parametrize(
        "first,second",
        [(["a"], ["b", "a"]), (["b", "a"], ["a"])],
    )
    def test_required_is_a_duplicate_free_union(self, first: list[str], second: list[str]) -> None:
        node = {"allOf": [{"required": first}, {"required": second}]}
        resolved = resolve(node, {})
        assert sorted(resolved.required) == ["a", "b"]
        assert len(resolved.required) == 2

    def test_later_scalar_keywords_win(self) -> None:
        node = {"allOf": [{"type": "string"}, {"type": "integer"}]}
        assert resolve(node, {}).kind == "integer"

    def test_later_property_definition_wins(self) -> None:
        node = {
            "allOf": [
                {"properties": {"x": {"type": "string"}}},
                {"properties": {"x": {"type": "integer"}}},
            ]
        }
        assert resolve(node, {}).properties["x"] == {"type": "integer"}

    def test_sub_schema_references_are_followed(self, petstore: dict[str, Any]) -> None:
        resolved = resolve({"$ref": "#/components/schemas/Pet"}, petstore)

        assert list(resolved.properties) == ["name", "tag", "nickname", "id", "category", "photoUrls", "owner"]
        assert resolved.required == ("name", "tag", "id")
        assert not resolved.is_unresolved

    def test_sibling_keywords_are_kept(self) -> None:
        node = {
            "description": "Outer",
            "properties": {"own": {"type": "string"}},
            "allOf": [{"properties": {"other": {"type": "string"}}}],
        }
        resolved = resolve(node, {})
        assert resolved.description == "Outer"
        assert list(resolved.properties) == ["own", "other"]

    def test_dangling_sub_schema_keeps_merged_shape(self) -> None:
        node = {
            "allOf": [
                {"$ref": "#/components/schemas/Gone"},
                {"type": "object", "properties": {"a": {"type": "string"}}},
            ]
        }
        resolved = resolve(node, {})
        assert resolved.unresolved_ref == "Gone"
        assert "a" in resolved.properties

    def test_nested_all_of(self) -> None:
        node = {"allOf": [{"allOf": [{"properties": {"a": {}}}, {"properties": {"b": {}}}]}, {"required": ["a"]}]}
        resolved = resolve(node, {})
        assert list(resolved.properties) == ["a", "b"]
        assert resolved.required == ("a",)


class TestVariants:
    """Tests for anyOf / oneOf selection."""

    def test_null_branch_marks_nullable(self) -> None:
        resolved = resolve({"anyOf": [{"type": "null"}, {"type": "string"}]}, {})
        assert resolved.kind == "string"
        assert resolved.nullable is True
        assert resolved.variant_labels is None

    def test_first_non_null_branch_is_the_shape(self) -> None:
        resolved = resolve({"oneOf": [{"type": "integer"}, {"type": "string"}]}, {})
        assert resolved.kind == "integer"
        assert resolved.nullable is False
        assert resolved.variant_labels == ("integer", "string")

    def test_reference_branches_are_labelled_by_name(self, petstore: dict[str, Any]) -> None:
        node = {
            "oneOf": [
                {"$ref": "#/components/schemas/Category"},
                {"$ref": "#/components/schemas/Owner"},
                {"type": "null"},
            ]
        }
        resolved = resolve(node, petstore)
        assert resolved.variant_labels == ("Category", "Owner")
        assert resolved.nullable is True
        assert "id" in resolved.properties

    def test_all_null_branches(self) -> None:
        resolved = resolve({"anyOf": [{"type": "null"}]}, {})
        assert resolved.kind == "null"
        assert resolved.nullable is False

    def test_nullable_requires_a_null_branch(self) -> None:
        resolved = resolve({"type": ["string", "null"]}, {})
        assert resolved.kind == "string"
        assert resolved.nullable is False

    def test_variant_label_fallbacks(self) -> None:
        assert variant_label({"$ref": "#/components/schemas/Pet"}) == "Pet"
        assert variant_label({"type": "boolean"}) == "boolean"
        assert variant_label({"properties": {}}) == "object"
        assert variant_label("nonsense") == "object"

    def test_type_label_joins_variants(self) -> None:
        resolved = resolve({"anyOf": [{"type": "string"}, {"type": "number"}]}, {})
        assert resolved.type_label == "string | number"


class TestResolve:
    """Tests for resolve() edge cases."""

    def test_unresolved_reference(self) -> None:
        resolved = resolve({"$ref": "#/components/schemas/Missing"}, {})
        assert resolved.unresolved_ref == "Missing"
        assert resolved.is_unresolved

    def test_none_and_non_mappings(self) -> None:
        assert resolve(None, {}) == ResolvedSchema()
        assert resolve("string", {}) == ResolvedSchema()  # type: ignore[arg-type]

    def test_result_has_no_composition_keywords(self, petstore: dict[str, Any]) -> None:
        for name in petstore["components"]["schemas"]:
            shape = resolve({"$ref": f"#/components/schemas/{name}"}, petstore).to_schema()
            assert not {"$ref", "allOf", "anyOf", "oneOf"} & set(shape)

    def test_resolved_input_is_returned_unchanged(self, petstore: dict[str, Any]) -> None:
        once = resolve({"$ref": "#/components/schemas/Pet"}, petstore)
        assert resolve(once, petstore) is once

    def test_idempotent_on_plain_shape(self, petstore: dict[str, Any]) -> None:
        once = resolve({"$ref": "#/components/schemas/Pet"}, petstore)
        assert resolve(once.to_schema(), petstore) == once

    def test_default_maps_are_empty_and_read_only(self) -> None:
        resolved = ResolvedSchema()
        assert resolved.properties == {}
        assert resolved.extras == {}
        with pytest.raises(TypeError):
            resolved.properties["x"] = {}  # type: ignore[index]

    def test_extras_are_preserved(self) -> None:
        resolved = resolve({"type": "object", "additionalProperties": False, "x-internal": True}, {})
        assert resolved.extras == {"additionalProperties": False, "x-internal": True}

    def test_depth_ceiling(self) -> None:
        node: dict[str, Any] = {"type": "string"}
        for _ in range(5):
            node = {"allOf": [node]}
        resolved = resolve(node, {}, settings=EngineSettings(_env_file=None, resolve_max_depth=2))
        assert resolved.kind is None

    def test_self_referencing_all_of_terminates(self) -> None:
        doc = {
            "components": {
                "schemas": {
                    "A": {
                        "allOf": [
                            {"$ref": "#/components/schemas/A"},
                            {"$ref": "#/components/schemas/A"},
                            {"properties": {"name": {"type": "string"}}, "required": ["name"]},
                        ]
                    }
                }
            }
        }
        resolved = resolve({"$ref": "#/components/schemas/A"}, doc)

        assert set(resolved.properties) == {"name"}
        assert resolved.required == ("name",)
        assert not resolved.depth_exceeded

    def test_repeated_pointer_is_depth_exceeded(self) -> None:
        doc = {"components": {"schemas": {"A": {"allOf": [{"$ref": "#/components/schemas/A"}]}}}}
        resolved = resolve(
            {"$ref": "#/components/schemas/A"}, doc, active=frozenset({"#/components/schemas/A"})
        )
        assert resolved.depth_exceeded

    def test_mutual_all_of_cycle_terminates(self) -> None:
        doc = {
            "components": {
                "schemas": {
                    "A": {"allOf": [{"$ref": "#/components/schemas/B"}, {"$ref": "#/components/schemas/B"}]},
                    "B": {
                        "allOf": [
                            {"$ref": "#/components/schemas/A"},
                            {"$ref": "#/components/schemas/A"},
                            {"type": "object", "properties": {"b": {}}},
                        ]
                    },
                }
            }
        }
        resolved = resolve({"$ref": "#/components/schemas/A"}, doc)
        assert resolved.kind == "object"
        assert set(resolved.properties) == {"b"}

    def test_to_dict_flags(self) -> None:
        data = resolve({"anyOf": [{"type": "string"}, {"type": "integer"}, {"type": "null"}]}, {}).to_dict()
        assert data["type"] == "string"
        assert data["nullable"] is True
        assert data["variants"] == ["string", "integer"]
        assert resolve({"$ref": "#/x"}, {}).to_dict() == {"unresolvedRef": "x"}
