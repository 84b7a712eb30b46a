"""Type resolver tests."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import pytest
from tmpltype.param_directives import build_override_table, parse_directives
from tmpltype.schema_inference import infer_schema
from tmpltype.template_parsing import parse_template
from tmpltype.type_resolution import (
    NamedType,
    TypedSchema,
    TypeNameCollisionError,
    resolve_types,
)


def _resolve(text: str, import_paths: Mapping[str, str] | None = None) -> TypedSchema:
    schema = infer_schema(parse_template(text))
    overrides = build_override_table(parse_directives(text))
    return resolve_types(schema, overrides, import_paths=import_paths)


def _field_types(typed: TypedSchema) -> dict[str, str]:
    return {field.name: field.type_string for field in typed.fields}


def _member_types(named: NamedType) -> dict[str, str]:
    return {member.name: member.type_string for member in named.fields}


def test_concrete_scenario_resolves_named_composites() -> None:
    typed = _resolve('{{.User.Name}}{{range .Items}}{{.ID}}{{.Title}}{{end}}{{index .Meta "env"}}')

    assert _field_types(typed) == {
        "Items": "[]ItemsItem",
        "Meta": "map[string]string",
        "User": "User",
    }
    assert [field.name for field in typed.fields] == ["Items", "Meta", "User"]
    assert [named.name for named in typed.named_types] == ["ItemsItem", "User"]
    items_item = typed.named_type("ItemsItem")
    assert items_item is not None
    assert [member.name for member in items_item.fields] == ["ID", "Title"]
    assert _member_types(items_item) == {"ID": "string", "Title": "string"}
    meta = typed.field("Meta")
    assert meta is not None
    assert meta.named_type is None
    assert typed.imports == ()


def test_single_segment_fields_resolve_to_string() -> None:
    typed = _resolve("{{ .A }}{{ if .B }}x{{ end }}{{ .C }}")

    assert set(_field_types(typed).values()) == {"string"}
    assert typed.named_types == ()


def test_printed_sequence_elements_resolve_to_string_slice() -> None:
    typed = _resolve("{{ range .Tags }}{{ . }}{{ end }}")

    assert _field_types(typed) == {"Tags": "[]string"}
    assert typed.named_types == ()


def test_nested_record_is_named_by_its_full_path() -> None:
    typed = _resolve("{{ .User.Address.City }}")

    assert [named.name for named in typed.named_types] == ["User", "UserAddress"]
    user = typed.named_type("User")
    assert user is not None
    assert _member_types(user) == {"Address": "UserAddress"}


def test_leaf_override_keeps_parent_record() -> None:
    typed = _resolve("{{/* @param X.Y int */}}{{ .X.Y }}")

    x_field = typed.field("X")
    assert x_field is not None
    assert x_field.type_string == "X"
    assert x_field.named_type == "X"
    y_field = x_field.child("Y")
    assert y_field is not None
    assert y_field.type_string == "int"
    named = typed.named_type("X")
    assert named is not None
    assert _member_types(named) == {"Y": "int"}


def test_sequence_of_struct_override_synthesizes_item_type() -> None:
    typed = _resolve(
        "{{/* @param Items []struct{ID int64; Title string} */}}"
        "{{ range .Items }}{{ .Title }}{{ end }}"
    )

    assert _field_types(typed) == {"Items": "[]ItemsItem"}
    items_item = typed.named_type("ItemsItem")
    assert items_item is not None
    assert _member_types(items_item) == {"ID": "int64", "Title": "string"}


def test_override_for_unreferenced_path_is_applied() -> None:
    typed = _resolve("{{/* @param Extra.Count int */}}{{ .Name }}")

    assert _field_types(typed) == {"Extra": "Extra", "Name": "string"}
    named = typed.named_type("Extra")
    assert named is not None
    assert _member_types(named) == {"Count": "int"}


def test_override_below_scalar_promotes_it_to_record() -> None:
    typed = _resolve("{{/* @param Name.First string */}}{{ .Name }}")

    assert _field_types(typed) == {"Name": "Name"}
    named = typed.named_type("Name")
    assert named is not None
    assert _member_types(named) == {"First": "string"}


def test_override_wins_over_inferred_sequence() -> None:
    typed = _resolve("{{/* @param Items string */}}{{ range .Items }}{{ .ID }}{{ end }}")

    assert _field_types(typed) == {"Items": "string"}
    assert typed.named_types == ()


def test_descendant_of_overridden_path_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    typed = _resolve(
        "{{/* @param User.Name int */}}{{/* @param User *string */}}{{ .User.Name }}"
    )

    assert _field_types(typed) == {"User": "*string"}
    assert typed.named_types == ()
    assert "ignoring @param User.Name" in caplog.text


def test_qualified_base_types_add_imports() -> None:
    typed = _resolve(
        "{{/* @param CreatedAt time.Time */}}{{/* @param Raw json.RawMessage */}}"
        "{{/* @param Deadline *time.Time */}}"
    )

    assert typed.imports == ("encoding/json", "time")
    assert _field_types(typed) == {
        "CreatedAt": "time.Time",
        "Deadline": "*time.Time",
        "Raw": "json.RawMessage",
    }


def test_unknown_qualifier_is_warned_and_configured_ones_are_used(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.WARNING)
    text = "{{/* @param Amount decimal.Decimal */}}"

    assert _resolve(text).imports == ()
    assert "no import path known for decimal.Decimal" in caplog.text
    configured = _resolve(text, import_paths={"decimal": "github.com/shopspring/decimal"})
    assert configured.imports == ("github.com/shopspring/decimal",)


def test_identical_shapes_under_one_name_are_deduplicated() -> None:
    typed = _resolve("{{ .user_address.city }}{{ .user.address.city }}")

    assert [named.name for named in typed.named_types] == ["User", "UserAddress"]


def test_different_shapes_under_one_name_collide() -> None:
    with pytest.raises(TypeNameCollisionError, match="UserAddress"):
        _resolve("{{ .user_address.street }}{{ .user.address.city }}")


def test_resolution_is_idempotent() -> None:
    text = (
        "{{/* @param Items []struct{ID int64; Title string} */}}"
        "{{ range .Items }}{{ .Title }}{{ end }}{{ .User.Name }}{{ index .Meta \"k\" }}"
    )

    assert _resolve(text) == _resolve(text)
