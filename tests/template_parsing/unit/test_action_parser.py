"""Template action parser tests."""

from __future__ import annotations

import pytest
from tmpltype.template_parsing import (
    Action,
    Command,
    Conditional,
    Constant,
    FieldRef,
    Identifier,
    Iteration,
    Literal,
    Pipeline,
    ScopeRebind,
    TemplateCall,
    TemplateSyntaxError,
    parse_template,
)


def _field_action(*segments: str, line: int = 1) -> Action:
    return Action(Pipeline(commands=(Command((FieldRef(segments=segments),)),)), line)


def test_parse_template_splits_text_and_field_actions() -> None:
    nodes = parse_template("Hello {{ .User.Name }}!")

    assert nodes == (Literal("Hello "), _field_action("User", "Name"), Literal("!"))


def test_parse_template_builds_iteration_with_fallback() -> None:
    (node,) = parse_template("{{range .Items}}{{.ID}}{{else}}none{{end}}")

    assert isinstance(node, Iteration)
    assert node.pipeline.control_field() == FieldRef(segments=("Items",))
    assert node.body == (_field_action("ID"),)
    assert node.fallback == (Literal("none"),)


def test_parse_template_builds_scope_rebind_without_fallback() -> None:
    (node,) = parse_template("{{ with .User }}{{ .Name }}{{ end }}")

    assert isinstance(node, ScopeRebind)
    assert node.body == (_field_action("Name"),)
    assert node.fallback is None


def test_else_if_chain_nests_conditionals_under_one_end() -> None:
    (node,) = parse_template("{{if .A}}a{{else if .B}}b{{else}}c{{end}}")

    assert isinstance(node, Conditional)
    assert node.body == (Literal("a"),)
    assert node.fallback is not None
    (nested,) = node.fallback
    assert isinstance(nested, Conditional)
    assert nested.pipeline.control_field() == FieldRef(segments=("B",))
    assert nested.body == (Literal("b"),)
    assert nested.fallback == (Literal("c"),)


def test_trim_markers_and_comments_are_dropped() -> None:
    nodes = parse_template("a {{- .X -}} b{{/* @param X int */}}{{- /* note */ -}}")

    actions = [node for node in nodes if isinstance(node, Action)]
    assert actions == [_field_action("X")]


def test_index_call_exposes_lookup_target() -> None:
    (node,) = parse_template('{{ index .Meta "env" }}')

    assert isinstance(node, Action)
    assert node.pipeline.commands[0].args == (
        Identifier("index"),
        FieldRef(segments=("Meta",)),
        Constant('"env"'),
    )
    assert list(node.pipeline.lookups()) == [FieldRef(segments=("Meta",))]


def test_parenthesized_pipeline_is_searched_for_lookups_and_fields() -> None:
    (node,) = parse_template('{{ printf "%s" (index .Meta "k") }}')

    assert isinstance(node, Action)
    assert list(node.pipeline.lookups()) == [FieldRef(segments=("Meta",))]
    assert list(node.pipeline.field_refs()) == [FieldRef(segments=("Meta",))]


def test_field_chained_on_call_result_is_not_a_data_reference() -> None:
    (node,) = parse_template('{{ (index .M "k").Name }}')

    assert isinstance(node, Action)
    assert list(node.pipeline.field_refs()) == [FieldRef(segments=("M",))]


def test_variables_and_root_references_keep_their_base() -> None:
    nodes = parse_template("{{ $u := .User }}{{ $u.Name }}{{ $.Title }}")

    declaration, variable_use, root_use = nodes
    assert isinstance(declaration, Action)
    assert declaration.pipeline.declarations == ("$u",)
    assert isinstance(variable_use, Action)
    assert list(variable_use.pipeline.field_refs()) == [FieldRef(segments=("Name",), base="$u")]
    assert isinstance(root_use, Action)
    assert list(root_use.pipeline.field_refs()) == [FieldRef(segments=("Title",), base="$")]


def test_range_declares_index_and_element_variables() -> None:
    (node,) = parse_template("{{ range $i, $item := .Items }}{{ $item.Name }}{{ end }}")

    assert isinstance(node, Iteration)
    assert node.pipeline.declarations == ("$i", "$item")
    assert node.pipeline.control_field() == FieldRef(segments=("Items",))


def test_template_call_keeps_name_and_argument() -> None:
    (node,) = parse_template('{{ template "footer" .User }}')

    assert node == TemplateCall(
        name="footer",
        pipeline=Pipeline(commands=(Command((FieldRef(segments=("User",)),)),)),
        line=1,
    )


def test_keyword_constants_are_not_identifiers() -> None:
    (node,) = parse_template("{{ if eq .Mode true }}x{{ end }}")

    assert isinstance(node, Conditional)
    assert node.pipeline.commands[0].args == (
        Identifier("eq"),
        FieldRef(segments=("Mode",)),
        Constant("true"),
    )
    assert node.pipeline.control_field() is None


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("{{ if .A }}x", "missing {{end}} for {{if}}"),
        ("{{ end }}", "unexpected {{end}}"),
        ("{{ .A", "unclosed action"),
        ('{{ define "x" }}{{ end }}', "{{define}} is not supported"),
        ("{{ .A | }}", "missing command after '|'"),
        ('{{ printf "%s }}', "unterminated quoted string"),
        ("{{/* open", "unclosed comment"),
    ],
)
def test_parse_template_rejects_malformed_syntax(text: str, message: str) -> None:
    with pytest.raises(TemplateSyntaxError) as exc_info:
        parse_template(text)

    assert message in str(exc_info.value)


def test_syntax_errors_report_the_action_line() -> None:
    with pytest.raises(TemplateSyntaxError) as exc_info:
        parse_template("first\nsecond\n{{ range .Items }}")

    assert exc_info.value.line == 3
    assert str(exc_info.value).startswith("line 3:")


def test_action_lines_account_for_multiline_comments_and_actions() -> None:
    nodes = parse_template("a\n{{/* spans\ntwo lines */}}\n{{ .A }}\n{{\n.B }}\n{{ .C }}")

    assert [node.line for node in nodes if isinstance(node, Action)] == [4, 5, 7]
