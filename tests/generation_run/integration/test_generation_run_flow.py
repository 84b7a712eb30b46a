"""End-to-end generation run tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from tmpltype.code_emission import GENERATED_HEADER
from tmpltype.generation_run import (
    GenerationRequest,
    GenerationRunError,
    execute_generation_run,
    inspect_templates,
)
from tmpltype.schema_inference import infer_schema
from tmpltype.template_parsing import parse_template


def _write_templates(tmp_path: Path, templates: dict[str, str]) -> Path:
    root = tmp_path / "templates"
    for relative_path, text in templates.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def _request(tmp_path: Path, **overrides: str) -> GenerationRequest:
    root = tmp_path / "templates"
    values = {
        "patterns": f"{root}/**/*.tmpl",
        "package": "mailtpl",
        "output_path": str(tmp_path / "template_gen.go"),
    }
    values.update(overrides)
    return GenerationRequest(**values)


def test_generate_writes_go_bindings_for_all_templates(tmp_path: Path) -> None:
    _write_templates(
        tmp_path,
        {
            "01_header.tmpl": "{{ .Title }} {{ .User.Name }}",
            "nav/02_menu.tmpl": (
                "{{/* @param At time.Time */}}{{ range .Items }}{{ .Href }}{{ end }}"
            ),
        },
    )

    outcome = execute_generation_run(_request(tmp_path))

    source = (tmp_path / "template_gen.go").read_text(encoding="utf-8")
    assert outcome.output_path == (tmp_path / "template_gen.go").resolve()
    assert outcome.template_count == 2
    assert outcome.type_count == 4
    assert source.startswith(GENERATED_HEADER)
    assert "package mailtpl\n" in source
    assert '\t"time"\n' in source
    assert "//go:embed templates/01_header.tmpl\n" in source
    assert "//go:embed templates/nav/02_menu.tmpl\n" in source
    assert "type NavMenuItemsItem struct {\n\tHref string\n}\n" in source
    assert "func RenderHeader(w io.Writer, p Header) error {\n" in source


def test_generate_is_deterministic(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"a.tmpl": "{{ .B }}{{ .A }}", "x/c.tmpl": "{{ .D }}"})
    output_path = tmp_path / "template_gen.go"

    execute_generation_run(_request(tmp_path))
    first = output_path.read_text(encoding="utf-8")
    execute_generation_run(_request(tmp_path))

    assert output_path.read_text(encoding="utf-8") == first


def test_malformed_directive_names_source_and_writes_nothing(tmp_path: Path) -> None:
    root = _write_templates(
        tmp_path, {"ok.tmpl": "{{ .A }}", "bad.tmpl": "\n{{/* @param A []] */}}{{ .A }}"}
    )

    with pytest.raises(GenerationRunError) as excinfo:
        execute_generation_run(_request(tmp_path))

    assert f"{(root / 'bad.tmpl').resolve()}:2" in str(excinfo.value)
    assert not (tmp_path / "template_gen.go").exists()


def test_syntax_error_names_source_and_line(tmp_path: Path) -> None:
    root = _write_templates(tmp_path, {"broken.tmpl": "{{ if .A }}never closed"})

    with pytest.raises(GenerationRunError) as excinfo:
        execute_generation_run(_request(tmp_path))

    message = str(excinfo.value)
    assert message.startswith(str((root / "broken.tmpl").resolve()))
    assert "line 1" in message
    assert not (tmp_path / "template_gen.go").exists()


def test_missing_package_is_reported(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"a.tmpl": "{{ .A }}"})
    request = GenerationRequest(
        patterns=str(tmp_path / "templates" / "*.tmpl"),
        output_path=str(tmp_path / "template_gen.go"),
    )

    with pytest.raises(GenerationRunError, match="Missing a Go package name"):
        execute_generation_run(request)


def test_missing_output_is_reported(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"a.tmpl": "{{ .A }}"})
    request = GenerationRequest(patterns=str(tmp_path / "templates" / "*.tmpl"), package="x")

    with pytest.raises(GenerationRunError, match="Missing an output file"):
        execute_generation_run(request)


def test_templates_nested_too_deep_are_rejected(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"a/b/c.tmpl": "{{ .A }}"})

    with pytest.raises(GenerationRunError, match="nested 2 directories deep"):
        execute_generation_run(_request(tmp_path, patterns=f"{tmp_path}/templates/**/*.tmpl"))


def test_duplicate_template_names_are_rejected(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"01_header.tmpl": "{{ .A }}", "02_header.tmpl": "{{ .B }}"})

    with pytest.raises(GenerationRunError, match="both resolve to Header"):
        execute_generation_run(_request(tmp_path))


def test_configuration_drives_run_and_request_overrides_package(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"money.tmpl": "{{/* @param Total decimal.Decimal */}}"})
    config_path = tmp_path / "tmpltype.yaml"
    config_path.write_text(
        """
input:
  patterns: ["templates/*.tmpl"]
output:
  package: fromconfig
  path: template_gen.go
imports:
  decimal: github.com/shopspring/decimal
""",
        encoding="utf-8",
    )

    execute_generation_run(GenerationRequest(config_path=str(config_path), package="fromcli"))

    source = (tmp_path / "template_gen.go").read_text(encoding="utf-8")
    assert "package fromcli\n" in source
    assert '\t"github.com/shopspring/decimal"\n' in source
    assert "\tTotal decimal.Decimal\n" in source


def test_inspect_returns_schema_report_without_writing(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"nav/menu.tmpl": '{{ index .Labels "home" }}'})

    report = inspect_templates(GenerationRequest(patterns=f"{tmp_path}/templates/*/*.tmpl"))

    assert [template["name"] for template in report["templates"]] == ["Nav.Menu"]
    assert report["templates"][0]["embed_path"] == "nav/menu.tmpl"
    assert report["templates"][0]["fields"] == [
        {"name": "Labels", "go_name": "Labels", "type": "map[string]string"}
    ]
    assert not (tmp_path / "templates" / "template_gen.go").exists()


def test_struct_fields_match_the_identifiers_the_template_references(tmp_path: Path) -> None:
    text = (
        "{{ .First_name }} {{ .User.Last_Name }}"
        "{{ range .Line_items }}{{ .Sku }}{{ end }}"
        '{{ with .Account }}{{ .Id }}{{ end }}{{ index .Meta "k" }}{{ if .VIP }}!{{ end }}'
    )
    _write_templates(tmp_path, {"mail.tmpl": text})

    execute_generation_run(_request(tmp_path))

    source = (tmp_path / "template_gen.go").read_text(encoding="utf-8")
    start = source.index("type Mail struct {\n")
    struct_body = source[start : source.index("\n}\n", start)]
    declared = [line.split()[0] for line in struct_body.splitlines()[1:]]
    referenced = sorted(infer_schema(parse_template(text)).fields)
    assert declared == referenced
    assert "\tLast_Name string\n" in source


def test_lowercase_template_field_fails_the_run_and_writes_nothing(tmp_path: Path) -> None:
    _write_templates(tmp_path, {"mail.tmpl": "Hi {{ .name }}"})

    with pytest.raises(GenerationRunError, match="field 'name' of struct Mail of template Mail"):
        execute_generation_run(_request(tmp_path))

    assert not (tmp_path / "template_gen.go").exists()
