"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner
from tmpltype.cli import cli


def _write_templates(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    (root / "nav").mkdir(parents=True)
    (root / "01_header.tmpl").write_text("{{ .Title }} {{ .User.Name }}", encoding="utf-8")
    (root / "nav" / "02_menu.tmpl").write_text(
        "{{ range .Items }}<a href={{ .Href }}>{{ .Label }}</a>{{ end }}", encoding="utf-8"
    )
    (root / "header_test.tmpl").write_text("{{ .Ignored }}", encoding="utf-8")
    return root


def test_generate_command_writes_go_file(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _write_templates(tmp_path)
    output_path = tmp_path / "template_gen.go"

    result = runner.invoke(
        cli,
        [
            "generate",
            "--in",
            f"{root}/*.tmpl,{root}/*/*.tmpl",
            "--exclude",
            "*_test.tmpl",
            "--pkg",
            "views",
            "--out",
            str(output_path),
        ],
    )

    assert result.exit_code == 0
    assert str(output_path.resolve()) in result.output
    source = output_path.read_text(encoding="utf-8")
    assert "package views\n" in source
    assert "type NavMenuItemsItem struct {\n\tHref  string\n\tLabel string\n}\n" in source
    assert "Ignored" not in source


def test_generate_command_reads_configuration_file(tmp_path: Path) -> None:
    runner = CliRunner()
    _write_templates(tmp_path)
    config_path = tmp_path / "tmpltype.yaml"
    config_path.write_text(
        """
input:
  patterns: "templates/*.tmpl, templates/*/*.tmpl"
  exclude: "*_test.tmpl"
output:
  package: views
  path: template_gen.go
""",
        encoding="utf-8",
    )

    result = runner.invoke(cli, ["generate", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "func RenderNavMenu(" in (tmp_path / "template_gen.go").read_text(encoding="utf-8")


def test_generate_command_returns_error_for_invalid_config(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = tmp_path / "tmpltype.yaml"
    config_path.write_text("input: [1, 2]\n", encoding="utf-8")

    result = runner.invoke(cli, ["generate", "--config", str(config_path)])

    assert result.exit_code != 0
    assert "must be a mapping" in str(result.exception)


def test_inspect_command_prints_schema_report(tmp_path: Path) -> None:
    runner = CliRunner()
    root = _write_templates(tmp_path)

    result = runner.invoke(
        cli, ["inspect", "--in", f"{root}/*/*.tmpl", "--root", str(root)]
    )

    assert result.exit_code == 0
    report = json.loads(result.output)
    assert report["imports"] == []
    (template,) = report["templates"]
    assert template["name"] == "Nav.Menu"
    assert template["key"] == "nav/menu"
    assert template["fields"][0]["type"] == "[]NavMenuItemsItem"
    assert [field["name"] for field in template["fields"][0]["children"]] == ["Href", "Label"]


def test_generate_config_command_writes_placeholder_file_with_default_name(
    tmp_path: Path,
) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("tmpltype.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "input:" in content
        assert "output:" in content
        assert "<REQUIRED>" in content
        assert str(output_path) in result.output


def test_generate_config_command_fails_when_output_file_already_exists(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "tmpltype.yaml"
    output_path.write_text("already-there", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert "already exists" in str(result.exception).lower()
    assert output_path.read_text(encoding="utf-8") == "already-there"
