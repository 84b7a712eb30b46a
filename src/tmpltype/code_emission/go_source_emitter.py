"""Go source emission for an aggregated template namespace."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from tmpltype.naming import go_field_name, lower_first
from tmpltype.unit_aggregation.unit_aggregator import AggregatedUnit, TemplateNamespace

LOGGER = logging.getLogger(__name__)

GENERATED_HEADER = "// Code generated by tmpltype. DO NOT EDIT."
BASE_IMPORTS = ("embed", "fmt", "io", "text/template")
SOURCE_VARIABLE_SUFFIX = "TplSource"
REGISTRY_FUNCTIONS = ("Render", "Templates")

_BLANK_IMPORTS = frozenset({"embed"})
_USED_PACKAGE_NAMES = frozenset({"fmt", "io", "template"})
_GO_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_GO_KEYWORDS = frozenset(
    "break case chan const continue default defer else fallthrough for func go goto if "
    "import interface map package range return select struct switch type var".split()
)

_REGISTRY_FUNCTIONS_SOURCE = """\
// Templates returns every parsed template keyed by its name.
func Templates() map[string]*template.Template {
\treturn templates
}

// Render executes the template registered under name with data.
func Render(w io.Writer, name string, data any) error {
\ttmpl, ok := templates[name]
\tif !ok {
\t\treturn fmt.Errorf("template %q not found", name)
\t}
\treturn tmpl.Execute(w, data)
}"""


class EmissionError(Exception):
    """Raised when a namespace cannot be rendered as valid Go source."""


def emit_go_source(namespace: TemplateNamespace, package: str) -> str:
    """Render the Go file for ``namespace``.

    The output depends only on the namespace and package name, so identical
    inputs give byte-identical files.

    Raises:
      EmissionError: On an invalid package name, an import that clashes with
        the generated code, duplicate Go identifiers, or a field a struct
        cannot expose to text/template under its template spelling.
    """
    _check_package_name(package)
    _check_imports(namespace.imports)
    _check_top_level_identifiers(namespace.units)

    sections = [
        f"{GENERATED_HEADER}\n\npackage {package}",
        _import_block(namespace.imports),
    ]
    sections.extend(_embed_declaration(unit) for unit in namespace.units)
    sections.append(_registry(namespace.units))
    sections.append(_REGISTRY_FUNCTIONS_SOURCE)
    for unit in namespace.units:
        sections.extend(_unit_declarations(unit))
    LOGGER.debug("emitted package %s with %d templates", package, len(namespace.units))
    return "\n\n".join(sections) + "\n"


def source_variable_name(unit: AggregatedUnit) -> str:
    return lower_first(unit.name.type_name) + SOURCE_VARIABLE_SUFFIX


def _check_package_name(package: str) -> None:
    if not _GO_IDENTIFIER.match(package) or package in _GO_KEYWORDS or package == "_":
        raise EmissionError(f"invalid Go package name: {package!r}")


def _check_imports(imports: Iterable[str]) -> None:
    for path in imports:
        if path in BASE_IMPORTS:
            continue
        package_name = path.rsplit("/", 1)[-1]
        if package_name in _USED_PACKAGE_NAMES:
            raise EmissionError(
                f"import {path} clashes with the generated code's use of package {package_name}"
            )


def _check_top_level_identifiers(units: Sequence[AggregatedUnit]) -> None:
    owners = {name: "generated registry" for name in REGISTRY_FUNCTIONS}
    for unit in units:
        declared = [
            unit.name.type_name,
            "Render" + unit.name.type_name,
            *(named.name for named in unit.named_types),
        ]
        for identifier in declared:
            owner = owners.get(identifier)
            if owner is not None:
                raise EmissionError(
                    f"Go identifier {identifier} of template {unit.name.canonical} "
                    f"is already declared by {owner}"
                )
            owners[identifier] = f"template {unit.name.canonical}"


def _import_block(imports: Iterable[str]) -> str:
    lines = ["import ("]
    for path in sorted({*BASE_IMPORTS, *imports}):
        prefix = "_ " if path in _BLANK_IMPORTS else ""
        lines.append(f'\t{prefix}"{path}"')
    lines.append(")")
    return "\n".join(lines)


def _embed_declaration(unit: AggregatedUnit) -> str:
    return f"//go:embed {unit.unit.embed_path}\nvar {source_variable_name(unit)} string"


def _registry(units: Sequence[AggregatedUnit]) -> str:
    keys = [_quote(unit.name.key) + ":" for unit in units]
    width = max((len(key) for key in keys), default=0)
    lines = ["var templates = map[string]*template.Template{"]
    for key, unit in zip(keys, units):
        parsed = (
            f"template.Must(template.New({_quote(unit.name.key)})"
            f'.Option("missingkey=error").Parse({source_variable_name(unit)}))'
        )
        lines.append(f"\t{key.ljust(width)} {parsed},")
    lines.append("}")
    return "\n".join(lines)


def _unit_declarations(unit: AggregatedUnit) -> list[str]:
    type_name = unit.name.type_name
    template = f"template {unit.name.canonical}"
    declarations = [
        f"// {type_name} holds the parameters of the {_quote(unit.name.key)} template.\n"
        + _struct(
            type_name,
            [(field.name, field.type_string) for field in unit.fields],
            f"struct {type_name} of {template}",
        )
    ]
    for named in unit.named_types:
        declarations.append(
            f"// {named.name} is a nested type of {type_name}.\n"
            + _struct(
                named.name,
                [(member.name, member.type_string) for member in named.fields],
                f"struct {named.name} of {template}",
            )
        )
    declarations.append(
        f"// Render{type_name} executes the {_quote(unit.name.key)} template with p.\n"
        f"func Render{type_name}(w io.Writer, p {type_name}) error {{\n"
        f"\treturn templates[{_quote(unit.name.key)}].Execute(w, p)\n"
        "}"
    )
    return declarations


def _struct(name: str, members: Sequence[tuple[str, str]], owner: str) -> str:
    if not members:
        return f"type {name} struct{{}}"
    exported = _export_field_names([member_name for member_name, _ in members], owner)
    width = max(len(item) for item in exported)
    lines = [f"type {name} struct {{"]
    for go_name, (_, type_string) in zip(exported, members):
        lines.append(f"\t{go_name.ljust(width)} {type_string}")
    lines.append("}")
    return "\n".join(lines)


def _export_field_names(names: Sequence[str], owner: str) -> list[str]:
    exported: list[str] = []
    for name in names:
        go_name = go_field_name(name)
        if go_name is None:
            raise EmissionError(
                f"field {name!r} of {owner} is not an exported Go identifier; "
                "text/template cannot resolve it through a struct field"
            )
        exported.append(go_name)
    return exported


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
