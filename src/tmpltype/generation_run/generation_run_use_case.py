"""Generation run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from tmpltype.code_emission import (
    EmissionError,
    build_schema_report,
    emit_go_source,
)
from tmpltype.configuration import (
    Configuration,
    ConfigurationError,
    InputSettings,
    OutputSettings,
    load_configuration,
)
from tmpltype.param_directives import (
    MalformedTypeExpressionError,
    build_override_table,
    parse_directives,
)
from tmpltype.schema_inference import infer_schema
from tmpltype.template_discovery import (
    TemplateDiscoveryError,
    TemplateUnit,
    build_template_units,
    default_template_root,
    resolve_template_files,
    split_patterns,
)
from tmpltype.template_parsing import TemplateSyntaxError, parse_template
from tmpltype.type_resolution import TypeNameCollisionError, resolve_types
from tmpltype.unit_aggregation import (
    DuplicateTemplateNameError,
    NestingTooDeepError,
    ResolvedUnit,
    TemplateNamespace,
    aggregate_units,
)

from .run_contracts import GenerationOutcome, GenerationRequest, RunSettings

LOGGER = logging.getLogger(__name__)

INSPECT_OUTPUT_FILENAME = "template_gen.go"


class GenerationRunError(Exception):
    """Raised when a generation run cannot be completed."""


def execute_generation_run(request: GenerationRequest) -> GenerationOutcome:
    """Generate the Go bindings file; nothing is written unless every step succeeds."""
    settings = resolve_run_settings(request)
    if settings.package is None:
        raise GenerationRunError("Missing a Go package name (--pkg or output.package).")
    if settings.output_path is None:
        raise GenerationRunError("Missing an output file (--out or output.path).")
    package = settings.package
    output_path = settings.output_path

    namespace = build_namespace(settings, output_path)
    try:
        source = emit_go_source(namespace, package)
    except EmissionError as exc:
        raise GenerationRunError(str(exc)) from exc

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(source, encoding="utf-8")
    except OSError as exc:
        raise GenerationRunError(f"Failed to write {output_path}: {exc}") from exc
    LOGGER.info("wrote %s (%d templates)", output_path, len(namespace.units))
    return GenerationOutcome(
        output_path=output_path.resolve(),
        template_count=len(namespace.units),
        type_count=sum(1 + len(unit.named_types) for unit in namespace.units),
    )


def inspect_templates(request: GenerationRequest) -> dict[str, Any]:
    """Run the pipeline without emitting Go and return the schema report."""
    settings = resolve_run_settings(request)
    output_path = settings.output_path or _template_root(settings) / INSPECT_OUTPUT_FILENAME
    return build_schema_report(build_namespace(settings, output_path))


def resolve_run_settings(request: GenerationRequest) -> RunSettings:
    """Merge request values over the optional configuration file."""
    configuration = _load_optional_configuration(request.config_path)
    input_settings = configuration.input if configuration else InputSettings()
    output_settings = configuration.output if configuration else OutputSettings()
    patterns = split_patterns(request.patterns or "") or input_settings.patterns
    if not patterns:
        raise GenerationRunError("No input patterns given (--in or input.patterns).")
    return RunSettings(
        patterns=patterns,
        exclude=request.exclude or input_settings.exclude,
        root=Path(request.root) if request.root else input_settings.root,
        package=request.package or output_settings.package,
        output_path=Path(request.output_path) if request.output_path else output_settings.path,
        import_paths=dict(configuration.imports) if configuration else {},
    )


def build_namespace(settings: RunSettings, output_path: Path) -> TemplateNamespace:
    """Discover, resolve and aggregate every template of one run."""
    try:
        files = resolve_template_files(settings.patterns, settings.exclude)
        units = build_template_units(files, _template_root(settings), output_path)
    except TemplateDiscoveryError as exc:
        raise GenerationRunError(str(exc)) from exc

    resolved = [resolve_template_unit(unit, settings.import_paths) for unit in units]
    try:
        return aggregate_units(resolved)
    except (
        DuplicateTemplateNameError,
        NestingTooDeepError,
        TypeNameCollisionError,
        ValueError,
    ) as exc:
        raise GenerationRunError(str(exc)) from exc


def resolve_template_unit(
    unit: TemplateUnit, import_paths: Mapping[str, str] | None = None
) -> ResolvedUnit:
    """Parse, infer and resolve one template."""
    try:
        overrides = build_override_table(
            parse_directives(unit.text, source_path=str(unit.source_path))
        )
    except MalformedTypeExpressionError as exc:
        raise GenerationRunError(str(exc)) from exc
    try:
        schema = infer_schema(parse_template(unit.text))
        typed = resolve_types(schema, overrides, import_paths=import_paths)
    except (TemplateSyntaxError, TypeNameCollisionError) as exc:
        raise GenerationRunError(f"{unit.source_path}: {exc}") from exc
    LOGGER.debug(
        "resolved %s: %d fields, %d named types, %d overrides",
        unit.relative_path,
        len(typed.fields),
        len(typed.named_types),
        len(overrides),
    )
    return ResolvedUnit(unit=unit, schema=typed)


def _template_root(settings: RunSettings) -> Path:
    return settings.root or default_template_root(settings.patterns)


def _load_optional_configuration(config_path: str | None) -> Configuration | None:
    if not config_path:
        return None
    try:
        return load_configuration(config_path)
    except ConfigurationError as exc:
        raise GenerationRunError(str(exc)) from exc

