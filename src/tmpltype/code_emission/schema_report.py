"""JSON report of an aggregated template namespace."""

from __future__ import annotations

import json
from typing import Any

from tmpltype.naming import go_field_name
from tmpltype.type_resolution.typed_models import TypedField
from tmpltype.unit_aggregation.unit_aggregator import AggregatedUnit, TemplateNamespace


def build_schema_report(namespace: TemplateNamespace) -> dict[str, Any]:
    """Describe every template, field and named type of ``namespace``."""
    return {
        "imports": list(namespace.imports),
        "templates": [_unit_report(unit) for unit in namespace.units],
    }


def render_schema_report(report: dict[str, Any]) -> str:
    return json.dumps(report, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def _unit_report(unit: AggregatedUnit) -> dict[str, Any]:
    return {
        "name": unit.name.canonical,
        "group": unit.name.group,
        "grouped": unit.name.is_grouped,
        "key": unit.name.key,
        "type_name": unit.name.type_name,
        "source": unit.unit.relative_path,
        "embed_path": unit.unit.embed_path,
        "fields": [_field_report(field) for field in unit.fields],
        "named_types": [
            {
                "name": named.name,
                "fields": [
                    {
                        "name": member.name,
                        "go_name": go_field_name(member.name),
                        "type": member.type_string,
                    }
                    for member in named.fields
                ],
            }
            for named in unit.named_types
        ],
        "imports": list(unit.imports),
    }


def _field_report(field: TypedField) -> dict[str, Any]:
    report: dict[str, Any] = {
        "name": field.name,
        "go_name": go_field_name(field.name),
        "type": field.type_string,
    }
    if field.named_type is not None:
        report["named_type"] = field.named_type
    if field.children:
        report["children"] = [_field_report(child) for child in field.children]
    return report
