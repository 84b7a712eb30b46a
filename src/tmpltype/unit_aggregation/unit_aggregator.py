"""Merge resolved templates into one output namespace."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from tmpltype.template_discovery.source_models import TemplateUnit
from tmpltype.type_resolution.type_resolver import TypeNameCollisionError
from tmpltype.type_resolution.typed_models import (
    NamedType,
    NamedTypeField,
    TypedField,
    TypedSchema,
)

from .template_names import TemplateName, derive_template_name

LOGGER = logging.getLogger(__name__)


class DuplicateTemplateNameError(Exception):
    """Raised when two templates resolve to the same canonical name."""


@dataclass(frozen=True)
class ResolvedUnit:
    """A template together with its resolved schema."""

    unit: TemplateUnit
    schema: TypedSchema


@dataclass(frozen=True)
class AggregatedUnit:
    """One template in the output namespace, with prefixed named types."""

    name: TemplateName
    unit: TemplateUnit
    fields: tuple[TypedField, ...]
    named_types: tuple[NamedType, ...]
    imports: tuple[str, ...]


@dataclass(frozen=True)
class TemplateNamespace:
    """Every template of one run; ``units`` are sorted by canonical name."""

    units: tuple[AggregatedUnit, ...]
    imports: tuple[str, ...]

    def unit(self, canonical: str) -> AggregatedUnit | None:
        return next((item for item in self.units if item.name.canonical == canonical), None)


def aggregate_units(resolved: Iterable[ResolvedUnit]) -> TemplateNamespace:
    """Name, prefix and merge resolved templates.

    Must run after every template has been resolved.

    Raises:
      DuplicateTemplateNameError: If two templates share a canonical name.
      TypeNameCollisionError: If two declared types would share a name.
      NestingTooDeepError: If a template is nested too deep below the root.
    """
    named: dict[str, tuple[TemplateName, ResolvedUnit]] = {}
    for item in resolved:
        name = derive_template_name(item.unit.relative_path)
        existing = named.get(name.canonical)
        if existing is not None:
            raise DuplicateTemplateNameError(
                f"templates {existing[1].unit.source_path} and {item.unit.source_path} "
                f"both resolve to {name.canonical}"
            )
        named[name.canonical] = (name, item)

    units = tuple(_prefix_unit(*named[canonical]) for canonical in sorted(named))
    _check_unique_type_names(units)
    imports = sorted({path for item in units for path in item.imports})
    LOGGER.debug("aggregated %d templates, %d imports", len(units), len(imports))
    return TemplateNamespace(units=units, imports=tuple(imports))


def _prefix_unit(name: TemplateName, item: ResolvedUnit) -> AggregatedUnit:
    def rename(type_name: str) -> str:
        return name.type_name + type_name

    return AggregatedUnit(
        name=name,
        unit=item.unit,
        fields=tuple(_rename_field(field, rename) for field in item.schema.fields),
        named_types=tuple(
            NamedType(
                name=rename(named.name),
                fields=tuple(
                    NamedTypeField(
                        name=member.name,
                        concrete_type=member.concrete_type.rename_named(rename),
                    )
                    for member in named.fields
                ),
            )
            for named in item.schema.named_types
        ),
        imports=item.schema.imports,
    )


def _rename_field(field: TypedField, rename: Callable[[str], str]) -> TypedField:
    return TypedField(
        name=field.name,
        concrete_type=field.concrete_type.rename_named(rename),
        children=tuple(_rename_field(child, rename) for child in field.children),
        named_type=None if field.named_type is None else rename(field.named_type),
    )


def _check_unique_type_names(units: tuple[AggregatedUnit, ...]) -> None:
    owners: dict[str, str] = {}
    for item in units:
        declared = [item.name.type_name, *(named.name for named in item.named_types)]
        for type_name in declared:
            owner = owners.get(type_name)
            if owner is not None:
                raise TypeNameCollisionError(
                    f"type name {type_name} is declared by both {owner} "
                    f"and {item.name.canonical}"
                )
            owners[type_name] = item.name.canonical
