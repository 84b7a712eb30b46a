"""Merge inferred schemas with `@param` overrides into concrete types."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from tmpltype.naming import join_exported
from tmpltype.param_directives.type_expressions import Override, TypeExpression, TypeKind
from tmpltype.schema_inference.schema_models import Field, FieldKind, Schema

from .typed_models import NamedType, NamedTypeField, TypedField, TypedSchema

LOGGER = logging.getLogger(__name__)

DEFAULT_SCALAR_TYPE = "string"
ITEM_SUFFIX = "Item"
WELL_KNOWN_IMPORTS: Mapping[str, str] = {
    "big": "math/big",
    "json": "encoding/json",
    "netip": "net/netip",
    "sql": "database/sql",
    "time": "time",
    "url": "net/url",
}


class TypeNameCollisionError(Exception):
    """Raised when two differently shaped composites would share one type name."""


@dataclass
class _Draft:
    name: str
    concrete_type: TypeExpression
    children: dict[str, _Draft] = field(default_factory=dict)
    named_type: str | None = None
    overridden: bool = False

    def freeze(self) -> TypedField:
        return TypedField(
            name=self.name,
            concrete_type=self.concrete_type,
            children=tuple(self.children[name].freeze() for name in sorted(self.children)),
            named_type=self.named_type,
        )


def resolve_types(
    schema: Schema,
    overrides: Mapping[str, Override],
    *,
    import_paths: Mapping[str, str] | None = None,
) -> TypedSchema:
    """Resolve concrete types, named composites and imports for one template."""
    roots = {item.name: _infer_draft(item, (item.name,)) for item in schema.sorted_fields()}
    ordered = sorted(overrides.values(), key=lambda item: (len(item.segments), item.path))
    for override in ordered:
        _apply_override(roots, override)

    frozen = tuple(roots[name].freeze() for name in sorted(roots))
    return TypedSchema(
        fields=frozen,
        named_types=extract_named_types(frozen),
        imports=_required_imports(ordered, {**WELL_KNOWN_IMPORTS, **(import_paths or {})}),
    )


def extract_named_types(fields: Iterable[TypedField]) -> tuple[NamedType, ...]:
    """Collect one NamedType per synthesized composite, sorted by name."""
    collected: dict[str, NamedType] = {}
    stack = list(fields)
    while stack:
        current = stack.pop()
        stack.extend(current.children)
        if current.named_type is None:
            continue
        named = NamedType(
            name=current.named_type,
            fields=tuple(
                NamedTypeField(name=child.name, concrete_type=child.concrete_type)
                for child in sorted(current.children, key=lambda item: item.name)
            ),
        )
        existing = collected.get(named.name)
        if existing is not None and existing != named:
            raise TypeNameCollisionError(
                f"type name {named.name} is synthesized for two different field shapes"
            )
        collected[named.name] = named
    return tuple(collected[name] for name in sorted(collected))


def _infer_draft(source: Field, path: tuple[str, ...]) -> _Draft:
    if source.kind == FieldKind.SCALAR:
        return _Draft(source.name, TypeExpression.base(DEFAULT_SCALAR_TYPE))
    if source.kind == FieldKind.MAPPING:
        return _Draft(source.name, TypeExpression.mapping(TypeExpression.base(DEFAULT_SCALAR_TYPE)))
    if source.kind == FieldKind.SEQUENCE and source.element_kind == FieldKind.SCALAR:
        return _Draft(
            source.name, TypeExpression.sequence(TypeExpression.base(DEFAULT_SCALAR_TYPE))
        )
    draft = _composite_draft(source.name, path, sequence=source.kind == FieldKind.SEQUENCE)
    for child in source.sorted_children():
        draft.children[child.name] = _infer_draft(child, (*path, child.name))
    return draft


def _composite_draft(name: str, path: Sequence[str], *, sequence: bool) -> _Draft:
    if sequence:
        type_name = join_exported(path) + ITEM_SUFFIX
        return _Draft(
            name, TypeExpression.sequence(TypeExpression.named(type_name)), named_type=type_name
        )
    type_name = join_exported(path)
    return _Draft(name, TypeExpression.named(type_name), named_type=type_name)


def _apply_override(roots: dict[str, _Draft], override: Override) -> None:
    segments = override.segments
    container = roots
    for depth, segment in enumerate(segments[:-1], start=1):
        path = segments[:depth]
        node = container.get(segment)
        if node is None:
            node = container[segment] = _composite_draft(segment, path, sequence=False)
        elif node.overridden:
            LOGGER.warning(
                "ignoring @param %s (line %d): %s already has an explicit type",
                override.path,
                override.line,
                ".".join(path),
            )
            return
        elif node.named_type is None:
            promoted = _composite_draft(
                segment, path, sequence=node.concrete_type.kind == TypeKind.SEQUENCE
            )
            node.concrete_type = promoted.concrete_type
            node.named_type = promoted.named_type
        container = node.children
    name = segments[-1]
    container[name] = _override_draft(name, segments, override.type)


def _override_draft(name: str, path: Sequence[str], expression: TypeExpression) -> _Draft:
    element = expression.element
    if (
        expression.kind == TypeKind.SEQUENCE
        and element is not None
        and element.kind == TypeKind.STRUCT
    ):
        draft = _composite_draft(name, path, sequence=True)
        draft.overridden = True
        for member in element.fields:
            draft.children[member.name] = _Draft(member.name, member.type, overridden=True)
        return draft
    return _Draft(name, expression, overridden=True)


def _required_imports(
    overrides: Iterable[Override], import_paths: Mapping[str, str]
) -> tuple[str, ...]:
    required: set[str] = set()
    for override in overrides:
        for base_name in override.type.base_names():
            qualifier, dot, _ = base_name.rpartition(".")
            if not dot:
                continue
            import_path = import_paths.get(qualifier)
            if import_path is None:
                LOGGER.warning(
                    "no import path known for %s used by @param %s (line %d)",
                    base_name,
                    override.path,
                    override.line,
                )
                continue
            required.add(import_path)
    return tuple(sorted(required))
