"""Resolved schema entities."""

from __future__ import annotations

from dataclasses import dataclass

from tmpltype.param_directives.type_expressions import TypeExpression


@dataclass(frozen=True)
class TypedField:
    """Field with its concrete type; ``named_type`` is set when that type is synthesized."""

    name: str
    concrete_type: TypeExpression
    children: tuple[TypedField, ...] = ()
    named_type: str | None = None

    @property
    def type_string(self) -> str:
        return self.concrete_type.render()

    def child(self, name: str) -> TypedField | None:
        return next((item for item in self.children if item.name == name), None)


@dataclass(frozen=True)
class NamedTypeField:
    """Member of a synthesized composite type."""

    name: str
    concrete_type: TypeExpression

    @property
    def type_string(self) -> str:
        return self.concrete_type.render()


@dataclass(frozen=True)
class NamedType:
    """Synthesized composite type; ``fields`` are sorted by name."""

    name: str
    fields: tuple[NamedTypeField, ...]


@dataclass(frozen=True)
class TypedSchema:
    """Resolution result for one template."""

    fields: tuple[TypedField, ...]
    named_types: tuple[NamedType, ...]
    imports: tuple[str, ...]

    def field(self, name: str) -> TypedField | None:
        return next((item for item in self.fields if item.name == name), None)

    def named_type(self, name: str) -> NamedType | None:
        return next((item for item in self.named_types if item.name == name), None)
