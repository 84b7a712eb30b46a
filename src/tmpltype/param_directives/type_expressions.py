"""Type expression entities for `@param` overrides and resolved field types."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class TypeKind(str, Enum):
    """Structural kind of a type expression."""

    BASE = "base"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    POINTER = "pointer"
    STRUCT = "struct"
    NAMED = "named"


@dataclass(frozen=True)
class StructField:
    """One ``name type`` entry of an inline struct expression."""

    name: str
    type: TypeExpression


@dataclass(frozen=True)
class TypeExpression:
    """Recursive, immutable type descriptor.

    ``NAMED`` never comes out of the directive grammar: the type resolver uses it
    to reference a synthesized composite so that the aggregator can rename the
    composite without touching the string spelling.
    """

    kind: TypeKind
    name: str = ""
    element: TypeExpression | None = None
    fields: tuple[StructField, ...] = field(default=())

    @classmethod
    def base(cls, name: str) -> TypeExpression:
        return cls(kind=TypeKind.BASE, name=name)

    @classmethod
    def named(cls, name: str) -> TypeExpression:
        return cls(kind=TypeKind.NAMED, name=name)

    @classmethod
    def sequence(cls, element: TypeExpression) -> TypeExpression:
        return cls(kind=TypeKind.SEQUENCE, element=element)

    @classmethod
    def mapping(cls, element: TypeExpression) -> TypeExpression:
        return cls(kind=TypeKind.MAPPING, element=element)

    @classmethod
    def pointer(cls, element: TypeExpression) -> TypeExpression:
        return cls(kind=TypeKind.POINTER, element=element)

    @classmethod
    def struct(cls, fields: tuple[StructField, ...]) -> TypeExpression:
        return cls(kind=TypeKind.STRUCT, fields=fields)

    def render(self) -> str:
        """Return the Go spelling of this type."""
        if self.kind in (TypeKind.BASE, TypeKind.NAMED):
            return self.name
        if self.kind == TypeKind.SEQUENCE:
            return "[]" + self._element().render()
        if self.kind == TypeKind.MAPPING:
            return "map[string]" + self._element().render()
        if self.kind == TypeKind.POINTER:
            return "*" + self._element().render()
        members = "; ".join(f"{member.name} {member.type.render()}" for member in self.fields)
        return "struct{" + members + "}"

    def base_names(self) -> tuple[str, ...]:
        """Return every base type name used in this expression, depth first."""
        if self.kind == TypeKind.BASE:
            return (self.name,)
        if self.kind == TypeKind.STRUCT:
            names: list[str] = []
            for member in self.fields:
                names.extend(member.type.base_names())
            return tuple(names)
        if self.element is not None:
            return self.element.base_names()
        return ()

    def rename_named(self, rename: Callable[[str], str]) -> TypeExpression:
        """Return a copy with every ``NAMED`` reference passed through ``rename``."""
        if self.kind == TypeKind.NAMED:
            return TypeExpression.named(rename(self.name))
        if self.kind == TypeKind.STRUCT:
            return TypeExpression.struct(
                tuple(
                    StructField(member.name, member.type.rename_named(rename))
                    for member in self.fields
                )
            )
        if self.element is not None:
            return TypeExpression(kind=self.kind, element=self.element.rename_named(rename))
        return self

    def _element(self) -> TypeExpression:
        if self.element is None:
            raise ValueError(f"{self.kind.value} type expression requires an element type")
        return self.element


@dataclass(frozen=True)
class Override:
    """Explicit `@param` type for one dotted field path."""

    path: str
    type: TypeExpression
    line: int

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("."))
