"""Inferred schema entities and the field kind lattice."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum


class FieldKind(str, Enum):
    """Structural kind inferred for one template field."""

    SCALAR = "scalar"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class KindRequest(str, Enum):
    """Evidence about a field's shape gathered from one reference."""

    LEAF = "leaf"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


STICKY_KINDS = frozenset({FieldKind.SEQUENCE, FieldKind.MAPPING})


def next_kind(current: FieldKind | None, request: KindRequest, *, has_children: bool) -> FieldKind:
    """Return the kind a field takes after ``request``.

    Allowed transitions: SCALAR <-> RECORD (a RECORD only demotes while it has no
    children), SCALAR/RECORD -> SEQUENCE/MAPPING, SEQUENCE -> MAPPING. SEQUENCE
    and MAPPING never fall back to SCALAR or RECORD, and a MAPPING stays a
    MAPPING when it is iterated.
    """
    if current is None:
        if request == KindRequest.LEAF:
            return FieldKind.SCALAR
        return FieldKind(request.value)
    if request == KindRequest.MAPPING:
        return FieldKind.MAPPING
    if request == KindRequest.SEQUENCE:
        return FieldKind.MAPPING if current == FieldKind.MAPPING else FieldKind.SEQUENCE
    if current in STICKY_KINDS:
        return current
    if request == KindRequest.RECORD:
        return FieldKind.RECORD
    if current == FieldKind.RECORD and has_children:
        return FieldKind.RECORD
    return FieldKind.SCALAR


@dataclass
class Field:
    """Node of the inferred schema tree.

    ``children`` holds the members of a RECORD, or the element members of a
    SEQUENCE whose ``element_kind`` is RECORD. ``element_kind`` is the value
    kind of a MAPPING and the element kind of a SEQUENCE.
    """

    name: str
    kind: FieldKind
    children: dict[str, Field] = field(default_factory=dict)
    element_kind: FieldKind = FieldKind.SCALAR

    @classmethod
    def create(cls, name: str, request: KindRequest) -> Field:
        created = cls(name=name, kind=next_kind(None, request, has_children=False))
        if created.kind == FieldKind.SEQUENCE:
            created.element_kind = FieldKind.RECORD
        return created

    def reclassify(self, request: KindRequest) -> None:
        """Apply ``request`` through the kind lattice."""
        new_kind = next_kind(self.kind, request, has_children=bool(self.children))
        if new_kind == self.kind:
            return
        if new_kind == FieldKind.MAPPING:
            self.children.clear()
            self.element_kind = FieldKind.SCALAR
        elif new_kind == FieldKind.SEQUENCE:
            self.element_kind = FieldKind.RECORD
        self.kind = new_kind

    def reclassify_element(self, request: KindRequest) -> None:
        """Apply ``request`` to the element of a SEQUENCE (RECORD <-> SCALAR only)."""
        if self.kind != FieldKind.SEQUENCE or request not in (KindRequest.LEAF, KindRequest.RECORD):
            return
        self.element_kind = next_kind(self.element_kind, request, has_children=bool(self.children))

    def sorted_children(self) -> list[Field]:
        return [self.children[name] for name in sorted(self.children)]


@dataclass
class Schema:
    """Top-level fields inferred for one template."""

    fields: dict[str, Field] = field(default_factory=dict)

    def sorted_fields(self) -> list[Field]:
        return [self.fields[name] for name in sorted(self.fields)]

    def find(self, path: Sequence[str]) -> Field | None:
        """Return the field at ``path``, looking through sequence elements."""
        container = self.fields
        node: Field | None = None
        for segment in path:
            if node is not None and node.kind == FieldKind.MAPPING:
                return None
            node = container.get(segment)
            if node is None:
                return None
            container = node.children
        return node
