"""Schema inference over the template node tree."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from tmpltype.template_parsing.template_nodes import (
    ROOT_VARIABLE,
    Action,
    Conditional,
    FieldRef,
    Iteration,
    Literal,
    Node,
    Pipeline,
    ScopeRebind,
    TemplateCall,
)

from .schema_models import Field, FieldKind, KindRequest, Schema

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Binding:
    """What a dot or variable denotes: a schema path, or nothing trackable (``None``).

    ``element`` marks a binding to the element of the sequence at ``path``.
    """

    path: tuple[str, ...] | None
    element: bool = False


_ROOT = _Binding(path=())
_UNTRACKED = _Binding(path=None)


@dataclass(frozen=True)
class _Scope:
    dot: _Binding
    variables: Mapping[str, _Binding] = field(default_factory=lambda: {ROOT_VARIABLE: _ROOT})

    def rebind(self, dot: _Binding) -> _Scope:
        return _Scope(dot=dot, variables=self.variables)

    def declare(self, names: Sequence[str], binding: _Binding) -> _Scope:
        if not names:
            return self
        variables = dict(self.variables)
        for name in names:
            variables[name] = _UNTRACKED
        variables[names[-1]] = binding
        return _Scope(dot=self.dot, variables=variables)

    def resolve(self, ref: FieldRef) -> _Binding:
        base = self.dot if ref.base is None else self.variables.get(ref.base, _UNTRACKED)
        if base.path is None:
            return _UNTRACKED
        if not ref.segments:
            return base
        return _Binding(path=base.path + ref.segments)


def infer_schema(nodes: Iterable[Node]) -> Schema:
    """Infer the field schema referenced by a parsed template."""
    schema = Schema()
    _walk(schema, nodes, _Scope(dot=_ROOT))
    LOGGER.debug("inferred %d top-level fields", len(schema.fields))
    return schema


def ensure_path(schema: Schema, path: Sequence[str], *, as_leaf: bool = True) -> None:
    """Record a reference to ``path``: as a printed leaf, or as a record to descend into."""
    _reference(schema, path, KindRequest.LEAF if as_leaf else KindRequest.RECORD)


def force_sequence(schema: Schema, path: Sequence[str]) -> None:
    """Mark ``path`` as iterated: a sequence of records."""
    _reference(schema, path, KindRequest.SEQUENCE)


def force_mapping(schema: Schema, path: Sequence[str]) -> None:
    """Mark ``path`` as a lookup target: a string-keyed mapping of scalars."""
    _reference(schema, path, KindRequest.MAPPING)


def ensure_element_leaf(schema: Schema, path: Sequence[str]) -> None:
    """Record that the elements of the sequence at ``path`` are printed directly."""
    node = schema.find(path)
    if node is None or node.kind != FieldKind.SEQUENCE:
        ensure_path(schema, path)
        return
    node.reclassify_element(KindRequest.LEAF)


def _reference(schema: Schema, path: Sequence[str], request: KindRequest) -> None:
    if not path:
        return
    container: dict[str, Field] | None = schema.fields
    for segment in path[:-1]:
        container = _descend(container, segment)
        if container is None:
            return
    name = path[-1]
    node = container.get(name)
    if node is None:
        container[name] = Field.create(name, request)
    else:
        node.reclassify(request)


def _descend(container: dict[str, Field], name: str) -> dict[str, Field] | None:
    """Return the members reached through intermediate segment ``name``.

    Missing and scalar intermediates become records; a sequence is entered
    through its element; a mapping ends the walk since its keys are data.
    """
    node = container.get(name)
    if node is None:
        node = container[name] = Field.create(name, KindRequest.RECORD)
    else:
        node.reclassify(KindRequest.RECORD)
    if node.kind == FieldKind.MAPPING:
        return None
    if node.kind == FieldKind.SEQUENCE:
        node.reclassify_element(KindRequest.RECORD)
    return node.children


def _walk(schema: Schema, nodes: Iterable[Node], scope: _Scope) -> None:
    for node in nodes:
        scope = _visit(schema, node, scope)


def _visit(schema: Schema, node: Node, scope: _Scope) -> _Scope:
    """Visit one node and return the scope for its following siblings."""
    if isinstance(node, Literal):
        return scope
    if isinstance(node, Action):
        return _visit_action(schema, node.pipeline, scope)
    if isinstance(node, TemplateCall):
        if node.pipeline is not None:
            _record_lookups(schema, node.pipeline, scope)
            _record_leaves(schema, node.pipeline.field_refs(), scope)
        return scope
    if isinstance(node, Conditional):
        _visit_conditional(schema, node, scope)
    elif isinstance(node, ScopeRebind):
        _visit_scope_rebind(schema, node, scope)
    elif isinstance(node, Iteration):
        _visit_iteration(schema, node, scope)
    return scope


def _visit_action(schema: Schema, pipeline: Pipeline, scope: _Scope) -> _Scope:
    _record_lookups(schema, pipeline, scope)
    if pipeline.declarations:
        _record_leaves(schema, pipeline.field_refs(), scope)
        control = pipeline.control_field()
        binding = scope.resolve(control) if control is not None else _UNTRACKED
        return scope.declare(pipeline.declarations, binding)
    for ref in pipeline.field_refs():
        binding = scope.resolve(ref)
        if binding.path is None:
            continue
        if binding.element:
            ensure_element_leaf(schema, binding.path)
        elif binding.path:
            ensure_path(schema, binding.path)
    return scope


def _visit_conditional(schema: Schema, node: Conditional, scope: _Scope) -> None:
    control = node.pipeline.control_field()
    binding = scope.resolve(control) if control is not None else _UNTRACKED
    if binding.path and not binding.element:
        ensure_path(schema, binding.path, as_leaf=False)
    _record_lookups(schema, node.pipeline, scope)
    _record_leaves(schema, node.pipeline.field_refs(), scope)
    inner = scope.declare(node.pipeline.declarations, binding)
    _walk(schema, node.body, inner)
    if node.fallback is not None:
        _walk(schema, node.fallback, inner)


def _visit_scope_rebind(schema: Schema, node: ScopeRebind, scope: _Scope) -> None:
    control = node.pipeline.control_field()
    binding = scope.resolve(control) if control is not None else _UNTRACKED
    if binding.path and not binding.element:
        ensure_path(schema, binding.path, as_leaf=False)
    _record_lookups(schema, node.pipeline, scope)
    _record_leaves(schema, node.pipeline.field_refs_after_control(), scope)
    primary = scope.declare(node.pipeline.declarations, binding).rebind(binding)
    _walk(schema, node.body, primary)
    if node.fallback is not None:
        _walk(schema, node.fallback, scope)


def _visit_iteration(schema: Schema, node: Iteration, scope: _Scope) -> None:
    control = node.pipeline.control_field()
    binding = scope.resolve(control) if control is not None else _UNTRACKED
    element = _UNTRACKED
    if binding.path:
        force_sequence(schema, binding.path)
        element = _Binding(path=binding.path, element=True)
    _record_lookups(schema, node.pipeline, scope)
    _record_leaves(schema, node.pipeline.field_refs_after_control(), scope)
    body_scope = scope.declare(node.pipeline.declarations, element).rebind(element)
    _walk(schema, node.body, body_scope)
    if node.fallback is not None:
        _walk(schema, node.fallback, scope)


def _record_lookups(schema: Schema, pipeline: Pipeline, scope: _Scope) -> None:
    for ref in pipeline.lookups():
        binding = scope.resolve(ref)
        if binding.path:
            force_mapping(schema, binding.path)


def _record_leaves(schema: Schema, refs: Iterable[FieldRef], scope: _Scope) -> None:
    for ref in refs:
        if not ref.segments:
            continue
        binding = scope.resolve(ref)
        if binding.path:
            ensure_path(schema, binding.path)
