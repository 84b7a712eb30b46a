"""Template node tree entities."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

ROOT_VARIABLE = "$"


@dataclass(frozen=True)
class FieldRef:
    """Field path argument such as ``.User.Name``, ``$.Title`` or ``$item.ID``.

    ``base`` is ``None`` for references relative to the current dot, ``"$"``
    for the template root and ``"$name"`` for a declared variable. A bare
    ``.`` is a ``FieldRef`` with no segments.
    """

    segments: tuple[str, ...]
    base: str | None = None

    @property
    def is_dot(self) -> bool:
        """Return True for the bare ``.`` reference."""
        return self.base is None and not self.segments


@dataclass(frozen=True)
class Identifier:
    """Function name argument (``index``, ``printf``, ``len`` ...)."""

    name: str


@dataclass(frozen=True)
class Constant:
    """String, character, number, bool or nil literal argument."""

    text: str


@dataclass(frozen=True)
class Command:
    """One ``|``-separated command of a pipeline."""

    args: tuple[Argument, ...]


@dataclass(frozen=True)
class Pipeline:
    """Pipeline of commands plus any variables it declares or assigns."""

    commands: tuple[Command, ...]
    declarations: tuple[str, ...] = ()

    def field_refs(self) -> Iterator[FieldRef]:
        """Yield every field reference, descending into sub-pipelines."""
        for command in self.commands:
            for arg in command.args:
                if isinstance(arg, FieldRef):
                    yield arg
                elif isinstance(arg, Pipeline):
                    yield from arg.field_refs()

    def lookups(self) -> Iterator[FieldRef]:
        """Yield the collection argument of every ``index <field> ...`` command."""
        for command in self.commands:
            args = command.args
            if (
                len(args) >= 2
                and isinstance(args[0], Identifier)
                and args[0].name == "index"
                and isinstance(args[1], FieldRef)
                and not args[1].is_dot
            ):
                yield args[1]
            for arg in args:
                if isinstance(arg, Pipeline):
                    yield from arg.lookups()

    def control_field(self) -> FieldRef | None:
        """Return the bare field reference a block is controlled by.

        Only a pipeline whose first command starts with a field (``.Items``,
        ``$.User``, ``.``) has one; ``{{ with index .Meta "k" }}`` rebinds dot to
        a computed value and yields ``None``.
        """
        if not self.commands or not self.commands[0].args:
            return None
        head = self.commands[0].args[0]
        return head if isinstance(head, FieldRef) else None

    def field_refs_after_control(self) -> Iterator[FieldRef]:
        """Yield the field references other than the controlling one."""
        control = self.control_field()
        for index, command in enumerate(self.commands):
            for position, arg in enumerate(command.args):
                if control is not None and index == 0 and position == 0:
                    continue
                if isinstance(arg, FieldRef):
                    yield arg
                elif isinstance(arg, Pipeline):
                    yield from arg.field_refs()


Argument = FieldRef | Identifier | Constant | Pipeline


@dataclass(frozen=True)
class Literal:
    """Raw template text between actions."""

    text: str


@dataclass(frozen=True)
class Action:
    """``{{ pipeline }}`` output or variable assignment action."""

    pipeline: Pipeline
    line: int


@dataclass(frozen=True)
class Conditional:
    """``{{ if }} ... {{ else }} ... {{ end }}`` block."""

    pipeline: Pipeline
    body: tuple[Node, ...]
    fallback: tuple[Node, ...] | None
    line: int


@dataclass(frozen=True)
class ScopeRebind:
    """``{{ with }} ... {{ else }} ... {{ end }}`` block."""

    pipeline: Pipeline
    body: tuple[Node, ...]
    fallback: tuple[Node, ...] | None
    line: int


@dataclass(frozen=True)
class Iteration:
    """``{{ range }} ... {{ else }} ... {{ end }}`` block."""

    pipeline: Pipeline
    body: tuple[Node, ...]
    fallback: tuple[Node, ...] | None
    line: int


@dataclass(frozen=True)
class TemplateCall:
    """``{{ template "name" pipeline }}`` invocation."""

    name: str
    pipeline: Pipeline | None
    line: int


Node = Literal | Action | Conditional | ScopeRebind | Iteration | TemplateCall
