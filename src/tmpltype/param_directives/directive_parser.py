"""`@param` directive extraction and type expression parsing."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from .type_expressions import Override, StructField, TypeExpression

PARAM_DIRECTIVE_PATTERN = re.compile(r"\{\{-?\s*/\*\s*@param\s+(\S+)\s+(.+?)\s*\*/\s*-?\}\}")
_PATH_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*$")
_SEQUENCE_PREFIX = "[]"
_MAPPING_PREFIX = "map[string]"
_POINTER_PREFIX = "*"
_STRUCT_KEYWORD = "struct"


class MalformedTypeExpressionError(Exception):
    """Raised when a `@param` directive cannot be parsed."""

    def __init__(
        self, *, line: int, raw_text: str, reason: str, source_path: str | None = None
    ) -> None:
        location = f"{source_path}:{line}" if source_path else f"line {line}"
        super().__init__(f"{location}: invalid type expression {raw_text!r}: {reason}")
        self.line = line
        self.raw_text = raw_text
        self.reason = reason
        self.source_path = source_path


def parse_directives(source: str, *, source_path: str | None = None) -> list[Override]:
    """Return every `@param` directive of ``source`` in order of appearance."""
    overrides: list[Override] = []
    for line_number, line in enumerate(source.split("\n"), start=1):
        for match in PARAM_DIRECTIVE_PATTERN.finditer(line):
            path, type_text = match.group(1), match.group(2)
            if not _PATH_PATTERN.fullmatch(path):
                raise MalformedTypeExpressionError(
                    line=line_number,
                    raw_text=type_text,
                    reason=f"invalid field path {path!r}",
                    source_path=source_path,
                )
            try:
                expression = parse_type_expression(type_text)
            except ValueError as exc:
                raise MalformedTypeExpressionError(
                    line=line_number, raw_text=type_text, reason=str(exc), source_path=source_path
                ) from exc
            overrides.append(Override(path=path, type=expression, line=line_number))
    return overrides


def build_override_table(overrides: Iterable[Override]) -> Mapping[str, Override]:
    """Index overrides by path; a later directive for the same path wins."""
    table: dict[str, Override] = {}
    for override in overrides:
        table[override.path] = override
    return table


def parse_type_expression(text: str) -> TypeExpression:
    """Parse one type expression, rejecting any input left after it."""
    parser = _TypeExpressionParser(text)
    expression = parser.parse_type()
    parser.skip_whitespace()
    if not parser.at_end():
        raise ValueError(f"unexpected input {parser.remaining()!r} at position {parser.position}")
    return expression


class _TypeExpressionParser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.position = 0

    def parse_type(self) -> TypeExpression:
        self.skip_whitespace()
        if self._consume(_SEQUENCE_PREFIX):
            return TypeExpression.sequence(self.parse_type())
        if self._consume(_MAPPING_PREFIX):
            return TypeExpression.mapping(self.parse_type())
        if self._consume(_POINTER_PREFIX):
            return TypeExpression.pointer(self.parse_type())
        if self._consume_struct_open():
            return self._parse_struct_body()
        return self._parse_base()

    def _parse_base(self) -> TypeExpression:
        start = self.position
        while not self.at_end() and _is_type_name_char(self.text[self.position]):
            self.position += 1
        if start == self.position:
            raise ValueError(f"expected type at position {self.position}")
        return TypeExpression.base(self.text[start : self.position])

    def _parse_struct_body(self) -> TypeExpression:
        fields: list[StructField] = []
        while True:
            self.skip_whitespace()
            if self.at_end():
                raise ValueError("unexpected end of struct")
            if self._consume("}"):
                break
            name = self._parse_identifier()
            if not name:
                raise ValueError(f"expected field name at position {self.position}")
            try:
                field_type = self.parse_type()
            except ValueError as exc:
                raise ValueError(f"invalid field type for {name}: {exc}") from exc
            fields.append(StructField(name=name, type=field_type))
            self.skip_whitespace()
            if self._consume(";"):
                continue
            if self._consume("}"):
                break
            if self.at_end():
                raise ValueError("unexpected end of struct")
            raise ValueError(
                f"expected ';' or '}}' after field {name} at position {self.position}"
            )
        return TypeExpression.struct(tuple(fields))

    def _parse_identifier(self) -> str:
        start = self.position
        while not self.at_end() and (
            self.text[self.position].isalnum() or self.text[self.position] == "_"
        ):
            self.position += 1
        return self.text[start : self.position]

    def _consume_struct_open(self) -> bool:
        if not self.text.startswith(_STRUCT_KEYWORD, self.position):
            return False
        probe = self.position + len(_STRUCT_KEYWORD)
        while probe < len(self.text) and self.text[probe].isspace():
            probe += 1
        if probe < len(self.text) and self.text[probe] == "{":
            self.position = probe + 1
            return True
        return False

    def _consume(self, literal: str) -> bool:
        if self.text.startswith(literal, self.position):
            self.position += len(literal)
            return True
        return False

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.text[self.position].isspace():
            self.position += 1

    def at_end(self) -> bool:
        return self.position >= len(self.text)

    def remaining(self) -> str:
        return self.text[self.position :]


def _is_type_name_char(char: str) -> bool:
    return char.isalnum() or char in "._"
