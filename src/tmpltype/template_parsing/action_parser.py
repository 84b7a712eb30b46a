"""Template action lexing and node tree construction."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .template_nodes import (
    Action,
    Argument,
    Command,
    Conditional,
    Constant,
    FieldRef,
    Identifier,
    Iteration,
    Literal,
    Node,
    Pipeline,
    ScopeRebind,
    TemplateCall,
)

LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<declare>:=)
  | (?P<assign>=)
  | (?P<comma>,)
  | (?P<pipe>\|)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<string>"(?:\\.|[^"\\])*")
  | (?P<raw>`[^`]*`)
  | (?P<char>'(?:\\.|[^'\\])+')
  | (?P<variable>\$[A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)
  | (?P<number>[+-]?(?:0[xX][0-9a-fA-F_]+|\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+)i?)
  | (?P<field>(?:\.[A-Za-z_][A-Za-z0-9_]*)+)
  | (?P<dot>\.)
  | (?P<identifier>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)
_CONSTANT_KINDS = frozenset({"string", "raw", "char", "number"})
_CONSTANT_IDENTIFIERS = frozenset({"true", "false", "nil"})
_BLOCK_KEYWORDS = frozenset({"if", "with", "range"})
_KEYWORDS = _BLOCK_KEYWORDS | {"else", "end", "template", "break", "continue", "define", "block"}


class TemplateSyntaxError(Exception):
    """Raised when template text cannot be parsed into a node tree."""

    def __init__(self, line: int, message: str) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.message = message


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class _TextItem:
    text: str
    line: int


@dataclass(frozen=True)
class _ActionItem:
    keyword: str | None
    tokens: tuple[_Token, ...]
    line: int


_Item = _TextItem | _ActionItem


def parse_template(text: str) -> tuple[Node, ...]:
    """Parse template text into its node tree."""
    parser = _NodeTreeBuilder(_split_items(text))
    return parser.build()


def _split_items(text: str) -> list[_Item]:
    items: list[_Item] = []
    position = 0
    line = 1
    while position < len(text):
        start = text.find(LEFT_DELIM, position)
        if start < 0:
            items.append(_TextItem(text[position:], line))
            break
        if start > position:
            items.append(_TextItem(text[position:start], line))
        line += text.count("\n", position, start)
        content, end = _read_action(text, start + len(LEFT_DELIM), line)
        item = _action_item(content, line)
        if item is not None:
            items.append(item)
        line += text.count("\n", start, end)
        position = end
    return items


def _read_action(text: str, offset: int, line: int) -> tuple[str, int]:
    """Return the action body (trim markers removed) and the offset after ``}}``."""
    if text.startswith("- ", offset) or text.startswith("-\t", offset) or text.startswith(
        "-\n", offset
    ):
        offset += 1
    body_start = offset
    stripped_offset = _skip_spaces(text, offset)
    if text.startswith("/*", stripped_offset):
        comment_end = text.find("*/", stripped_offset + 2)
        if comment_end < 0:
            raise TemplateSyntaxError(line, "unclosed comment")
        close = _skip_spaces(text, comment_end + 2)
        if text.startswith("-", close):
            close = _skip_spaces(text, close + 1)
        if not text.startswith(RIGHT_DELIM, close):
            raise TemplateSyntaxError(line, "comment ends before closing delimiter")
        return "", close + len(RIGHT_DELIM)

    quote: str | None = None
    index = offset
    while index < len(text):
        char = text[index]
        if quote is not None:
            if char == "\\" and quote != "`":
                index += 2
                continue
            if char == quote:
                quote = None
            elif char == "\n" and quote != "`":
                raise TemplateSyntaxError(line, "unterminated quoted string")
            index += 1
            continue
        if char in "\"'`":
            quote = char
        elif text.startswith(RIGHT_DELIM, index):
            body = text[body_start:index]
            if body.endswith((" -", "\t-", "\n-")):
                body = body[:-1]
            return body, index + len(RIGHT_DELIM)
        index += 1
    if quote is not None:
        raise TemplateSyntaxError(line, "unterminated quoted string")
    raise TemplateSyntaxError(line, "unclosed action")


def _skip_spaces(text: str, offset: int) -> int:
    while offset < len(text) and text[offset].isspace():
        offset += 1
    return offset


def _action_item(content: str, line: int) -> _ActionItem | None:
    if not content.strip():
        return None
    tokens = _tokenize(content, line)
    if not tokens:
        return None
    head = tokens[0]
    if head.kind == "identifier" and head.text in _KEYWORDS:
        return _ActionItem(keyword=head.text, tokens=tokens[1:], line=line)
    return _ActionItem(keyword=None, tokens=tokens, line=line)


def _tokenize(content: str, line: int) -> tuple[_Token, ...]:
    tokens: list[_Token] = []
    position = 0
    while position < len(content):
        match = _TOKEN_PATTERN.match(content, position)
        if match is None:
            raise TemplateSyntaxError(
                line, f"unexpected character {content[position]!r} in action"
            )
        kind = match.lastgroup or ""
        if kind != "space":
            tokens.append(_Token(kind, match.group(), match.start(), match.end()))
        position = match.end()
    return tuple(tokens)


class _NodeTreeBuilder:
    """Recursive-descent builder over the flat text/action item stream."""

    def __init__(self, items: list[_Item]) -> None:
        self._items = items
        self._position = 0

    def build(self) -> tuple[Node, ...]:
        nodes, terminator = self._parse_list()
        if terminator is not None:
            raise TemplateSyntaxError(terminator.line, f"unexpected {{{{{terminator.keyword}}}}}")
        return nodes

    def _next(self) -> _Item | None:
        if self._position >= len(self._items):
            return None
        item = self._items[self._position]
        self._position += 1
        return item

    def _parse_list(self) -> tuple[tuple[Node, ...], _ActionItem | None]:
        """Parse nodes until ``{{else}}``/``{{end}}`` (returned) or end of input."""
        nodes: list[Node] = []
        while (item := self._next()) is not None:
            if isinstance(item, _TextItem):
                nodes.append(Literal(item.text))
                continue
            keyword = item.keyword
            if keyword in ("else", "end"):
                return tuple(nodes), item
            if keyword in _BLOCK_KEYWORDS:
                nodes.append(self._parse_block(keyword, item.tokens, item.line))
            elif keyword == "template":
                nodes.append(_parse_template_call(item.tokens, item.line))
            elif keyword in ("break", "continue"):
                if item.tokens:
                    raise TemplateSyntaxError(item.line, f"unexpected input after {keyword}")
            elif keyword in ("define", "block"):
                raise TemplateSyntaxError(item.line, f"{{{{{keyword}}}}} is not supported")
            else:
                nodes.append(Action(_parse_pipeline(item.tokens, item.line), item.line))
        return tuple(nodes), None

    def _parse_block(self, keyword: str, tokens: tuple[_Token, ...], line: int) -> Node:
        pipeline = _parse_pipeline(tokens, line)
        if not pipeline.commands:
            raise TemplateSyntaxError(line, f"missing value for {keyword}")
        body, terminator = self._parse_list()
        if terminator is None:
            raise TemplateSyntaxError(line, f"missing {{{{end}}}} for {{{{{keyword}}}}}")
        fallback: tuple[Node, ...] | None = None
        if terminator.keyword == "else":
            fallback = self._parse_fallback(keyword, terminator)
        return _block_node(keyword, pipeline, body, fallback, line)

    def _parse_fallback(self, keyword: str, else_item: _ActionItem) -> tuple[Node, ...]:
        tokens = else_item.tokens
        if tokens:
            chained = tokens[0].text if tokens[0].kind == "identifier" else None
            if chained not in ("if", "with") or (keyword == "range" or chained != keyword):
                raise TemplateSyntaxError(else_item.line, "unexpected input after else")
            # `else if` / `else with` share the enclosing block's {{end}}.
            return (self._parse_block(chained, tokens[1:], else_item.line),)
        fallback, terminator = self._parse_list()
        if terminator is None:
            raise TemplateSyntaxError(else_item.line, "missing {{end}} after {{else}}")
        if terminator.keyword != "end":
            raise TemplateSyntaxError(terminator.line, "expected {{end}}, found {{else}}")
        return fallback


def _block_node(
    keyword: str,
    pipeline: Pipeline,
    body: tuple[Node, ...],
    fallback: tuple[Node, ...] | None,
    line: int,
) -> Node:
    if keyword == "if":
        return Conditional(pipeline=pipeline, body=body, fallback=fallback, line=line)
    if keyword == "with":
        return ScopeRebind(pipeline=pipeline, body=body, fallback=fallback, line=line)
    return Iteration(pipeline=pipeline, body=body, fallback=fallback, line=line)


def _parse_template_call(tokens: tuple[_Token, ...], line: int) -> TemplateCall:
    if not tokens or tokens[0].kind not in ("string", "raw"):
        raise TemplateSyntaxError(line, "template name must be a string literal")
    name = tokens[0].text[1:-1]
    rest = tokens[1:]
    pipeline = _parse_pipeline(rest, line) if rest else None
    return TemplateCall(name=name, pipeline=pipeline, line=line)


def _parse_pipeline(tokens: tuple[_Token, ...], line: int) -> Pipeline:
    declarations, body = _split_declarations(tokens)
    commands: list[Command] = []
    args: list[Argument] = []
    index = 0
    previous: _Token | None = None
    while index < len(body):
        token = body[index]
        if token.kind == "pipe":
            if not args:
                raise TemplateSyntaxError(line, "missing command before '|'")
            commands.append(Command(tuple(args)))
            args = []
        elif token.kind == "lparen":
            closing = _matching_paren(body, index, line)
            inner = _parse_pipeline(body[index + 1 : closing], line)
            if not inner.commands:
                raise TemplateSyntaxError(line, "empty parenthesized pipeline")
            args.append(inner)
            index = closing
            token = body[index]
        elif token.kind == "rparen":
            raise TemplateSyntaxError(line, "unexpected ')'")
        elif (
            token.kind == "field"
            and previous is not None
            and previous.kind == "rparen"
            and previous.end == token.start
        ):
            # Field chained on a call result: not a reference into the data.
            pass
        else:
            args.append(_argument(token, line))
        previous = token
        index += 1
    if args:
        commands.append(Command(tuple(args)))
    elif commands:
        raise TemplateSyntaxError(line, "missing command after '|'")
    return Pipeline(commands=tuple(commands), declarations=declarations)


def _split_declarations(tokens: tuple[_Token, ...]) -> tuple[tuple[str, ...], tuple[_Token, ...]]:
    kinds = [token.kind for token in tokens[:4]]
    if kinds[:2] == ["variable", "declare"] or kinds[:2] == ["variable", "assign"]:
        return (tokens[0].text,), tokens[2:]
    if kinds == ["variable", "comma", "variable", "declare"] or kinds == [
        "variable",
        "comma",
        "variable",
        "assign",
    ]:
        return (tokens[0].text, tokens[2].text), tokens[4:]
    return (), tokens


def _matching_paren(tokens: tuple[_Token, ...], start: int, line: int) -> int:
    depth = 0
    for index in range(start, len(tokens)):
        if tokens[index].kind == "lparen":
            depth += 1
        elif tokens[index].kind == "rparen":
            depth -= 1
            if depth == 0:
                return index
    raise TemplateSyntaxError(line, "unclosed '('")


def _argument(token: _Token, line: int) -> Argument:
    if token.kind == "field":
        return FieldRef(segments=tuple(token.text[1:].split(".")))
    if token.kind == "dot":
        return FieldRef(segments=())
    if token.kind == "variable":
        name, _, rest = token.text.partition(".")
        segments = tuple(rest.split(".")) if rest else ()
        return FieldRef(segments=segments, base=name)
    if token.kind in _CONSTANT_KINDS:
        return Constant(token.text)
    if token.kind == "identifier":
        if token.text in _CONSTANT_IDENTIFIERS:
            return Constant(token.text)
        return Identifier(token.text)
    raise TemplateSyntaxError(line, f"unexpected {token.text!r} in pipeline")
