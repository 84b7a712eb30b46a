"""Identifier helpers shared by type resolution, aggregation and emission."""

from __future__ import annotations

from collections.abc import Iterable


def export_identifier(name: str) -> str:
    """Return the exported Go spelling of a name segment used in synthesized type names.

    Underscore-separated words are joined in PascalCase and a leading
    lowercase ASCII letter is upper-cased (``user_name`` -> ``UserName``).
    Words starting with a digit or a non-ASCII letter are kept as written.
    """
    words = [word for word in name.split("_") if word]
    if not words:
        return ""
    return "".join(_capitalize_ascii(word) for word in words)


def go_field_name(name: str) -> str | None:
    """Return ``name`` if a Go struct field of that exact name is exported.

    `text/template` resolves `.Name` against the field spelled exactly
    ``Name``, so a template identifier binds only when it already starts with
    an upper-case letter. Other names give ``None``.
    """
    if name.isidentifier() and name[0].isupper():
        return name
    return None


def join_exported(segments: Iterable[str]) -> str:
    """Concatenate exported segments (``("user", "address")`` -> ``UserAddress``)."""
    return "".join(export_identifier(segment) for segment in segments)


def lower_first(name: str) -> str:
    """Return ``name`` with its first ASCII letter lower-cased."""
    if name and "A" <= name[0] <= "Z":
        return name[0].lower() + name[1:]
    return name


def _capitalize_ascii(word: str) -> str:
    head = word[0]
    if "a" <= head <= "z":
        return head.upper() + word[1:]
    return word
