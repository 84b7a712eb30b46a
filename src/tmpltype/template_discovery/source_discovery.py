"""Template source discovery service."""

from __future__ import annotations

import fnmatch
import glob
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePath

from .source_models import TemplateUnit

LOGGER = logging.getLogger(__name__)

_GLOB_CHARACTERS = frozenset("*?[")


class TemplateDiscoveryError(Exception):
    """Raised when template sources cannot be resolved or read."""


def split_patterns(patterns: str | Iterable[str]) -> tuple[str, ...]:
    """Split comma-separated input patterns, dropping blank entries."""
    chunks = [patterns] if isinstance(patterns, str) else list(patterns)
    return tuple(
        piece.strip() for chunk in chunks for piece in chunk.split(",") if piece.strip()
    )


def resolve_template_files(
    patterns: str | Iterable[str], exclude: str | None = None
) -> tuple[Path, ...]:
    """Expand input patterns into an ordered, de-duplicated list of template files.

    Args:
      patterns: Comma-separated glob patterns, or an iterable of them.
      exclude: Optional glob matched against each file's base name.

    Returns:
      Matched files in pattern order; glob matches of one pattern are sorted.

    Raises:
      TemplateDiscoveryError: If a pattern matches no file, or nothing is left
        after exclusion.
    """
    selected: list[Path] = []
    seen: set[Path] = set()
    pattern_list = split_patterns(patterns)
    for pattern in pattern_list:
        for path in _expand_pattern(pattern):
            if exclude and fnmatch.fnmatch(path.name, exclude):
                LOGGER.debug("excluding %s (matches %s)", path, exclude)
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            selected.append(path)
    if not selected:
        joined = ", ".join(pattern_list) or "<empty>"
        raise TemplateDiscoveryError(f"no template files matched {joined}")
    LOGGER.debug("resolved %d template files", len(selected))
    return tuple(selected)


def default_template_root(patterns: str | Iterable[str]) -> Path:
    """Return the longest directory prefix shared by the non-glob part of every pattern."""
    prefixes = [_static_directory(pattern) for pattern in split_patterns(patterns)]
    if not prefixes:
        return Path(".")
    common = prefixes[0]
    for prefix in prefixes[1:]:
        common = _common_parts(common, prefix)
    return Path(*common) if common else Path(".")


def build_template_units(
    files: Sequence[Path], root: Path | str, output_path: Path | str
) -> tuple[TemplateUnit, ...]:
    """Read template files and compute their template-root and embed paths."""
    root_dir = Path(root).resolve()
    output_dir = Path(output_path).resolve().parent
    units = []
    for file in files:
        source = Path(file).resolve()
        try:
            relative = source.relative_to(root_dir)
        except ValueError as exc:
            raise TemplateDiscoveryError(
                f"template {file} is outside the template root {root_dir}"
            ) from exc
        embed_path = Path(os.path.relpath(source, output_dir)).as_posix()
        if embed_path.startswith("../"):
            raise TemplateDiscoveryError(
                f"template {file} must be inside the output directory {output_dir} to be embedded"
            )
        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateDiscoveryError(f"failed to read template {file}: {exc}") from exc
        units.append(
            TemplateUnit(
                source_path=source,
                relative_path=relative.as_posix(),
                embed_path=embed_path,
                text=text,
            )
        )
    return tuple(units)


def _expand_pattern(pattern: str) -> list[Path]:
    if not _has_glob(pattern):
        path = Path(pattern)
        if not path.is_file():
            raise TemplateDiscoveryError(f"template file not found: {pattern}")
        return [path]
    matches = [Path(item) for item in sorted(glob.glob(pattern, recursive=True))]
    files = [item for item in matches if item.is_file()]
    if not files:
        raise TemplateDiscoveryError(f"template file not found: {pattern}")
    return files


def _static_directory(pattern: str) -> tuple[str, ...]:
    parts: list[str] = []
    for part in PurePath(pattern).parts[:-1]:
        if _has_glob(part):
            break
        parts.append(part)
    return tuple(parts)


def _common_parts(left: tuple[str, ...], right: tuple[str, ...]) -> tuple[str, ...]:
    common: list[str] = []
    for first, second in zip(left, right):
        if first != second:
            break
        common.append(first)
    return tuple(common)


def _has_glob(text: str) -> bool:
    return any(char in _GLOB_CHARACTERS for char in text)
