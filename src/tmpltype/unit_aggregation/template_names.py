"""Canonical naming of template units."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from tmpltype.naming import export_identifier, join_exported

_NUMERIC_PREFIX = re.compile(r"^\d+[-_]")
MAX_SEGMENTS = 2


class NestingTooDeepError(Exception):
    """Raised when a template sits more than one directory below the template root."""


@dataclass(frozen=True)
class TemplateName:
    """Names derived from a template's root-relative path.

    ``canonical`` is ``Header`` or ``Nav.Menu``, ``type_name`` is ``Header`` or
    ``NavMenu`` and ``key`` is the registry key (``header``, ``nav/menu``).
    """

    group: str | None
    local: str
    canonical: str
    type_name: str
    key: str

    @property
    def is_grouped(self) -> bool:
        return self.group is not None


def derive_template_name(relative_path: str) -> TemplateName:
    """Derive the canonical names of one template from its root-relative path.

    Raises:
      NestingTooDeepError: If the path has three or more segments.
      ValueError: If a segment normalizes to an empty name.
    """
    parts = PurePosixPath(relative_path.replace("\\", "/")).parts
    if len(parts) > MAX_SEGMENTS:
        raise NestingTooDeepError(
            f"template {relative_path} is nested {len(parts) - 1} directories deep; "
            f"at most {MAX_SEGMENTS - 1} grouping directory is supported"
        )
    if not parts:
        raise ValueError("template path must not be empty")
    stems = (*parts[:-1], parts[-1].split(".", 1)[0])
    segments = tuple(_normalize_segment(stem, relative_path) for stem in stems)
    return TemplateName(
        group=segments[0] if len(segments) == MAX_SEGMENTS else None,
        local=segments[-1],
        canonical=".".join(export_identifier(segment) for segment in segments),
        type_name=join_exported(segments),
        key="/".join(segments),
    )


def _normalize_segment(segment: str, relative_path: str) -> str:
    normalized = _NUMERIC_PREFIX.sub("", segment).replace("-", "_")
    if not export_identifier(normalized):
        raise ValueError(f"cannot derive a template name from {relative_path}")
    return normalized
