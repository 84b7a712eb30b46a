"""Template source entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TemplateUnit:
    """One template file ready for processing.

    ``relative_path`` is relative to the template root and drives the template
    name; ``embed_path`` is relative to the output file's directory and is what
    the generated ``//go:embed`` directive points at. Both use ``/`` separators.
    """

    source_path: Path
    relative_path: str
    embed_path: str
    text: str
