"""Generation run entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class GenerationRequest:
    """Input contract for one run; unset values fall back to the configuration file."""

    patterns: str | None = None
    package: str | None = None
    output_path: str | None = None
    exclude: str | None = None
    root: str | None = None
    config_path: str | None = None


@dataclass(frozen=True)
class GenerationOutcome:
    """Output contract for one completed generate run."""

    output_path: Path
    template_count: int
    type_count: int


@dataclass(frozen=True)
class RunSettings:
    """Request values merged with the configuration file."""

    patterns: tuple[str, ...]
    exclude: str | None
    root: Path | None
    package: str | None
    output_path: Path | None
    import_paths: Mapping[str, str] = field(default_factory=dict)
