"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class InputSettings:
    """Where template sources come from; relative paths are already resolved."""

    patterns: tuple[str, ...] = ()
    exclude: str | None = None
    root: Path | None = None


@dataclass(frozen=True)
class OutputSettings:
    """Generated Go file settings."""

    package: str | None = None
    path: Path | None = None


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    input: InputSettings = field(default_factory=InputSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    imports: Mapping[str, str] = field(default_factory=dict)
