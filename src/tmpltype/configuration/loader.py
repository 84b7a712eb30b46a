"""Configuration loader service."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import Configuration, InputSettings, OutputSettings

LOGGER = logging.getLogger(__name__)

_QUALIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    configuration = Configuration(
        path=path,
        input=_parse_input_section(parsed.get("input"), base_path),
        output=_parse_output_section(parsed.get("output"), base_path),
        imports=_parse_imports_section(parsed.get("imports")),
    )
    LOGGER.debug("loaded configuration from %s", path)
    return configuration


def _parse_input_section(value: Any, base_path: Path) -> InputSettings:
    section = _optional_mapping(value, "input")
    patterns = _normalize_patterns(section.get("patterns"))
    exclude = _optional_string(section.get("exclude"), "input.exclude")
    root = _optional_string(section.get("root"), "input.root")
    return InputSettings(
        patterns=tuple(str(_resolve_path(base_path, pattern)) for pattern in patterns),
        exclude=exclude,
        root=_resolve_path(base_path, root) if root else None,
    )


def _parse_output_section(value: Any, base_path: Path) -> OutputSettings:
    section = _optional_mapping(value, "output")
    package = _optional_string(section.get("package"), "output.package")
    output_path = _optional_string(section.get("path"), "output.path")
    return OutputSettings(
        package=package,
        path=_resolve_path(base_path, output_path) if output_path else None,
    )


def _parse_imports_section(value: Any) -> dict[str, str]:
    section = _optional_mapping(value, "imports")
    imports: dict[str, str] = {}
    for qualifier, import_path in section.items():
        if not isinstance(qualifier, str) or not _QUALIFIER_PATTERN.match(qualifier):
            raise ConfigurationError(f"imports key {qualifier!r} must be a Go identifier.")
        imports[qualifier] = _require_non_empty_string(import_path, f"imports.{qualifier}")
    return imports


def _normalize_patterns(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    patterns: list[str] = []
    if isinstance(value, str):
        patterns = [item.strip() for item in value.split(",") if item.strip()]
    elif isinstance(value, Sequence):
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError("input.patterns entries must be strings.")
            stripped = item.strip()
            if stripped:
                patterns.append(stripped)
    else:
        raise ConfigurationError("input.patterns must be a string or list of strings.")
    if not patterns:
        raise ConfigurationError("input.patterns must contain at least one pattern.")
    return tuple(patterns)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return base_path / candidate
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None
