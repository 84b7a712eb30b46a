"""Template discovery exports."""

from .source_discovery import (
    TemplateDiscoveryError,
    build_template_units,
    default_template_root,
    resolve_template_files,
    split_patterns,
)
from .source_models import TemplateUnit

__all__ = [
    "TemplateDiscoveryError",
    "TemplateUnit",
    "build_template_units",
    "default_template_root",
    "resolve_template_files",
    "split_patterns",
]
