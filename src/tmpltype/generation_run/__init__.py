"""Generation run domain exports."""

from .generation_run_use_case import (
    GenerationRunError,
    build_namespace,
    execute_generation_run,
    inspect_templates,
    resolve_run_settings,
    resolve_template_unit,
)
from .run_contracts import GenerationOutcome, GenerationRequest, RunSettings

__all__ = [
    "GenerationRequest",
    "GenerationOutcome",
    "RunSettings",
    "GenerationRunError",
    "build_namespace",
    "execute_generation_run",
    "inspect_templates",
    "resolve_run_settings",
    "resolve_template_unit",
]
