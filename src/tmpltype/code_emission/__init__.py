"""Code emission exports."""

from .go_source_emitter import GENERATED_HEADER, EmissionError, emit_go_source
from .schema_report import build_schema_report, render_schema_report

__all__ = [
    "GENERATED_HEADER",
    "EmissionError",
    "build_schema_report",
    "emit_go_source",
    "render_schema_report",
]
