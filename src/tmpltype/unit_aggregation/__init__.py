"""Unit aggregation exports."""

from .template_names import NestingTooDeepError, TemplateName, derive_template_name
from .unit_aggregator import (
    AggregatedUnit,
    DuplicateTemplateNameError,
    ResolvedUnit,
    TemplateNamespace,
    aggregate_units,
)

__all__ = [
    "AggregatedUnit",
    "DuplicateTemplateNameError",
    "NestingTooDeepError",
    "ResolvedUnit",
    "TemplateName",
    "TemplateNamespace",
    "aggregate_units",
    "derive_template_name",
]
