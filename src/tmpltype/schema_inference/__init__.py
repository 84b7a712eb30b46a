"""Schema inference exports."""

from .schema_models import Field, FieldKind, KindRequest, Schema, next_kind
from .schema_walker import (
    ensure_element_leaf,
    ensure_path,
    force_mapping,
    force_sequence,
    infer_schema,
)

__all__ = [
    "Field",
    "FieldKind",
    "KindRequest",
    "Schema",
    "next_kind",
    "ensure_element_leaf",
    "ensure_path",
    "force_mapping",
    "force_sequence",
    "infer_schema",
]
