"""Type resolution exports."""

from .type_resolver import (
    DEFAULT_SCALAR_TYPE,
    WELL_KNOWN_IMPORTS,
    TypeNameCollisionError,
    extract_named_types,
    resolve_types,
)
from .typed_models import NamedType, NamedTypeField, TypedField, TypedSchema

__all__ = [
    "DEFAULT_SCALAR_TYPE",
    "WELL_KNOWN_IMPORTS",
    "NamedType",
    "NamedTypeField",
    "TypeNameCollisionError",
    "TypedField",
    "TypedSchema",
    "extract_named_types",
    "resolve_types",
]
