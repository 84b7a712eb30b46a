"""`@param` directive exports."""

from .directive_parser import (
    PARAM_DIRECTIVE_PATTERN,
    MalformedTypeExpressionError,
    build_override_table,
    parse_directives,
    parse_type_expression,
)
from .type_expressions import Override, StructField, TypeExpression, TypeKind

__all__ = [
    "PARAM_DIRECTIVE_PATTERN",
    "MalformedTypeExpressionError",
    "Override",
    "StructField",
    "TypeExpression",
    "TypeKind",
    "build_override_table",
    "parse_directives",
    "parse_type_expression",
]
