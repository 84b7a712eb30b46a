"""Template parsing exports."""

from .action_parser import TemplateSyntaxError, parse_template
from .template_nodes import (
    ROOT_VARIABLE,
    Action,
    Command,
    Conditional,
    Constant,
    FieldRef,
    Identifier,
    Iteration,
    Literal,
    Node,
    Pipeline,
    ScopeRebind,
    TemplateCall,
)

__all__ = [
    "ROOT_VARIABLE",
    "Action",
    "Command",
    "Conditional",
    "Constant",
    "FieldRef",
    "Identifier",
    "Iteration",
    "Literal",
    "Node",
    "Pipeline",
    "ScopeRebind",
    "TemplateCall",
    "TemplateSyntaxError",
    "parse_template",
]
