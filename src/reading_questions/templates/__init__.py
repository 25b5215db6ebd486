"""Template parsing, rendering and loading."""

from .loader import DEFAULT_TEMPLATE_NAME, default_template_path, load_template
from .nodes import (
    EachNode,
    IfEqualsNode,
    IfFlagNode,
    Node,
    NodeKind,
    TextNode,
    VariableNode,
)
from .parser import ParsedTemplate, TemplateSyntaxIssue, parse_template
from .renderer import TemplateRenderer, is_truthy, render_template, to_text

__all__ = [
    # Rendering
    "TemplateRenderer",
    "render_template",
    "is_truthy",
    "to_text",
    # Parsing
    "parse_template",
    "ParsedTemplate",
    "TemplateSyntaxIssue",
    # Nodes
    "Node",
    "NodeKind",
    "TextNode",
    "VariableNode",
    "EachNode",
    "IfFlagNode",
    "IfEqualsNode",
    # Loading
    "DEFAULT_TEMPLATE_NAME",
    "default_template_path",
    "load_template",
]
