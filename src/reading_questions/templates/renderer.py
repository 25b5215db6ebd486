"""Template renderer.

Renders ``{{variable}}``, ``{{#each}}`` and ``{{#if}}`` markers against a
context dictionary. The template is parsed into a node tree (see ``parser``)
and resolved by three ordered passes, each a walk over the tree produced by
the previous one:

1. Scalar substitution: every ``{{name}}`` whose key holds a scalar becomes
   text. Keys missing from the context stay as literal markers.
2. Each expansion: every ``{{#each key}}`` block is repeated once per item of
   the sequence under ``key``. Inside an instance ``{{this}}`` becomes the
   item and ``{{#if (eq this "x")}}`` blocks are kept only for matching items.
   A missing or non-sequence key renders the block empty.
3. Flag conditionals: ``{{#if key}}`` blocks are unwrapped when ``key`` is
   truthy and dropped otherwise.

Substituted values are never read as markers. Item text written by pass 2 is
read for flag blocks only, which pass 3 then resolves; any other marker in it
stays literal. Rendering does not raise: malformed markers are written back
as they appeared.

Example:
    >>> render_template(
    ...     "Bonjour {{name}}! {{#if show}}Bienvenue.{{/if}}",
    ...     {"name": "Marie", "show": "yes"}
    ... )
    'Bonjour Marie! Bienvenue.'
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import replace
from decimal import Decimal
from numbers import Number
from typing import Any, List, Set, Tuple

from .nodes import (
    ITEM_NAME,
    EachNode,
    IfEqualsNode,
    IfFlagNode,
    Node,
    TextNode,
    VariableNode,
    to_source,
)
from .parser import ParsedTemplate, TemplateSyntaxIssue, parse_template

Nodes = Tuple[Node, ...]


def to_text(value: Any) -> str:
    """Textual form of a context value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value):
        # Plain decimal digits, never exponent notation
        return format(Decimal(repr(value)), "f")
    return str(value)


def is_sequence(value: Any) -> bool:
    """True for values an each block can iterate (strings excluded)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_scalar(value: Any) -> bool:
    """True for values a variable marker can be replaced with."""
    return value is None or isinstance(value, (str, Number))


def is_truthy(context: Mapping[str, Any], key: str) -> bool:
    """Truthiness of a flag: present and with a non-empty textual form.

    Booleans count as themselves and sequences as truthy when non-empty.
    """
    if key not in context:
        return False
    value = context[key]
    if isinstance(value, bool):
        return value
    if is_sequence(value):
        return len(value) > 0
    return to_text(value) != ""


class TemplateRenderer:
    """Renders templates against a context.

    The renderer is stateless apart from the shared parse cache, so a single
    instance can be reused across calls and threads.
    """

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Render a template.

        Args:
            template: Template text
            context: Values by key; scalars for variables and flags,
                sequences for each blocks

        Returns:
            The rendered text
        """
        nodes = self.parse(template).nodes
        nodes = self._substitute(nodes, context)
        nodes = self._expand(nodes, context)
        nodes = self._resolve_flags(nodes, context)
        return to_source(nodes)

    @staticmethod
    def parse(template: str) -> ParsedTemplate:
        """Parse (or fetch from cache) the node tree for a template."""
        return parse_template(template)

    # Pass 1

    def _substitute(self, nodes: Nodes, context: Mapping[str, Any]) -> Nodes:
        result: List[Node] = []
        for node in nodes:
            if isinstance(node, VariableNode):
                if node.name in context and is_scalar(context[node.name]):
                    result.append(TextNode(to_text(context[node.name])))
                else:
                    result.append(node)
            elif isinstance(node, TextNode):
                result.append(node)
            else:
                result.append(replace(node, children=self._substitute(node.children, context)))
        return tuple(result)

    # Pass 2

    def _expand(self, nodes: Nodes, context: Mapping[str, Any]) -> Nodes:
        result: List[Node] = []
        for node in nodes:
            if isinstance(node, EachNode):
                items = context.get(node.key)
                if is_sequence(items):
                    for item in items:
                        result.extend(self._instantiate(node.children, item, context))
            elif isinstance(node, (IfFlagNode, IfEqualsNode)):
                result.append(replace(node, children=self._expand(node.children, context)))
            else:
                result.append(node)
        return tuple(result)

    def _instantiate(self, nodes: Nodes, item: Any, context: Mapping[str, Any]) -> Nodes:
        """One copy of an each body bound to ``item``."""
        result: List[Node] = []
        for node in nodes:
            if isinstance(node, VariableNode) and node.name == ITEM_NAME:
                result.extend(self._item_nodes(to_text(item)))
            elif isinstance(node, IfEqualsNode):
                if to_text(item) == node.literal:
                    result.extend(self._instantiate(node.children, item, context))
            elif isinstance(node, EachNode):
                # Nested blocks bind their own item
                result.extend(self._expand((node,), context))
            elif isinstance(node, IfFlagNode):
                result.append(replace(node, children=self._instantiate(node.children, item, context)))
            else:
                result.append(node)
        return tuple(result)

    def _item_nodes(self, text: str) -> Nodes:
        """Nodes for item text written in place of ``{{this}}``.

        Flag blocks in the item text are left for pass 3; every other marker
        is literal text, since passes 1 and 2 have already run.
        """
        return self._keep_flags(self.parse(text).nodes)

    def _keep_flags(self, nodes: Nodes) -> Nodes:
        result: List[Node] = []
        for node in nodes:
            if isinstance(node, IfFlagNode):
                result.append(replace(node, children=self._keep_flags(node.children)))
            elif isinstance(node, TextNode):
                result.append(node)
            else:
                result.append(TextNode(to_source((node,))))
        return tuple(result)

    # Pass 3

    def _resolve_flags(self, nodes: Nodes, context: Mapping[str, Any]) -> Nodes:
        result: List[Node] = []
        for node in nodes:
            if isinstance(node, IfFlagNode):
                if is_truthy(context, node.key):
                    result.extend(self._resolve_flags(node.children, context))
            elif isinstance(node, (EachNode, IfEqualsNode)):
                result.append(replace(node, children=self._resolve_flags(node.children, context)))
            else:
                result.append(node)
        return tuple(result)

    # Introspection

    @classmethod
    def extract_variables(cls, template: str) -> Set[str]:
        """Keys a template reads: variables, each keys and flag guards.

        ``this`` is excluded since it names the current item, not a context key.
        """
        names: Set[str] = set()

        def visit(nodes: Nodes) -> None:
            for node in nodes:
                if isinstance(node, VariableNode):
                    if node.name != ITEM_NAME:
                        names.add(node.name)
                elif isinstance(node, (EachNode, IfFlagNode)):
                    names.add(node.key)
                    visit(node.children)
                elif isinstance(node, IfEqualsNode):
                    visit(node.children)

        visit(cls.parse(template).nodes)
        return names

    def missing_variables(self, template: str, context: Mapping[str, Any]) -> List[str]:
        """Sorted keys the template reads that the context does not supply."""
        return sorted(name for name in self.extract_variables(template) if name not in context)

    @classmethod
    def validate_template_syntax_detailed(cls, template: str) -> List[TemplateSyntaxIssue]:
        """Return syntax issues with locations (empty if the template is well formed)."""
        return list(cls.parse(template).issues)

    @classmethod
    def validate_template_syntax(cls, template: str) -> List[str]:
        """Return syntax issues as formatted messages."""
        return [str(issue) for issue in cls.validate_template_syntax_detailed(template)]


_default_renderer = TemplateRenderer()


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """Convenience function to render a template with a shared renderer.

    Example:
        >>> render_template("{{#each items}}[{{this}}]{{/each}}", {"items": ["a", "b", "c"]})
        '[a][b][c]'
    """
    return _default_renderer.render(template, context)
