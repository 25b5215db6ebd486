"""Template parser.

Turns template text into a tree of ``nodes``. Parsing never fails: anything
that does not form a well-paired marker is kept as literal text and reported
as a ``TemplateSyntaxIssue`` so callers can surface it (see
``TemplateRenderer.validate_template_syntax``).

Pairing rules:
- ``{{/each}}`` closes the nearest open ``{{#each}}``; ``{{/if}}`` closes the
  nearest open ``{{#if ...}}`` (flag or equality form).
- A closer that has no open block of its family is literal text.
- A block still open when a closer of the other family closes an enclosing
  block, or when the template ends, is unclosed: its opening marker becomes
  literal text and its contents are kept in place.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Tuple

from .nodes import (
    EachNode,
    IfEqualsNode,
    IfFlagNode,
    Node,
    TextNode,
    VariableNode,
)

# Anything that looks like a marker. Candidates that don't match
# _MARKER_PATTERN are reported as malformed and kept as text.
_CANDIDATE_PATTERN = re.compile(r'\{\{[^{}]*\}\}')

_MARKER_PATTERN = re.compile(
    r'\{\{(?:'
    r'#each\s+(?P<each>\w+)\s*'
    r'|#if\s+\(\s*eq\s+this\s+(?:"(?P<eq_dq>[^"]*)"|\'(?P<eq_sq>[^\']*)\')\s*\)\s*'
    r'|#if\s+(?P<flag>\w+)\s*'
    r'|/(?P<close>each|if)\s*'
    r'|\s*(?P<var>\w+)\s*'
    r')\}\}'
)

_EACH = "each"
_IF = "if"


@dataclass(frozen=True)
class TemplateSyntaxIssue:
    """A template syntax problem with location information."""
    message: str
    line: int
    column: int
    snippet: str
    issue_type: str  # 'unclosed_block', 'unmatched_closer', 'malformed_marker'

    def __str__(self) -> str:
        """Format issue message with location."""
        return (
            f"{self.issue_type} at line {self.line}, column {self.column}: {self.message}\n"
            f"  {self.snippet}"
        )


@dataclass(frozen=True)
class ParsedTemplate:
    """Result of parsing a template string."""
    source: str
    nodes: Tuple[Node, ...]
    issues: Tuple[TemplateSyntaxIssue, ...] = ()


@dataclass
class _Frame:
    """An open block while its children are being collected."""
    family: str | None  # None for the root frame
    open_raw: str = ""
    position: int = 0
    key: str = ""
    literal: str | None = None
    children: List[Node] = field(default_factory=list)

    def append(self, node: Node) -> None:
        # Keep adjacent literal text in a single node
        if isinstance(node, TextNode):
            if not node.text:
                return
            if self.children and isinstance(self.children[-1], TextNode):
                self.children[-1] = TextNode(self.children[-1].text + node.text)
                return
        self.children.append(node)

    def close(self, close_raw: str) -> Node:
        children = tuple(self.children)
        if self.family == _EACH:
            return EachNode(self.key, children, self.open_raw, close_raw)
        if self.literal is not None:
            return IfEqualsNode(self.literal, children, self.open_raw, close_raw)
        return IfFlagNode(self.key, children, self.open_raw, close_raw)


class TemplateParser:
    """Single-use parser for one template string."""

    def __init__(self, source: str):
        self.source = source
        self._stack: List[_Frame] = [_Frame(family=None)]
        self._issues: List[TemplateSyntaxIssue] = []

    def parse(self) -> ParsedTemplate:
        """Parse the template into nodes and syntax issues."""
        position = 0
        for match in _CANDIDATE_PATTERN.finditer(self.source):
            self._top.append(TextNode(self.source[position:match.start()]))
            self._handle_candidate(match)
            position = match.end()
        self._top.append(TextNode(self.source[position:]))

        while len(self._stack) > 1:
            frame = self._stack.pop()
            self._report(
                f"'{frame.open_raw}' has no matching '{{{{/{frame.family}}}}}'.",
                frame.position,
                "unclosed_block",
            )
            self._flatten(frame)

        return ParsedTemplate(
            source=self.source,
            nodes=tuple(self._stack[0].children),
            issues=tuple(sorted(self._issues, key=lambda i: (i.line, i.column))),
        )

    @property
    def _top(self) -> _Frame:
        return self._stack[-1]

    def _handle_candidate(self, candidate: re.Match) -> None:
        raw = candidate.group(0)
        match = _MARKER_PATTERN.fullmatch(raw)
        if match is None:
            self._report(
                f"Malformed marker '{raw}'. Expected {{{{name}}}}, {{{{#each key}}}}, "
                "{{#if key}}, {{#if (eq this \"value\")}} or a closing marker.",
                candidate.start(),
                "malformed_marker",
            )
            self._top.append(TextNode(raw))
            return

        if match.group("var") is not None:
            self._top.append(VariableNode(match.group("var"), raw))
        elif match.group("each") is not None:
            self._stack.append(_Frame(_EACH, raw, candidate.start(), key=match.group("each")))
        elif match.group("flag") is not None:
            self._stack.append(_Frame(_IF, raw, candidate.start(), key=match.group("flag")))
        elif match.group("close") is not None:
            self._close(match.group("close"), raw, candidate.start())
        else:
            literal = match.group("eq_dq")
            if literal is None:
                literal = match.group("eq_sq")
            self._stack.append(_Frame(_IF, raw, candidate.start(), literal=literal))

    def _close(self, family: str, raw: str, position: int) -> None:
        depth = None
        for index in range(len(self._stack) - 1, 0, -1):
            if self._stack[index].family == family:
                depth = index
                break

        if depth is None:
            self._report(
                f"'{raw}' has no matching opening marker.", position, "unmatched_closer"
            )
            self._top.append(TextNode(raw))
            return

        # Blocks of the other family opened inside this one are left unclosed
        while len(self._stack) - 1 > depth:
            frame = self._stack.pop()
            self._report(
                f"'{frame.open_raw}' is closed by '{raw}' before its own closing marker.",
                frame.position,
                "unclosed_block",
            )
            self._flatten(frame)

        frame = self._stack.pop()
        self._top.append(frame.close(raw))

    def _flatten(self, frame: _Frame) -> None:
        self._top.append(TextNode(frame.open_raw))
        for child in frame.children:
            self._top.append(child)

    def _report(self, message: str, position: int, issue_type: str) -> None:
        line, column = get_line_col(self.source, position)
        self._issues.append(TemplateSyntaxIssue(
            message=message,
            line=line,
            column=column,
            snippet=get_snippet(self.source, position),
            issue_type=issue_type,
        ))


@lru_cache(maxsize=64)
def parse_template(source: str) -> ParsedTemplate:
    """Parse ``source`` into a ``ParsedTemplate``.

    Results are cached by template text; parsed templates are immutable.
    """
    return TemplateParser(source).parse()


def get_line_col(template: str, position: int) -> Tuple[int, int]:
    """Get 1-indexed line and column numbers for a position in the template."""
    lines = template[:position].split('\n')
    return len(lines), len(lines[-1]) + 1


def get_snippet(template: str, position: int, context: int = 20) -> str:
    """Get a single-line snippet of text around a position, with the position marked."""
    start = max(0, position - context)
    end = min(len(template), position + context)
    before = template[start:position].replace('\n', '\\n')
    after = template[position:end].replace('\n', '\\n')
    return f"{before}⮜HERE⮞{after}"
