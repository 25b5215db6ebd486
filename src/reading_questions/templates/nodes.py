"""Node types of a parsed template.

A template is parsed once into a tuple of nodes. Every node is tagged with a
``NodeKind`` and keeps the raw marker text it was parsed from, so a marker the
renderer leaves unresolved can be written back exactly as it appeared.

Marker syntax:
    {{name}}                           VARIABLE
    {{#each key}} ... {{/each}}        EACH
    {{#if key}} ... {{/if}}            IF_FLAG
    {{#if (eq this "literal")}} ... {{/if}}   IF_EQUALS
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple, Union

#: Name of the variable that refers to the current item inside an each block.
ITEM_NAME = "this"


class NodeKind(Enum):
    """Tag for each node variant."""
    TEXT = "text"
    VARIABLE = "variable"
    EACH = "each"
    IF_FLAG = "if_flag"
    IF_EQUALS = "if_equals"


@dataclass(frozen=True)
class TextNode:
    """Literal text, copied to the output unchanged."""
    kind: ClassVar[NodeKind] = NodeKind.TEXT
    text: str


@dataclass(frozen=True)
class VariableNode:
    """A ``{{name}}`` marker."""
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE
    name: str
    raw: str


@dataclass(frozen=True)
class EachNode:
    """A repeated block bound to the sequence stored under ``key``."""
    kind: ClassVar[NodeKind] = NodeKind.EACH
    key: str
    children: Tuple["Node", ...]
    open_raw: str
    close_raw: str


@dataclass(frozen=True)
class IfFlagNode:
    """A conditional block guarded by the truthiness of ``key``."""
    kind: ClassVar[NodeKind] = NodeKind.IF_FLAG
    key: str
    children: Tuple["Node", ...]
    open_raw: str
    close_raw: str


@dataclass(frozen=True)
class IfEqualsNode:
    """A conditional block guarded by ``this == literal``.

    Only resolved while expanding an each block; anywhere else it is written
    back verbatim.
    """
    kind: ClassVar[NodeKind] = NodeKind.IF_EQUALS
    literal: str
    children: Tuple["Node", ...]
    open_raw: str
    close_raw: str


Node = Union[TextNode, VariableNode, EachNode, IfFlagNode, IfEqualsNode]
BlockNode = Union[EachNode, IfFlagNode, IfEqualsNode]


def to_source(nodes: Tuple[Node, ...]) -> str:
    """Serialize nodes back to template text.

    Unresolved markers come back in their original spelling, so
    ``to_source(parse(t).nodes) == t`` for any template ``t``.
    """
    parts = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(node.text)
        elif isinstance(node, VariableNode):
            parts.append(node.raw)
        else:
            parts.append(node.open_raw)
            parts.append(to_source(node.children))
            parts.append(node.close_raw)
    return "".join(parts)
