"""
Parser boundary.

The extractor only talks to :class:`SyntaxNode`. ``TreeSitterNode`` adapts the
tree produced by tree-sitter with the Swift grammar; tests may hand the
extractor any other object exposing the same attributes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Protocol, Sequence

import tree_sitter
import tree_sitter_swift

from .models import DeclarationKind, Parameter


class NodeKind(Enum):
    CONTAINER = "container"
    FUNCTION = "function"
    OTHER = "other"


class SyntaxNode(Protocol):
    kind: NodeKind
    children: Sequence[SyntaxNode]
    name: str | None
    declaration_kind: DeclarationKind | None
    is_async: bool
    is_throwing: bool
    parameters: Sequence[Parameter]
    return_type_text: str | None
    body_text: str | None


# tree-sitter-swift node types
_CLASS_LIKE = "class_declaration"
_PROTOCOL = "protocol_declaration"
_FUNCTION_TYPES = frozenset({"function_declaration", "protocol_function_declaration"})
_THROWS_TYPES = frozenset({"throws", "rethrows"})
_ASYNC_RE = re.compile(r"\basync\b")
_THROWS_RE = re.compile(r"\b(?:re)?throws\b")

# `class_declaration` also covers `extension`, which is not a container
_CONTAINER_KEYWORDS = {
    "class": DeclarationKind.CLASS,
    "struct": DeclarationKind.STRUCT,
    "enum": DeclarationKind.ENUM,
    "actor": DeclarationKind.ACTOR,
    "protocol": DeclarationKind.PROTOCOL,
}


@lru_cache(maxsize=1)
def swift_language() -> tree_sitter.Language:
    return tree_sitter.Language(tree_sitter_swift.language())


class TreeSitterNode:
    """Read-only view of a ``tree_sitter.Node`` shaped like :class:`SyntaxNode`."""

    __slots__ = ("node", "source")

    def __init__(self, node: Any, source: bytes) -> None:
        self.node = node
        self.source = source

    def __repr__(self) -> str:
        return f"TreeSitterNode({self.node.type!r}, line={self.node.start_point[0] + 1})"

    def _text(self, node: Any) -> str:
        return self._span(node.start_byte, node.end_byte)

    def _span(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8").strip()

    @property
    def declaration_kind(self) -> DeclarationKind | None:
        if self.node.type == _PROTOCOL:
            return DeclarationKind.PROTOCOL
        if self.node.type != _CLASS_LIKE:
            return None
        keyword = self.node.child_by_field_name("declaration_kind")
        if keyword is None:
            return None
        return _CONTAINER_KEYWORDS.get(keyword.type)

    @property
    def kind(self) -> NodeKind:
        if self.node.type in _FUNCTION_TYPES:
            return NodeKind.FUNCTION
        if self.declaration_kind is not None:
            return NodeKind.CONTAINER
        return NodeKind.OTHER

    @property
    def children(self) -> list[TreeSitterNode]:
        return [TreeSitterNode(child, self.source) for child in self.node.children]

    @property
    def name(self) -> str | None:
        name_node = self.node.child_by_field_name("name")
        return self._text(name_node) if name_node is not None else None

    def _effects_text(self) -> str:
        """Source between the parameter clause and the return type or body."""
        start = self.node.start_byte
        for child in self.node.children:
            if child.type == ")":
                start = child.end_byte
        end = self.node.end_byte
        for field_name in ("return_type", "body"):
            boundary = self.node.child_by_field_name(field_name)
            if boundary is not None:
                end = min(end, boundary.start_byte)
        return self.source[start:end].decode("utf-8") if start < end else ""

    # qualifiers are direct children of the declaration, never inside the body
    @property
    def is_async(self) -> bool:
        if any(child.type == "async" for child in self.node.children):
            return True
        return _ASYNC_RE.search(self._effects_text()) is not None

    @property
    def is_throwing(self) -> bool:
        if any(child.type in _THROWS_TYPES for child in self.node.children):
            return True
        return _THROWS_RE.search(self._effects_text()) is not None

    @property
    def parameters(self) -> list[Parameter]:
        params: list[Parameter] = []
        for child in self.node.children:
            if child.type != "parameter":
                continue
            first = child.child_by_field_name("external_name") or child.child_by_field_name("name")
            type_node = child.child_by_field_name("type")
            if first is None or type_node is None:
                continue
            # `inout`, `@escaping` and friends sit between the colon and the type node
            start = type_node.start_byte
            for part in child.children:
                if part.type == ":" and part.end_byte <= start:
                    start = part.end_byte
                    break
                if part.type == "parameter_modifiers":
                    start = min(start, part.start_byte)
                    break
            params.append(
                Parameter(name=self._text(first), type_text=self._span(start, type_node.end_byte))
            )
        return params

    @property
    def return_type_text(self) -> str | None:
        return_node = self.node.child_by_field_name("return_type")
        return self._text(return_node) if return_node is not None else None

    @property
    def body_text(self) -> str | None:
        body_node = self.node.child_by_field_name("body")
        return self._text(body_node) if body_node is not None else None


@dataclass
class ParsedSource:
    tree: Any                       # tree_sitter.Tree
    root: TreeSitterNode
    error_line: int | None = None   # first line with a syntax error, 1-based

    @property
    def has_error(self) -> bool:
        return self.error_line is not None


def _first_error_line(root: Any) -> int | None:
    if not root.has_error:
        return None
    pending = [root]
    while pending:
        node = pending.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        # keep document order: children pushed in reverse
        pending.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return root.start_point[0] + 1


@dataclass
class SwiftParser:
    """
    Thin wrapper around ``tree_sitter.Parser`` loaded with the Swift grammar.

    Usage::

        parsed = SwiftParser().parse(source_bytes)
        if not parsed.has_error:
            walk(parsed.root)
    """

    _parser: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser(swift_language())

    def parse(self, source: bytes) -> ParsedSource:
        tree = self._parser.parse(source)
        return ParsedSource(
            tree=tree,
            root=TreeSitterNode(tree.root_node, source),
            error_line=_first_error_line(tree.root_node),
        )
