from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ExtractionError
from .models import DeclarationKind, DeclaredFunction, DeclaredType, Parameter
from .syntax import NodeKind, SwiftParser, SyntaxNode

logger = logging.getLogger(__name__)

_ENTER = 0
_EXIT = 1


@dataclass
class _ScopeFrame:
    name: str
    kind: DeclarationKind
    functions: list[DeclaredFunction] = field(default_factory=list)


def _build_function(node: SyntaxNode, source_path: Path | None) -> DeclaredFunction:
    if not node.name:
        raise ExtractionError(source_path, "function declaration without a name")
    return DeclaredFunction(
        name=node.name,
        is_async=node.is_async,
        is_throwing=node.is_throwing,
        parameters=tuple(Parameter(p.name, p.type_text.strip()) for p in node.parameters),
        return_type=node.return_type_text,
        body=node.body_text,
    )


def extract_declarations(
    root: SyntaxNode,
    source_path: Path | None = None,
) -> list[DeclaredType]:
    """
    Walk a syntax tree and collect every container declaration with its functions.

    Types are returned in the order they finish (post-order), so a nested type
    precedes the type that encloses it. Function bodies are not searched for
    further declarations, and functions outside any container are dropped.
    """
    completed: list[DeclaredType] = []
    scopes: list[_ScopeFrame] = []
    work: list[tuple[int, SyntaxNode]] = [(_ENTER, root)]

    while work:
        event, node = work.pop()

        if event == _EXIT:
            frame = scopes.pop()
            completed.append(
                DeclaredType(
                    type_name=frame.name,
                    functions=tuple(frame.functions),
                    kind=frame.kind,
                    source_path=source_path,
                )
            )
            continue

        kind = node.kind
        if kind is NodeKind.FUNCTION:
            function = _build_function(node, source_path)
            if scopes:
                scopes[-1].functions.append(function)
            else:
                logger.debug("Ignoring free function %s", function.name)
            continue

        if kind is NodeKind.CONTAINER:
            if not node.name:
                raise ExtractionError(source_path, "type declaration without a name")
            scopes.append(
                _ScopeFrame(name=node.name, kind=node.declaration_kind or DeclarationKind.CLASS)
            )
            work.append((_EXIT, node))

        # reversed so that children are visited in source order
        work.extend((_ENTER, child) for child in reversed(node.children))

    return completed


def parse_swift_source(
    source: str | bytes,
    source_path: Path | None = None,
    parser: SwiftParser | None = None,
) -> list[DeclaredType]:
    if isinstance(source, str):
        source = source.encode("utf-8")
    parsed = (parser or SwiftParser()).parse(source)
    if parsed.has_error:
        raise ExtractionError(source_path, f"syntax error near line {parsed.error_line}")
    return extract_declarations(parsed.root, source_path=source_path)


def parse_swift_file(path: Path, parser: SwiftParser | None = None) -> list[DeclaredType]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ExtractionError(path, f"cannot read file: {exc.strerror or exc}") from exc
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ExtractionError(path, "file is not valid UTF-8") from exc
    return parse_swift_source(raw, source_path=path, parser=parser)


def filter_types_by_name(
    types: list[DeclaredType], type_names: list[str] | None
) -> list[DeclaredType]:
    if not type_names:
        return types
    targets = set(type_names)
    return [t for t in types if t.type_name in targets]
