from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from swift_testgen.errors import ExtractionError
from swift_testgen.extractor import extract_declarations, filter_types_by_name
from swift_testgen.models import DeclarationKind, DeclaredType, Parameter
from swift_testgen.syntax import NodeKind


@dataclass
class FakeNode:
    """In-memory stand-in for a parsed syntax node."""

    kind: NodeKind = NodeKind.OTHER
    children: list[FakeNode] = field(default_factory=list)
    name: str | None = None
    declaration_kind: DeclarationKind | None = None
    is_async: bool = False
    is_throwing: bool = False
    parameters: list[Parameter] = field(default_factory=list)
    return_type_text: str | None = None
    body_text: str | None = None


def container(name: str, *children: FakeNode, kind: DeclarationKind = DeclarationKind.CLASS) -> FakeNode:
    return FakeNode(
        kind=NodeKind.CONTAINER,
        name=name,
        declaration_kind=kind,
        children=[FakeNode(children=list(children))],  # body block
    )


def func(name: str, *children: FakeNode, **kwargs) -> FakeNode:
    return FakeNode(kind=NodeKind.FUNCTION, name=name, children=list(children), **kwargs)


def source_file(*children: FakeNode) -> FakeNode:
    return FakeNode(children=list(children))


def test_functions_keep_declaration_order() -> None:
    root = source_file(container("Sorter", func("a"), func("b"), func("c"), func("d")))

    types = extract_declarations(root)

    assert [t.type_name for t in types] == ["Sorter"]
    assert [f.name for f in types[0].functions] == ["a", "b", "c", "d"]


def test_qualifiers_are_independent() -> None:
    root = source_file(
        container(
            "Service",
            func("asyncOnly", is_async=True),
            func("throwingOnly", is_throwing=True),
            func("both", is_async=True, is_throwing=True),
            func("neither"),
        )
    )

    functions = extract_declarations(root)[0].functions

    assert [(f.is_async, f.is_throwing) for f in functions] == [
        (True, False),
        (False, True),
        (True, True),
        (False, False),
    ]


def test_signature_metadata_is_copied_verbatim() -> None:
    root = source_file(
        container(
            "TestService",
            func(
                "fullCall",
                is_async=True,
                is_throwing=True,
                parameters=[Parameter("name", " String "), Parameter("age", "Int")],
                return_type_text="Bool",
                body_text="{\n    return true\n}",
            ),
            func("noReturn"),
        )
    )

    full_call, no_return = extract_declarations(root)[0].functions

    assert full_call.parameters == (Parameter("name", "String"), Parameter("age", "Int"))
    assert full_call.return_type == "Bool"
    assert full_call.body == "{\n    return true\n}"
    assert no_return.return_type is None
    assert no_return.body is None


def test_nested_types_are_emitted_flat_in_completion_order() -> None:
    root = source_file(
        container(
            "Outer",
            func("first"),
            container("Inner", func("innerWork"), kind=DeclarationKind.STRUCT),
            func("second"),
        ),
        container("Sibling", kind=DeclarationKind.ENUM),
    )

    types = extract_declarations(root)

    assert [t.type_name for t in types] == ["Inner", "Outer", "Sibling"]
    assert [f.name for f in types[0].functions] == ["innerWork"]
    assert [f.name for f in types[1].functions] == ["first", "second"]
    assert types[2].functions == ()
    assert [t.kind for t in types] == [
        DeclarationKind.STRUCT,
        DeclarationKind.CLASS,
        DeclarationKind.ENUM,
    ]


def test_free_functions_are_dropped() -> None:
    root = source_file(func("helper"), container("Model", func("run")))

    types = extract_declarations(root)

    assert [(t.type_name, [f.name for f in t.functions]) for t in types] == [("Model", ["run"])]


def test_function_bodies_are_not_searched() -> None:
    local_type = container("LocalType", func("localFunc"))
    root = source_file(container("Host", func("work", FakeNode(children=[local_type]))))

    types = extract_declarations(root)

    assert [t.type_name for t in types] == ["Host"]
    assert [f.name for f in types[0].functions] == ["work"]


def test_source_path_is_attached(tmp_path: Path) -> None:
    path = tmp_path / "Model.swift"
    types = extract_declarations(source_file(container("Model")), source_path=path)

    assert types == [DeclaredType(type_name="Model", kind=DeclarationKind.CLASS, source_path=path)]


def test_deep_nesting_does_not_recurse() -> None:
    node = container("Level0")
    for depth in range(1, 3000):
        node = container(f"Level{depth}", node)

    types = extract_declarations(source_file(node))

    assert len(types) == 3000
    assert types[0].type_name == "Level0"
    assert types[-1].type_name == "Level2999"


def test_unnamed_container_is_an_extraction_error() -> None:
    root = source_file(FakeNode(kind=NodeKind.CONTAINER, declaration_kind=DeclarationKind.CLASS))

    with pytest.raises(ExtractionError):
        extract_declarations(root, source_path=Path("Broken.swift"))


def test_filter_types_by_name() -> None:
    types = extract_declarations(source_file(container("A"), container("B"), container("C")))

    assert [t.type_name for t in filter_types_by_name(types, ["C", "A"])] == ["A", "C"]
    assert filter_types_by_name(types, None) == types
