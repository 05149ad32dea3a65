from __future__ import annotations

import logging
import os
import re
import tempfile
import textwrap
from pathlib import Path
from typing import Sequence

from .errors import SynthesisError
from .models import DeclaredFunction, DeclaredType, GeneratedTestFile

logger = logging.getLogger(__name__)

INDENT = "    "
BODY_INDENT = INDENT * 2

_HEADER_TEMPLATE = """\
import XCTest
@testable import {target}

final class {test_class_name}: XCTestCase {{

    var sut: {type_name}!

    override func setUp() {{
        super.setUp()
        // System Under Test (sut) is initialized before each test.
        sut = {type_name}()
    }}

    override func tearDown() {{
        // Clean up to ensure isolation between tests.
        sut = nil
        super.tearDown()
    }}
"""


def xctest_method_name(function_name: str) -> str:
    return "test" + function_name[:1].upper() + function_name[1:]


def fallback_body_lines(function: DeclaredFunction) -> list[str]:
    lines = ["// AI TODO"]
    if function.is_async:
        lines.append("// Await async result")
    if function.is_throwing:
        lines.append("// Use XCTAssertThrowsError or try")
    if function.parameters:
        lines.append(f"// AI TODO: Provide values for parameters: {function.parameter_list}")
    lines.append(f"// sut.{function.name}(...)")
    return lines


def _indent_block(text: str, indent: str) -> str:
    return "\n".join(indent + line if line.strip() else "" for line in text.splitlines())


def render_test_method(function: DeclaredFunction, generated_body: str | None = None) -> str:
    qualifiers = ""
    if function.is_async:
        qualifiers += "async "
    if function.is_throwing:
        qualifiers += "throws "

    generated = textwrap.dedent((generated_body or "").strip("\n")).strip()
    if generated:
        body = _indent_block(generated, BODY_INDENT)
    else:
        body = "\n".join(BODY_INDENT + line for line in fallback_body_lines(function))

    return (
        f"{INDENT}func {xctest_method_name(function.name)}() {qualifiers}{{\n"
        f"{body}\n"
        f"{INDENT}}}\n"
    )


def render_test_file(
    declared_type: DeclaredType,
    target: str,
    bodies: Sequence[str | None] | None = None,
    test_class_name: str | None = None,
    extension: str = ".swift",
) -> GeneratedTestFile:
    """
    Render the XCTest case for one type.

    ``bodies`` is aligned with ``declared_type.functions``; a missing or blank
    entry falls back to the placeholder body.
    """
    test_class_name = test_class_name or f"{declared_type.type_name}Tests"
    if bodies is None:
        bodies = [None] * len(declared_type.functions)
    if len(bodies) != len(declared_type.functions):
        raise ValueError(
            f"Expected {len(declared_type.functions)} bodies for "
            f"{declared_type.type_name}, got {len(bodies)}"
        )

    code = _HEADER_TEMPLATE.format(
        target=target,
        test_class_name=test_class_name,
        type_name=declared_type.type_name,
    )
    for function, body in zip(declared_type.functions, bodies):
        code += "\n" + render_test_method(function, body)
    code += "}\n"

    return GeneratedTestFile(
        type_name=declared_type.type_name,
        test_class_name=test_class_name,
        file_name=f"{test_class_name}{extension}",
        content=code,
    )


def _path_prefix(source_path: Path | None, source_root: Path | None) -> str:
    if source_path is None:
        return ""
    rel = source_path
    if source_root is not None:
        try:
            rel = source_path.relative_to(source_root)
        except ValueError:
            pass
    parts = list(rel.with_suffix("").parts)
    if rel.is_absolute():
        parts = parts[1:]
    chunks = [c for part in parts for c in re.split(r"[^0-9A-Za-z]+", part) if c]
    return "".join(c[:1].upper() + c[1:] for c in chunks)


def plan_test_class_names(
    types: Sequence[DeclaredType],
    source_root: Path | None = None,
) -> list[str]:
    """
    Assign a unique test class name to every type, in order.

    The first ``Foo`` gets ``FooTests``. A later ``Foo`` is namespaced by its
    source path (``FeaturesModels_FooTests``) and, if that is taken as well,
    numbered (``FeaturesModels_FooTests_2``).
    """
    taken: set[str] = set()
    names: list[str] = []
    for declared_type in types:
        base = f"{declared_type.type_name}Tests"
        name = base
        if name in taken:
            prefix = _path_prefix(declared_type.source_path, source_root)
            if prefix:
                name = f"{prefix}_{base}"
            candidate, counter = name, 2
            while candidate in taken:
                candidate = f"{name}_{counter}"
                counter += 1
            name = candidate
            logger.warning(
                "Test class name %s already used; writing %s from %s as %s",
                base,
                declared_type.type_name,
                declared_type.source_path or "<source>",
                name,
            )
        taken.add(name)
        names.append(name)
    return names


def write_test_file(generated: GeneratedTestFile, output_dir: Path) -> Path:
    """
    Persist ``generated`` atomically under ``output_dir``, creating it if missing.
    """
    target = output_dir / generated.file_name
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SynthesisError(generated.file_name, f"cannot create {output_dir}: {exc}") from exc

    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=output_dir,
            prefix=f".{generated.file_name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(generated.content)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, target)
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise SynthesisError(generated.file_name, str(exc)) from exc

    return target
