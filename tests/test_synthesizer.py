from pathlib import Path

import pytest

from swift_testgen.errors import SynthesisError
from swift_testgen.models import DeclarationKind, DeclaredFunction, DeclaredType, Parameter
from swift_testgen.synthesizer import (
    fallback_body_lines,
    plan_test_class_names,
    render_test_file,
    render_test_method,
    write_test_file,
    xctest_method_name,
)

FULL_CALL = DeclaredFunction(
    name="fullCall",
    is_async=True,
    is_throwing=True,
    parameters=(Parameter("name", "String"), Parameter("age", "Int")),
    return_type="Bool",
    body="{\n    return true\n}",
)
SYNC_CALL = DeclaredFunction(name="syncCall")


def make_service() -> DeclaredType:
    return DeclaredType(type_name="TestService", functions=(SYNC_CALL, FULL_CALL))


def test_xctest_method_name_capitalizes_first_letter() -> None:
    assert xctest_method_name("fullCall") == "testFullCall"
    assert xctest_method_name("URLSession") == "testURLSession"
    assert xctest_method_name("x") == "testX"


def test_render_test_file_matches_expected_layout() -> None:
    generated = render_test_file(make_service(), target="MyApp")

    assert generated.file_name == "TestServiceTests.swift"
    assert generated.test_class_name == "TestServiceTests"
    assert generated.content == (
        "import XCTest\n"
        "@testable import MyApp\n"
        "\n"
        "final class TestServiceTests: XCTestCase {\n"
        "\n"
        "    var sut: TestService!\n"
        "\n"
        "    override func setUp() {\n"
        "        super.setUp()\n"
        "        // System Under Test (sut) is initialized before each test.\n"
        "        sut = TestService()\n"
        "    }\n"
        "\n"
        "    override func tearDown() {\n"
        "        // Clean up to ensure isolation between tests.\n"
        "        sut = nil\n"
        "        super.tearDown()\n"
        "    }\n"
        "\n"
        "    func testSyncCall() {\n"
        "        // AI TODO\n"
        "        // sut.syncCall(...)\n"
        "    }\n"
        "\n"
        "    func testFullCall() async throws {\n"
        "        // AI TODO\n"
        "        // Await async result\n"
        "        // Use XCTAssertThrowsError or try\n"
        "        // AI TODO: Provide values for parameters: name: String, age: Int\n"
        "        // sut.fullCall(...)\n"
        "    }\n"
        "}\n"
    )


def test_type_without_functions_still_renders_a_suite() -> None:
    generated = render_test_file(
        DeclaredType(type_name="Direction", kind=DeclarationKind.ENUM), target="MyApp"
    )

    assert generated.file_name == "DirectionTests.swift"
    assert "final class DirectionTests: XCTestCase {" in generated.content
    assert "func test" not in generated.content
    assert generated.content.endswith("    }\n}\n")


def test_fallback_body_is_deterministic() -> None:
    first = render_test_method(FULL_CALL)
    second = render_test_method(FULL_CALL, "   \n  ")

    assert first == second
    assert fallback_body_lines(SYNC_CALL) == ["// AI TODO", "// sut.syncCall(...)"]


def test_enriched_body_is_reindented() -> None:
    body = "    let result = try await sut.fullCall(name: \"A\", age: 1)\n\n    XCTAssertTrue(result)"

    method = render_test_method(FULL_CALL, body)

    assert method == (
        "    func testFullCall() async throws {\n"
        "        let result = try await sut.fullCall(name: \"A\", age: 1)\n"
        "\n"
        "        XCTAssertTrue(result)\n"
        "    }\n"
    )


def test_bodies_are_aligned_with_functions() -> None:
    generated = render_test_file(make_service(), target="MyApp", bodies=[None, "XCTAssertTrue(true)"])

    sync_index = generated.content.index("func testSyncCall()")
    full_index = generated.content.index("func testFullCall()")
    assert sync_index < full_index
    assert "// sut.syncCall(...)" in generated.content
    assert "        XCTAssertTrue(true)\n" in generated.content
    assert "// sut.fullCall(...)" not in generated.content


def test_bodies_length_mismatch_is_rejected() -> None:
    with pytest.raises(ValueError):
        render_test_file(make_service(), target="MyApp", bodies=["only one"])


def test_plan_test_class_names_namespaces_collisions(tmp_path: Path) -> None:
    root = tmp_path / "Sources" / "MyApp"
    types = [
        DeclaredType(type_name="Config", source_path=root / "App" / "Config.swift"),
        DeclaredType(type_name="User", source_path=root / "User.swift"),
        DeclaredType(type_name="Config", source_path=root / "network-layer" / "Client.swift"),
        DeclaredType(type_name="Config", source_path=root / "network-layer" / "Client.swift"),
    ]

    names = plan_test_class_names(types, source_root=root)

    assert names == [
        "ConfigTests",
        "UserTests",
        "NetworkLayerClient_ConfigTests",
        "NetworkLayerClient_ConfigTests_2",
    ]
    assert len(set(names)) == len(names)


def test_plan_test_class_names_without_source_path() -> None:
    types = [DeclaredType(type_name="A"), DeclaredType(type_name="A")]

    assert plan_test_class_names(types) == ["ATests", "ATests_2"]


def test_write_test_file_creates_directories(tmp_path: Path) -> None:
    output_dir = tmp_path / "Tests" / "MyAppTests"
    generated = render_test_file(make_service(), target="MyApp")

    path = write_test_file(generated, output_dir)

    assert path == output_dir / "TestServiceTests.swift"
    assert path.read_text(encoding="utf-8") == generated.content
    # no temporary files left behind
    assert [p.name for p in output_dir.iterdir()] == ["TestServiceTests.swift"]


def test_write_test_file_overwrites_and_is_idempotent(tmp_path: Path) -> None:
    generated = render_test_file(make_service(), target="MyApp")

    first = write_test_file(generated, tmp_path).read_bytes()
    second = write_test_file(render_test_file(make_service(), target="MyApp"), tmp_path).read_bytes()

    assert first == second


def test_write_test_file_failure_raises_synthesis_error(tmp_path: Path) -> None:
    blocker = tmp_path / "Tests"
    blocker.write_text("not a directory", encoding="utf-8")
    generated = render_test_file(make_service(), target="MyApp")

    with pytest.raises(SynthesisError) as excinfo:
        write_test_file(generated, blocker)

    assert excinfo.value.file_name == "TestServiceTests.swift"
