from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DeclarationKind(str, Enum):
    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    PROTOCOL = "protocol"
    ACTOR = "actor"


@dataclass(frozen=True)
class SourceFile:
    path: Path                      # absolute path
    rel_path: Path                  # path relative to the scanned source root


@dataclass(frozen=True)
class Parameter:
    name: str                       # first declared name (argument label if present)
    type_text: str                  # verbatim type, e.g. "[String: Int]"

    def __str__(self) -> str:
        return f"{self.name}: {self.type_text}"


@dataclass(frozen=True)
class DeclaredFunction:
    name: str
    is_async: bool = False
    is_throwing: bool = False
    parameters: tuple[Parameter, ...] = ()
    return_type: str | None = None  # None -> no declared return (implicit Void)
    body: str | None = None         # None -> bodiless requirement

    @property
    def parameter_list(self) -> str:
        """Comma-joined ``name: Type`` list, empty string when there are no parameters."""
        return ", ".join(str(p) for p in self.parameters)


@dataclass(frozen=True)
class DeclaredType:
    type_name: str
    functions: tuple[DeclaredFunction, ...] = ()
    kind: DeclarationKind = DeclarationKind.CLASS
    source_path: Path | None = None


@dataclass(frozen=True)
class GeneratedTestFile:
    type_name: str
    test_class_name: str            # e.g. "UserTests"
    file_name: str                  # e.g. "UserTests.swift"
    content: str


@dataclass
class FileFailure:
    path: Path
    reason: str


@dataclass
class SynthesisFailure:
    file_name: str
    reason: str


@dataclass
class BatchReport:
    """
    Outcome of one orchestrated run.

    Every per-item problem ends up here instead of aborting the batch.
    """

    files_found: int = 0
    extracted: dict[Path, list[DeclaredType]] = field(default_factory=dict)
    selected: list[DeclaredType] = field(default_factory=list)   # after the type-name filter
    written: list[Path] = field(default_factory=list)
    file_failures: list[FileFailure] = field(default_factory=list)
    synthesis_failures: list[SynthesisFailure] = field(default_factory=list)
    enrichment_failures: int = 0

    @property
    def types(self) -> list[DeclaredType]:
        return [t for types in self.extracted.values() for t in types]
